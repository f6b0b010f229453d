"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Every write goes through
a UnitOfWork so the inventory ledger and the reservation rows change in one
transaction or not at all.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from types import TracebackType
from typing import Callable, Generic, Self, TypeVar

from reservations.domain import (
    Event,
    EventId,
    Reservation,
    ReservationId,
    ReservationStatus,
    UserId,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BookingReferenceCollision(Exception):
    """Raised by ReservationStore.add when the booking reference is taken."""


@dataclass(frozen=True)
class ReservationFilter:
    """Optional criteria for listing reservations."""

    user_id: UserId | None = None
    event_id: EventId | None = None
    status: ReservationStatus | None = None


@dataclass(frozen=True)
class EventFilter:
    """Optional criteria for browsing published events.

    ``on_date`` matches a single calendar day (UTC) and takes precedence over
    the ``starts_from``/``starts_until`` range.
    """

    search: str | None = None
    city: str | None = None
    on_date: date | None = None
    starts_from: date | None = None
    starts_until: date | None = None


@dataclass(frozen=True)
class PageRequest:
    number: int = 1
    size: int = 10

    def __post_init__(self) -> None:
        if self.number < 1:
            raise ValueError("Page number must be at least 1")
        if self.size < 1:
            raise ValueError("Page size must be at least 1")

    @property
    def offset(self) -> int:
        return (self.number - 1) * self.size


@dataclass(frozen=True)
class Page(Generic[T]):
    items: tuple[T, ...]
    total: int
    request: PageRequest

    @property
    def has_next(self) -> bool:
        return self.request.offset + len(self.items) < self.total


class EventStore(ABC):
    """Interface for the inventory ledger held on events."""

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event with its venue, or None if not found."""
        ...

    @abstractmethod
    def get_event_for_update(self, event_id: EventId) -> Event | None:
        """Return an event by ID and lock it until the unit of work ends."""
        ...

    @abstractmethod
    def save_available_tickets(self, event: Event) -> None:
        """Persist the event's available ticket count."""
        ...

    @abstractmethod
    def list_published(self, criteria: EventFilter, page: PageRequest) -> Page[Event]:
        """Return published events matching ``criteria``, latest date first."""
        ...


class ReservationStore(ABC):
    """Interface for reservation persistence operations."""

    @abstractmethod
    def add(self, reservation: Reservation) -> None:
        """Insert a new reservation.

        Raises:
            BookingReferenceCollision: If the booking reference already exists.
                The surrounding unit of work stays usable.
        """
        ...

    @abstractmethod
    def get(self, reservation_id: ReservationId) -> Reservation | None:
        """Return a reservation with its event, venue and customer loaded."""
        ...

    @abstractmethod
    def get_for_update(self, reservation_id: ReservationId) -> Reservation | None:
        """Return a reservation and lock it until the unit of work ends."""
        ...

    @abstractmethod
    def save_status(self, reservation: Reservation) -> None:
        """Persist the reservation's status."""
        ...

    @abstractmethod
    def list(self, criteria: ReservationFilter, page: PageRequest) -> Page[Reservation]:
        """Return reservations matching ``criteria``, newest first."""
        ...


def run_after_commit(callback: Callable[[], None]) -> None:
    """Run a post-commit callback; its failure cannot undo the commit."""
    try:
        callback()
    except Exception:
        logger.exception(
            "Post-commit callback %r failed; the transaction stays committed", callback
        )


class UnitOfWork(ABC):
    """Transaction boundary shared by the event and reservation stores.

    Entering begins a transaction; leaving normally commits it and leaving
    with an exception rolls it back. Callbacks registered with ``on_commit``
    run after a successful commit only, and an exception from one of them is
    logged rather than raised.

    A ``read_only`` unit of work takes no write locks and must not call the
    ``*_for_update`` or save methods.
    """

    events: EventStore
    reservations: ReservationStore
    read_only: bool = False

    def __enter__(self) -> Self:
        self._callbacks: list[Callable[[], None]] = []
        self._begin()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self._callbacks = []
            self._rollback()
            return
        self._commit()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            run_after_commit(callback)

    def on_commit(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    @abstractmethod
    def _begin(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def _commit(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def _rollback(self) -> None:
        raise NotImplementedError
