"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in reservations/models.py (persistence layer).

Domain objects are frozen: ledger mutations return a new Event rather than
changing the one that was read, so a rolled back unit of work never leaves
a half-updated object behind.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from reservations.domain.value_objects import (
    Capacity,
    EventId,
    Money,
    ReservationId,
    UserId,
)


class EventStatus(Enum):
    DRAFT = "Draft"
    PUBLISHED = "Published"
    CANCELLED = "Cancelled"


class ReservationStatus(Enum):
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


@dataclass(frozen=True)
class Venue:
    """Domain representation of a Venue."""

    id: int
    name: str
    address: str
    city: str


@dataclass(frozen=True)
class Customer:
    """The user a reservation belongs to."""

    id: UserId
    username: str
    email: str


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event and its inventory ledger.

    ``available_tickets`` stays within ``0..total_capacity``; construction
    fails otherwise.
    """

    id: EventId
    name: str
    description: str
    event_date: datetime
    total_capacity: Capacity
    available_tickets: Capacity
    price_per_ticket: Money
    status: EventStatus
    venue: Venue | None = None

    def __post_init__(self) -> None:
        if self.total_capacity.value < 1:
            raise ValueError("Total capacity must be at least 1")
        if self.available_tickets.value > self.total_capacity.value:
            raise ValueError("Available tickets cannot exceed total capacity")

    @property
    def is_published(self) -> bool:
        return self.status is EventStatus.PUBLISHED

    def can_supply(self, quantity: int) -> bool:
        return self.available_tickets.value >= quantity

    def reserve(self, quantity: int) -> "Event":
        """Return the event with ``quantity`` tickets taken from the pool."""
        if not self.can_supply(quantity):
            raise ValueError("Not enough tickets available")
        return replace(
            self, available_tickets=Capacity(self.available_tickets.value - quantity)
        )

    def release(self, quantity: int) -> "Event":
        """Return the event with ``quantity`` tickets given back to the pool."""
        return replace(
            self, available_tickets=Capacity(self.available_tickets.value + quantity)
        )


@dataclass(frozen=True)
class Reservation:
    """Domain representation of a Reservation.

    ``event`` and ``customer`` are populated when the store loads the
    reservation for presentation or document generation.
    """

    id: ReservationId
    event_id: EventId
    user_id: UserId
    number_of_tickets: int
    reservation_date: datetime
    total_price: Money
    booking_reference: str
    status: ReservationStatus
    event: Event | None = None
    customer: Customer | None = None

    @property
    def is_cancelled(self) -> bool:
        return self.status is ReservationStatus.CANCELLED

    def owned_by(self, user_id: UserId) -> bool:
        return self.user_id == user_id

    def cancel(self) -> "Reservation":
        return replace(self, status=ReservationStatus.CANCELLED)
