"""Reservation service - all business logic lives here.

Services:
- Depend only on interfaces (stores, unit of work, dispatcher)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Every check that reads the inventory ledger runs inside the same unit of
work as the write that follows it, with the event row locked, so two
concurrent reservations can never both spend the last tickets.
"""

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, TypeVar

from reservations.domain import (
    Event,
    EventId,
    Reservation,
    ReservationId,
    ReservationStatus,
    TicketQuantity,
    UserId,
)
from reservations.domain.booking_reference import (
    ReferenceGenerator,
    generate_booking_reference,
)
from reservations.domain.errors import (
    AlreadyCancelledError,
    EventNotFoundError,
    EventNotPublishedError,
    ForbiddenError,
    InsufficientInventoryError,
    InvalidIdError,
    InvalidQuantityError,
    ReservationNotFoundError,
    TransactionConflictError,
    UnexpectedError,
)
from reservations.services.access import Requester, ensure_can_access
from reservations.services.notifications import NotificationDispatcher, NotificationKind
from reservations.stores.interfaces import (
    BookingReferenceCollision,
    Page,
    PageRequest,
    ReservationFilter,
    UnitOfWork,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_event_id(value: str | EventId) -> EventId:
    """Raises InvalidIdError for anything that is not a UUID."""
    if isinstance(value, EventId):
        return value
    try:
        return EventId.from_string(str(value))
    except ValueError:
        raise InvalidIdError("event id")


def parse_reservation_id(value: str | ReservationId) -> ReservationId:
    """Raises InvalidIdError for anything that is not a UUID."""
    if isinstance(value, ReservationId):
        return value
    try:
        return ReservationId.from_string(str(value))
    except ValueError:
        raise InvalidIdError("reservation id")


def run_with_conflict_retry(
    operation: Callable[[], T], attempts: int = 3, backoff: float = 0.05
) -> T:
    """Run ``operation``, retrying it while it raises TransactionConflictError.

    Only conflicts are retried; every other error propagates at once. The
    last conflict propagates once ``attempts`` runs have failed.
    """
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except TransactionConflictError:
            if attempt == attempts:
                logger.error("Giving up after %d conflicting attempts", attempts)
                raise
            logger.info("Transaction conflict on attempt %d, retrying", attempt)
            time.sleep(backoff * attempt)
    raise AssertionError("unreachable")


class ReservationService:
    """Creates, cancels and lists reservations."""

    def __init__(
        self,
        uow_factory: Callable[..., UnitOfWork],
        dispatcher: NotificationDispatcher,
        *,
        max_tickets: int = 10,
        reference_attempts: int = 5,
        reference_generator: ReferenceGenerator = generate_booking_reference,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._dispatcher = dispatcher
        self._max_tickets = max_tickets
        self._reference_attempts = reference_attempts
        self._generate_reference = reference_generator
        self._clock = clock

    def create_reservation(
        self, event_id: str | EventId, user_id: UserId, number_of_tickets: int
    ) -> Reservation:
        """Reserve ``number_of_tickets`` on an event for a user.

        Raises:
            InvalidQuantityError: If the ticket count is below 1 or above the cap.
            InvalidIdError: If event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            EventNotPublishedError: If the event is not published.
            InsufficientInventoryError: If the event cannot supply the tickets.
            TransactionConflictError: If the data store aborted the transaction.
        """
        try:
            number_of_tickets = TicketQuantity(number_of_tickets, self._max_tickets).value
        except ValueError:
            logger.warning(
                "Invalid ticket count %s requested by user %s", number_of_tickets, user_id
            )
            raise InvalidQuantityError(self._max_tickets)
        event_id = parse_event_id(event_id)

        with self._uow_factory() as uow:
            event = uow.events.get_event_for_update(event_id)
            if event is None:
                logger.warning("Reservation attempted for unknown event %s", event_id)
                raise EventNotFoundError(str(event_id))
            if not event.is_published:
                logger.warning(
                    "Reservation attempted for event %s in status %s",
                    event_id,
                    event.status.value,
                )
                raise EventNotPublishedError(str(event_id))
            if not event.can_supply(number_of_tickets):
                logger.warning(
                    "Not enough tickets for event %s: requested %d, available %d",
                    event_id,
                    number_of_tickets,
                    event.available_tickets.value,
                )
                raise InsufficientInventoryError(str(event_id))

            uow.events.save_available_tickets(event.reserve(number_of_tickets))
            reservation_id = self._insert(uow, event, user_id, number_of_tickets)
            reservation = uow.reservations.get(reservation_id)
            uow.on_commit(
                lambda: self._dispatcher.dispatch(NotificationKind.CONFIRMATION, reservation)
            )

        logger.info(
            "Reservation %s (%s) committed: %d tickets for event %s, user %s",
            reservation.id,
            reservation.booking_reference,
            number_of_tickets,
            event_id,
            user_id,
        )
        return reservation

    def _insert(
        self, uow: UnitOfWork, event: Event, user_id: UserId, number_of_tickets: int
    ) -> ReservationId:
        reservation_id = ReservationId(uuid.uuid4())
        for attempt in range(1, self._reference_attempts + 1):
            reservation = Reservation(
                id=reservation_id,
                event_id=event.id,
                user_id=user_id,
                number_of_tickets=number_of_tickets,
                reservation_date=self._clock(),
                total_price=event.price_per_ticket * number_of_tickets,
                booking_reference=self._generate_reference(event.id, user_id),
                status=ReservationStatus.CONFIRMED,
            )
            try:
                uow.reservations.add(reservation)
            except BookingReferenceCollision:
                logger.warning(
                    "Booking reference %s already taken (attempt %d), regenerating",
                    reservation.booking_reference,
                    attempt,
                )
                continue
            return reservation_id
        logger.error(
            "Could not generate a unique booking reference in %d attempts",
            self._reference_attempts,
        )
        raise TransactionConflictError()

    def cancel_reservation(
        self, reservation_id: str | ReservationId, requester: Requester
    ) -> Reservation:
        """Cancel a reservation and return its tickets to the event.

        Raises:
            InvalidIdError: If reservation_id is not a valid UUID.
            ReservationNotFoundError: If the reservation does not exist.
            ForbiddenError: If the requester is neither the owner nor an admin.
            AlreadyCancelledError: If the reservation is already cancelled.
            TransactionConflictError: If the data store aborted the transaction.
        """
        reservation_id = parse_reservation_id(reservation_id)

        with self._uow_factory() as uow:
            reservation = uow.reservations.get_for_update(reservation_id)
            if reservation is None:
                logger.warning("Cancellation attempted for unknown reservation %s", reservation_id)
                raise ReservationNotFoundError(str(reservation_id))
            ensure_can_access(reservation, requester)
            if reservation.is_cancelled:
                logger.info("Reservation %s is already cancelled", reservation_id)
                raise AlreadyCancelledError(str(reservation_id))

            event = uow.events.get_event_for_update(reservation.event_id)
            if event is None:
                logger.error(
                    "Event %s of reservation %s is missing", reservation.event_id, reservation_id
                )
                raise UnexpectedError()
            try:
                released = event.release(reservation.number_of_tickets)
            except ValueError as exc:
                logger.error(
                    "Cancelling reservation %s would push event %s past its capacity",
                    reservation_id,
                    event.id,
                )
                raise UnexpectedError() from exc

            uow.events.save_available_tickets(released)
            uow.reservations.save_status(reservation.cancel())
            cancelled = uow.reservations.get(reservation_id)
            uow.on_commit(
                lambda: self._dispatcher.dispatch(NotificationKind.CANCELLATION, cancelled)
            )

        logger.info(
            "Reservation %s cancelled, %d tickets returned to event %s",
            reservation_id,
            reservation.number_of_tickets,
            reservation.event_id,
        )
        return cancelled

    def get_reservation(
        self, reservation_id: str | ReservationId, requester: Requester
    ) -> Reservation:
        """Return a reservation visible to the requester.

        Raises:
            InvalidIdError: If reservation_id is not a valid UUID.
            ReservationNotFoundError: If the reservation does not exist.
            ForbiddenError: If the requester is neither the owner nor an admin.
        """
        reservation_id = parse_reservation_id(reservation_id)
        with self._uow_factory(read_only=True) as uow:
            reservation = uow.reservations.get(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(str(reservation_id))
        ensure_can_access(reservation, requester)
        return reservation

    def list_my_reservations(
        self, requester: Requester, page: PageRequest
    ) -> Page[Reservation]:
        return self._list(ReservationFilter(user_id=requester.user_id), page)

    def list_reservations(
        self, requester: Requester, criteria: ReservationFilter, page: PageRequest
    ) -> Page[Reservation]:
        """Admin listing with optional user, event and status filters."""
        self._require_admin(requester)
        return self._list(criteria, page)

    def list_reservations_for_event(
        self, requester: Requester, event_id: str | EventId, page: PageRequest
    ) -> Page[Reservation]:
        self._require_admin(requester)
        return self._list(ReservationFilter(event_id=parse_event_id(event_id)), page)

    def _list(self, criteria: ReservationFilter, page: PageRequest) -> Page[Reservation]:
        with self._uow_factory(read_only=True) as uow:
            return uow.reservations.list(criteria, page)

    @staticmethod
    def _require_admin(requester: Requester) -> None:
        if not requester.is_admin:
            logger.warning("User %s attempted an admin-only listing", requester.user_id)
            raise ForbiddenError()
