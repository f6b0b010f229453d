"""Django ORM implementation of the stores and the unit of work.

Row locks come from ``select_for_update``. On SQLite, which has no row locks,
the database is configured with ``transaction_mode = IMMEDIATE`` so a write
transaction holds the database write lock from its first statement.
"""

import logging
from functools import partial

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Q

from reservations import models
from reservations.domain import (
    Capacity,
    Customer,
    Event,
    EventId,
    EventStatus,
    Money,
    Reservation,
    ReservationId,
    ReservationStatus,
    UserId,
    Venue,
)
from reservations.domain.errors import TransactionConflictError, UnexpectedError
from reservations.stores.interfaces import (
    BookingReferenceCollision,
    EventFilter,
    EventStore,
    Page,
    PageRequest,
    ReservationFilter,
    ReservationStore,
    UnitOfWork,
    run_after_commit,
)

logger = logging.getLogger(__name__)


def venue_to_domain(row: models.Venue) -> Venue:
    return Venue(id=row.pk, name=row.name, address=row.address, city=row.city)


def event_to_domain(row: models.Event, with_venue: bool = False) -> Event:
    return Event(
        id=EventId(row.pk),
        name=row.name,
        description=row.description,
        event_date=row.event_date,
        total_capacity=Capacity(row.total_capacity),
        available_tickets=Capacity(row.available_tickets),
        price_per_ticket=Money(row.price_per_ticket),
        status=EventStatus(row.status),
        venue=venue_to_domain(row.venue) if with_venue else None,
    )


def reservation_to_domain(row: models.Reservation, with_relations: bool = True) -> Reservation:
    event = customer = None
    if with_relations:
        event = event_to_domain(row.event, with_venue=True)
        customer = Customer(
            id=UserId(row.user.pk), username=row.user.get_username(), email=row.user.email
        )
    return Reservation(
        id=ReservationId(row.pk),
        event_id=EventId(row.event_id),
        user_id=UserId(row.user_id),
        number_of_tickets=row.number_of_tickets,
        reservation_date=row.reservation_date,
        total_price=Money(row.total_price),
        booking_reference=row.booking_reference,
        status=ReservationStatus(row.status),
        event=event,
        customer=customer,
    )


class DjangoEventStore(EventStore):
    """Event ledger backed by the Django ORM."""

    def __init__(self, using: str = "default") -> None:
        self._using = using

    def _queryset(self):
        return models.Event.objects.using(self._using)

    def get_event(self, event_id: EventId) -> Event | None:
        row = self._queryset().select_related("venue").filter(pk=event_id.value).first()
        return event_to_domain(row, with_venue=True) if row else None

    def get_event_for_update(self, event_id: EventId) -> Event | None:
        row = self._queryset().select_for_update().filter(pk=event_id.value).first()
        return event_to_domain(row) if row else None

    def save_available_tickets(self, event: Event) -> None:
        self._queryset().filter(pk=event.id.value).update(
            available_tickets=event.available_tickets.value
        )

    def list_published(self, criteria: EventFilter, page: PageRequest) -> Page[Event]:
        queryset = (
            self._queryset()
            .select_related("venue")
            .filter(status=models.Event.Status.PUBLISHED)
        )
        if criteria.search:
            queryset = queryset.filter(
                Q(name__icontains=criteria.search)
                | Q(description__icontains=criteria.search)
                | Q(venue__name__icontains=criteria.search)
            )
        if criteria.city:
            queryset = queryset.filter(venue__city__icontains=criteria.city)
        if criteria.on_date is not None:
            queryset = queryset.filter(event_date__date=criteria.on_date)
        else:
            if criteria.starts_from is not None:
                queryset = queryset.filter(event_date__date__gte=criteria.starts_from)
            if criteria.starts_until is not None:
                queryset = queryset.filter(event_date__date__lte=criteria.starts_until)
        queryset = queryset.order_by("-event_date", "id")
        total = queryset.count()
        rows = queryset[page.offset : page.offset + page.size]
        return Page(
            items=tuple(event_to_domain(row, with_venue=True) for row in rows),
            total=total,
            request=page,
        )


class DjangoReservationStore(ReservationStore):
    """Reservation store backed by the Django ORM."""

    def __init__(self, using: str = "default") -> None:
        self._using = using

    def _queryset(self):
        return models.Reservation.objects.using(self._using)

    def add(self, reservation: Reservation) -> None:
        try:
            with transaction.atomic(using=self._using):
                self._queryset().create(
                    id=reservation.id.value,
                    event_id=reservation.event_id.value,
                    user_id=reservation.user_id.value,
                    number_of_tickets=reservation.number_of_tickets,
                    reservation_date=reservation.reservation_date,
                    total_price=reservation.total_price.amount,
                    booking_reference=reservation.booking_reference,
                    status=reservation.status.value,
                )
        except IntegrityError as exc:
            taken = self._queryset().filter(
                booking_reference=reservation.booking_reference
            ).exists()
            if taken:
                raise BookingReferenceCollision(reservation.booking_reference) from exc
            raise

    def get(self, reservation_id: ReservationId) -> Reservation | None:
        row = (
            self._queryset()
            .select_related("event__venue", "user")
            .filter(pk=reservation_id.value)
            .first()
        )
        return reservation_to_domain(row) if row else None

    def get_for_update(self, reservation_id: ReservationId) -> Reservation | None:
        row = self._queryset().select_for_update().filter(pk=reservation_id.value).first()
        return reservation_to_domain(row, with_relations=False) if row else None

    def save_status(self, reservation: Reservation) -> None:
        self._queryset().filter(pk=reservation.id.value).update(
            status=reservation.status.value
        )

    def list(self, criteria: ReservationFilter, page: PageRequest) -> Page[Reservation]:
        queryset = self._queryset().select_related("event__venue", "user")
        if criteria.user_id is not None:
            queryset = queryset.filter(user_id=criteria.user_id.value)
        if criteria.event_id is not None:
            queryset = queryset.filter(event_id=criteria.event_id.value)
        if criteria.status is not None:
            queryset = queryset.filter(status__iexact=criteria.status.value)
        queryset = queryset.order_by("-reservation_date", "id")
        total = queryset.count()
        rows = queryset[page.offset : page.offset + page.size]
        return Page(
            items=tuple(reservation_to_domain(row) for row in rows),
            total=total,
            request=page,
        )


class DjangoUnitOfWork(UnitOfWork):
    """Unit of work over ``transaction.atomic``.

    Database errors raised inside the block are rolled back and surfaced as
    TransactionConflictError (lock timeouts, serialization failures) or
    UnexpectedError (constraint violations).

    Post-commit callbacks go through ``transaction.on_commit``, so when this
    unit of work is nested in an outer atomic block they wait for the outer
    commit.

    Read-only units of work run in autocommit mode. On SQLite an atomic block
    starts with BEGIN IMMEDIATE and would queue reads behind writers.
    """

    def __init__(self, using: str = "default", read_only: bool = False) -> None:
        self._using = using
        self.read_only = read_only
        self.events = DjangoEventStore(using)
        self.reservations = DjangoReservationStore(using)

    def __enter__(self):
        try:
            return super().__enter__()
        except DatabaseError as exc:
            raise self._translate(exc) from exc

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        except DatabaseError as commit_error:
            raise self._translate(commit_error) from commit_error
        if isinstance(exc, DatabaseError):
            raise self._translate(exc) from exc

    def on_commit(self, callback) -> None:
        transaction.on_commit(partial(run_after_commit, callback), using=self._using)

    def _begin(self) -> None:
        self._atomic = None
        if not self.read_only:
            self._atomic = transaction.atomic(using=self._using)
            self._atomic.__enter__()

    def _commit(self) -> None:
        if self._atomic is not None:
            self._atomic.__exit__(None, None, None)

    def _rollback(self) -> None:
        if self._atomic is not None:
            transaction.set_rollback(True, using=self._using)
            self._atomic.__exit__(None, None, None)

    @staticmethod
    def _translate(exc: DatabaseError) -> Exception:
        if isinstance(exc, IntegrityError):
            logger.error("Integrity error inside unit of work: %s", exc)
            return UnexpectedError()
        logger.warning("Transaction conflict: %s", exc)
        return TransactionConflictError()
