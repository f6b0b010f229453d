"""Tests for the Django ORM stores and unit of work.

Run with: pytest tests/test_stores.py -v
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from django.db import IntegrityError, OperationalError, connection, transaction

from reservations.domain import (
    EventId,
    EventStatus,
    Money,
    Reservation,
    ReservationId,
    ReservationStatus,
    UserId,
)
from reservations.domain.errors import TransactionConflictError
from reservations.models import Event as EventRow
from reservations.models import Reservation as ReservationRow
from reservations.models import Venue as VenueRow
from reservations.stores.django_store import DjangoUnitOfWork
from reservations.stores.interfaces import (
    BookingReferenceCollision,
    EventFilter,
    PageRequest,
    ReservationFilter,
)


def new_reservation(event, user, reference: str) -> Reservation:
    return Reservation(
        id=ReservationId(uuid4()),
        event_id=EventId(event.pk),
        user_id=UserId(user.pk),
        number_of_tickets=1,
        reservation_date=datetime.now(timezone.utc),
        total_price=Money(Decimal("25.00")),
        booking_reference=reference,
        status=ReservationStatus.CONFIRMED,
    )


@pytest.mark.django_db
class TestDjangoEventStore:
    def test_get_event_converts_to_domain(self, make_event):
        row = make_event(capacity=8, available=5, status=EventRow.Status.DRAFT)

        with DjangoUnitOfWork() as uow:
            event = uow.events.get_event(EventId(row.pk))

        assert event.total_capacity.value == 8
        assert event.available_tickets.value == 5
        assert event.status is EventStatus.DRAFT
        assert event.venue.name == "The Roundhouse"

    def test_missing_event(self):
        with DjangoUnitOfWork() as uow:
            assert uow.events.get_event_for_update(EventId(uuid4())) is None

    def test_save_available_tickets(self, make_event):
        row = make_event(capacity=8)

        with DjangoUnitOfWork() as uow:
            event = uow.events.get_event_for_update(EventId(row.pk))
            uow.events.save_available_tickets(event.reserve(3))

        row.refresh_from_db()
        assert row.available_tickets == 5

    def test_event_requires_venue(self):
        with pytest.raises(IntegrityError), transaction.atomic():
            EventRow.objects.create(
                name="Nowhere",
                event_date=datetime(2030, 6, 1, 20, 0, tzinfo=timezone.utc),
                venue=None,
                total_capacity=5,
                available_tickets=5,
                price_per_ticket=Decimal("10.00"),
            )

    def test_list_published_filters(self, make_event):
        late = make_event(name="Night Shift")
        make_event(name="Hidden Draft", status=EventRow.Status.DRAFT)
        early = make_event(name="Matinee Strings")
        early.event_date = datetime(2030, 5, 1, 14, 0, tzinfo=timezone.utc)
        early.venue = VenueRow.objects.create(
            name="Sage Gateshead", address="St Mary's Square", city="Gateshead"
        )
        early.save()

        with DjangoUnitOfWork(read_only=True) as uow:
            everything = uow.events.list_published(EventFilter(), PageRequest())
            by_search = uow.events.list_published(
                EventFilter(search="roundhouse"), PageRequest()
            )
            by_city = uow.events.list_published(EventFilter(city="gates"), PageRequest())
            by_day = uow.events.list_published(
                EventFilter(on_date=date(2030, 6, 1)), PageRequest()
            )
            by_range = uow.events.list_published(
                EventFilter(starts_until=date(2030, 5, 31)), PageRequest()
            )

        assert [e.id.value for e in everything.items] == [late.pk, early.pk]
        assert everything.items[0].venue.city == "London"
        assert [e.id.value for e in by_search.items] == [late.pk]
        assert [e.id.value for e in by_city.items] == [early.pk]
        assert [e.id.value for e in by_day.items] == [late.pk]
        assert [e.id.value for e in by_range.items] == [early.pk]


@pytest.mark.django_db
class TestDjangoReservationStore:
    def test_add_and_get_with_relations(self, make_event, user):
        event = make_event()
        reservation = new_reservation(event, user, "REF-ONE")

        with DjangoUnitOfWork() as uow:
            uow.reservations.add(reservation)
            loaded = uow.reservations.get(reservation.id)

        assert loaded.booking_reference == "REF-ONE"
        assert loaded.event.name == event.name
        assert loaded.customer.email == "alice@example.com"

    def test_duplicate_reference_raises_collision_and_keeps_transaction(
        self, make_event, user
    ):
        event = make_event()
        with DjangoUnitOfWork() as uow:
            uow.reservations.add(new_reservation(event, user, "REF-TAKEN"))

        with DjangoUnitOfWork() as uow:
            with pytest.raises(BookingReferenceCollision):
                uow.reservations.add(new_reservation(event, user, "REF-TAKEN"))
            uow.reservations.add(new_reservation(event, user, "REF-OTHER"))

        assert set(ReservationRow.objects.values_list("booking_reference", flat=True)) == {
            "REF-TAKEN",
            "REF-OTHER",
        }

    def test_list_filters_status_and_pages(self, make_event, user, other_user):
        event = make_event()
        with DjangoUnitOfWork() as uow:
            for number in range(3):
                uow.reservations.add(new_reservation(event, user, f"REF-A{number}"))
            uow.reservations.add(new_reservation(event, other_user, "REF-B"))
        ReservationRow.objects.filter(booking_reference="REF-B").update(status="Cancelled")

        with DjangoUnitOfWork() as uow:
            mine = uow.reservations.list(
                ReservationFilter(user_id=UserId(user.pk)), PageRequest(number=2, size=2)
            )
            cancelled = uow.reservations.list(
                ReservationFilter(status=ReservationStatus.CANCELLED), PageRequest()
            )

        assert mine.total == 3
        assert len(mine.items) == 1
        assert not mine.has_next
        assert [r.booking_reference for r in cancelled.items] == ["REF-B"]


@pytest.mark.django_db
class TestDjangoUnitOfWork:
    def test_exception_rolls_back_everything(self, make_event, user):
        row = make_event(capacity=8)

        with pytest.raises(RuntimeError):
            with DjangoUnitOfWork() as uow:
                event = uow.events.get_event_for_update(EventId(row.pk))
                uow.events.save_available_tickets(event.reserve(3))
                uow.reservations.add(new_reservation(row, user, "REF-ROLLED-BACK"))
                raise RuntimeError("boom")

        row.refresh_from_db()
        assert row.available_tickets == 8
        assert not ReservationRow.objects.exists()

    def test_on_commit_waits_for_outer_transaction(self, django_capture_on_commit_callbacks):
        """Nested in the test's transaction, callbacks wait for the outermost commit."""
        calls = []

        with django_capture_on_commit_callbacks(execute=True) as captured:
            with DjangoUnitOfWork() as uow:
                uow.on_commit(lambda: calls.append("committed"))
            assert calls == []

        assert calls == ["committed"]
        assert len(captured) == 1

    def test_on_commit_discarded_on_rollback(self, django_capture_on_commit_callbacks):
        calls = []

        with django_capture_on_commit_callbacks(execute=True) as captured:
            with pytest.raises(RuntimeError):
                with DjangoUnitOfWork() as uow:
                    uow.on_commit(lambda: calls.append("rolled back"))
                    raise RuntimeError("boom")

        assert captured == []
        assert calls == []

    def test_failing_callback_does_not_stop_the_rest(
        self, django_capture_on_commit_callbacks, caplog
    ):
        calls = []

        def refuse():
            raise RuntimeError("cannot schedule new futures after shutdown")

        with django_capture_on_commit_callbacks(execute=True):
            with DjangoUnitOfWork() as uow:
                uow.on_commit(refuse)
                uow.on_commit(lambda: calls.append("second"))

        assert calls == ["second"]
        assert "Post-commit callback" in caplog.text

    def test_database_errors_become_conflicts(self):
        with pytest.raises(TransactionConflictError):
            with DjangoUnitOfWork():
                raise OperationalError("database is locked")


@pytest.mark.django_db(transaction=True)
class TestReadOnlyUnitOfWork:
    def test_reads_run_in_autocommit(self, make_event):
        row = make_event()

        with DjangoUnitOfWork(read_only=True) as uow:
            assert not connection.in_atomic_block
            assert uow.events.get_event(EventId(row.pk)).name == "Night Shift"

        with DjangoUnitOfWork():
            assert connection.in_atomic_block

    def test_read_only_on_commit_runs_immediately(self):
        calls = []

        with DjangoUnitOfWork(read_only=True) as uow:
            uow.on_commit(lambda: calls.append("ran"))
            assert calls == ["ran"]
