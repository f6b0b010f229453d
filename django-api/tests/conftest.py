"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from decimal import Decimal
from functools import partial
from uuid import uuid4

import pytest
from rest_framework.test import APIClient

from memory_store import InMemoryDatabase, InMemoryUnitOfWork

from reservations.domain import (
    Capacity,
    Customer,
    Event,
    EventId,
    EventStatus,
    Money,
    Reservation,
    UserId,
    Venue,
)
from reservations.services import factory
from reservations.services.notifications import (
    ImmediateNotificationDispatcher,
    NotificationKind,
    NotificationSender,
)
from reservations.services.reservation_service import ReservationService

EVENT_DATE = datetime(2030, 6, 1, 20, 0, tzinfo=timezone.utc)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def boxoffice_settings(settings):
    settings.BOXOFFICE = {
        **settings.BOXOFFICE,
        "NOTIFICATION_DISPATCHER": "immediate",
        "TRANSACTION_RETRY_BACKOFF": 0,
    }
    factory.reset()
    yield settings
    factory.reset()


# Django-backed fixtures


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(
        username="alice", email="alice@example.com", password="pw"
    )


@pytest.fixture
def other_user(django_user_model):
    return django_user_model.objects.create_user(
        username="bob", email="bob@example.com", password="pw"
    )


@pytest.fixture
def admin_user(django_user_model):
    return django_user_model.objects.create_user(
        username="admin", email="admin@example.com", password="pw", is_staff=True
    )


@pytest.fixture
def venue(db):
    from reservations.models import Venue as VenueRow

    return VenueRow.objects.create(
        name="The Roundhouse", address="Chalk Farm Road", city="London"
    )


@pytest.fixture
def make_event(db, venue):
    from reservations.models import Event as EventRow

    def _make(
        capacity: int = 10,
        available: int | None = None,
        status: str = EventRow.Status.PUBLISHED,
        price: Decimal = Decimal("25.00"),
        name: str = "Night Shift",
    ) -> EventRow:
        return EventRow.objects.create(
            name=name,
            description="An evening of live electronic music",
            event_date=EVENT_DATE,
            venue=venue,
            total_capacity=capacity,
            available_tickets=capacity if available is None else available,
            price_per_ticket=price,
            status=status,
        )

    return _make


# In-memory fixtures


class RecordingSender(NotificationSender):
    """Keeps sent notifications; raises instead when ``failing`` is set."""

    def __init__(self) -> None:
        self.sent: list[tuple[NotificationKind, Reservation]] = []
        self.failing = False

    def send(self, kind: NotificationKind, reservation: Reservation) -> None:
        if self.failing:
            raise ConnectionError("SMTP server unavailable")
        self.sent.append((kind, reservation))


@pytest.fixture
def memory_db() -> InMemoryDatabase:
    db = InMemoryDatabase()
    db.add_customer(Customer(id=UserId(1), username="alice", email="alice@example.com"))
    db.add_customer(Customer(id=UserId(2), username="bob", email="bob@example.com"))
    return db


@pytest.fixture
def make_memory_event(memory_db):
    def _make(
        capacity: int = 10,
        available: int | None = None,
        status: EventStatus = EventStatus.PUBLISHED,
        price: Decimal = Decimal("25.00"),
    ) -> Event:
        event = Event(
            id=EventId(uuid4()),
            name="Night Shift",
            description="An evening of live electronic music",
            event_date=EVENT_DATE,
            total_capacity=Capacity(capacity),
            available_tickets=Capacity(capacity if available is None else available),
            price_per_ticket=Money(price),
            status=status,
            venue=Venue(id=1, name="The Roundhouse", address="Chalk Farm Road", city="London"),
        )
        memory_db.add_event(event)
        return event

    return _make


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def service(memory_db, sender) -> ReservationService:
    return ReservationService(
        partial(InMemoryUnitOfWork, memory_db),
        ImmediateNotificationDispatcher(sender),
        max_tickets=10,
    )
