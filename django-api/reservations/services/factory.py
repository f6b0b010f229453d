"""Wiring of services from Django settings."""

from functools import lru_cache

from reservations.conf import get_setting
from reservations.services.documents import (
    CalendarGenerator,
    DocumentService,
    TicketPdfGenerator,
)
from reservations.services.event_service import EventService
from reservations.services.notifications import (
    ImmediateNotificationDispatcher,
    MailNotificationSender,
    NotificationDispatcher,
    ThreadPoolNotificationDispatcher,
)
from reservations.services.reservation_service import ReservationService
from reservations.stores.django_store import DjangoUnitOfWork


@lru_cache(maxsize=1)
def get_notification_dispatcher() -> NotificationDispatcher:
    sender = MailNotificationSender()
    if get_setting("NOTIFICATION_DISPATCHER") == "immediate":
        return ImmediateNotificationDispatcher(sender)
    return ThreadPoolNotificationDispatcher(sender, workers=get_setting("NOTIFICATION_WORKERS"))


@lru_cache(maxsize=1)
def get_reservation_service() -> ReservationService:
    return ReservationService(
        DjangoUnitOfWork,
        get_notification_dispatcher(),
        max_tickets=get_setting("MAX_TICKETS_PER_RESERVATION"),
        reference_attempts=get_setting("BOOKING_REFERENCE_ATTEMPTS"),
    )


@lru_cache(maxsize=1)
def get_document_service() -> DocumentService:
    return DocumentService(
        DjangoUnitOfWork,
        TicketPdfGenerator(),
        CalendarGenerator(
            uid_domain=get_setting("CALENDAR_UID_DOMAIN"),
            duration_hours=get_setting("EVENT_DURATION_HOURS"),
        ),
    )


@lru_cache(maxsize=1)
def get_event_service() -> EventService:
    return EventService(DjangoUnitOfWork)


def reset() -> None:
    """Drop cached services so the next call rebuilds them from settings."""
    if get_notification_dispatcher.cache_info().currsize:
        dispatcher = get_notification_dispatcher()
        if isinstance(dispatcher, ThreadPoolNotificationDispatcher):
            dispatcher.shutdown()
    get_event_service.cache_clear()
    get_document_service.cache_clear()
    get_reservation_service.cache_clear()
    get_notification_dispatcher.cache_clear()
