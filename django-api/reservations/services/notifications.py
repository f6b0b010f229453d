"""Reservation notifications.

The workflow hands a notification to a dispatcher after its transaction
commits. Dispatchers never raise: a failed send is logged and the
reservation stays as committed.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum

from django.conf import settings
from django.core.mail import send_mail

from reservations.domain import Reservation

logger = logging.getLogger(__name__)


class NotificationKind(Enum):
    CONFIRMATION = "confirmation"
    CANCELLATION = "cancellation"


class NotificationSender(ABC):
    """Delivers one notification. May raise; dispatchers contain failures."""

    @abstractmethod
    def send(self, kind: NotificationKind, reservation: Reservation) -> None: ...


class MailNotificationSender(NotificationSender):
    """Sends notifications through Django's configured email backend."""

    SUBJECTS = {
        NotificationKind.CONFIRMATION: "Your reservation for {event} is confirmed",
        NotificationKind.CANCELLATION: "Your reservation for {event} has been cancelled",
    }

    def send(self, kind: NotificationKind, reservation: Reservation) -> None:
        event = reservation.event
        customer = reservation.customer
        if event is None or customer is None:
            raise ValueError("Reservation must be loaded with its event and customer")
        subject = self.SUBJECTS[kind].format(event=event.name)
        body = "\n".join(
            [
                f"Hello {customer.username},",
                "",
                f"Event: {event.name}",
                f"Date: {event.event_date:%Y-%m-%d %H:%M} UTC",
                f"Tickets: {reservation.number_of_tickets}",
                f"Total price: {reservation.total_price}",
                f"Booking reference: {reservation.booking_reference}",
                f"Status: {reservation.status.value}",
            ]
        )
        send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [customer.email])


class NotificationDispatcher(ABC):
    """Fire-and-forget handoff of a notification."""

    def __init__(self, sender: NotificationSender) -> None:
        self._sender = sender

    @abstractmethod
    def dispatch(self, kind: NotificationKind, reservation: Reservation) -> None: ...

    def _deliver(self, kind: NotificationKind, reservation: Reservation) -> bool:
        try:
            self._sender.send(kind, reservation)
        except Exception:
            logger.exception(
                "Failed to send %s notification for reservation %s; the reservation is unaffected",
                kind.value,
                reservation.id,
            )
            return False
        logger.info("Sent %s notification for reservation %s", kind.value, reservation.id)
        return True


class ImmediateNotificationDispatcher(NotificationDispatcher):
    """Delivers in the calling thread."""

    def dispatch(self, kind: NotificationKind, reservation: Reservation) -> None:
        self._deliver(kind, reservation)


class ThreadPoolNotificationDispatcher(NotificationDispatcher):
    """Queues deliveries on a worker pool and returns immediately."""

    def __init__(self, sender: NotificationSender, workers: int = 2) -> None:
        super().__init__(sender)
        self._executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="notifications"
        )

    def dispatch(self, kind: NotificationKind, reservation: Reservation) -> Future:
        return self._executor.submit(self._deliver, kind, reservation)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
