"""Ticket and calendar documents for confirmed reservations.

Generators are pure transforms of a fully loaded reservation and do not
check its status; DocumentService does that before calling them.
"""

import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import qrcode
from icalendar import Calendar
from icalendar import Event as CalendarEvent
from PIL import Image, ImageDraw

from reservations.domain import Reservation, ReservationId, ReservationStatus
from reservations.domain.errors import (
    DocumentNotAvailableError,
    ReservationNotFoundError,
    UnexpectedError,
)
from reservations.services.access import Requester, ensure_can_access
from reservations.stores.interfaces import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Document:
    content: bytes
    content_type: str
    filename: str


class DocumentGenerator(ABC):
    content_type: str

    @abstractmethod
    def render(self, reservation: Reservation) -> bytes: ...

    @abstractmethod
    def filename(self, reservation: Reservation) -> str: ...


class TicketPdfGenerator(DocumentGenerator):
    """Single page PDF with the booking reference as a QR code."""

    content_type = "application/pdf"
    PAGE_SIZE = (1240, 1754)

    def render(self, reservation: Reservation) -> bytes:
        event = reservation.event
        customer = reservation.customer
        if event is None or customer is None:
            raise ValueError("Reservation must be loaded with its event and customer")

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=12,
            border=4,
        )
        qr.add_data(reservation.booking_reference)
        qr.make(fit=True)
        code = qr.make_image(fill_color="black", back_color="white").get_image()

        page = Image.new("RGB", self.PAGE_SIZE, "white")
        draw = ImageDraw.Draw(page)
        lines = [
            event.name,
            f"{event.event_date:%A %d %B %Y, %H:%M} UTC",
        ]
        if event.venue is not None:
            lines.append(f"{event.venue.name}, {event.venue.address}, {event.venue.city}")
        lines += [
            "",
            f"Ticket holder: {customer.username}",
            f"Tickets: {reservation.number_of_tickets}",
            f"Total price: {reservation.total_price}",
            f"Booking reference: {reservation.booking_reference}",
        ]
        y = 120
        for line in lines:
            draw.text((120, y), line, fill="black")
            y += 40
        page.paste(code.convert("RGB"), (120, y + 40))

        buffer = io.BytesIO()
        page.save(buffer, format="PDF")
        return buffer.getvalue()

    def filename(self, reservation: Reservation) -> str:
        return f"ticket_{reservation.booking_reference}.pdf"


class CalendarGenerator(DocumentGenerator):
    """iCalendar file with one VEVENT for the reserved event."""

    content_type = "text/calendar"

    def __init__(self, uid_domain: str, duration_hours: int = 2) -> None:
        self._uid_domain = uid_domain
        self._duration = timedelta(hours=duration_hours)

    def render(self, reservation: Reservation) -> bytes:
        event = reservation.event
        if event is None:
            raise ValueError("Reservation must be loaded with its event")
        starts_at = event.event_date.astimezone(timezone.utc)

        entry = CalendarEvent()
        entry.add("uid", f"{reservation.booking_reference}@{self._uid_domain}")
        entry.add("summary", event.name)
        entry.add("description", event.description)
        entry.add("dtstart", starts_at)
        entry.add("dtend", starts_at + self._duration)
        entry.add("dtstamp", datetime.now(timezone.utc))
        if event.venue is not None:
            entry.add("location", f"{event.venue.name}, {event.venue.address}")

        calendar = Calendar()
        calendar.add("prodid", "-//boxoffice//reservations//EN")
        calendar.add("version", "2.0")
        calendar.add("method", "PUBLISH")
        calendar.add_component(entry)
        return calendar.to_ical()

    def filename(self, reservation: Reservation) -> str:
        return f"event_{reservation.booking_reference}.ics"


class DocumentService:
    """Hands confirmed reservations to document generators."""

    def __init__(
        self,
        uow_factory,
        ticket_generator: DocumentGenerator,
        calendar_generator: DocumentGenerator,
    ) -> None:
        self._uow_factory = uow_factory
        self._ticket = ticket_generator
        self._calendar = calendar_generator

    def ticket(self, reservation_id: ReservationId, requester: Requester) -> Document:
        return self._generate(self._ticket, reservation_id, requester)

    def calendar(self, reservation_id: ReservationId, requester: Requester) -> Document:
        return self._generate(self._calendar, reservation_id, requester)

    def _generate(
        self,
        generator: DocumentGenerator,
        reservation_id: ReservationId,
        requester: Requester,
    ) -> Document:
        uow: UnitOfWork
        with self._uow_factory(read_only=True) as uow:
            reservation = uow.reservations.get(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(str(reservation_id))
        ensure_can_access(reservation, requester)
        if reservation.status is not ReservationStatus.CONFIRMED:
            logger.warning(
                "Document requested for reservation %s in status %s",
                reservation_id,
                reservation.status.value,
            )
            raise DocumentNotAvailableError(str(reservation_id))

        try:
            content = generator.render(reservation)
        except Exception as exc:
            logger.exception(
                "Failed to render %s for reservation %s",
                generator.content_type,
                reservation_id,
            )
            raise UnexpectedError() from exc
        return Document(
            content=content,
            content_type=generator.content_type,
            filename=generator.filename(reservation),
        )
