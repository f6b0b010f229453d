from reservations.domain.models import (
    Customer,
    Event,
    EventStatus,
    Reservation,
    ReservationStatus,
    Venue,
)
from reservations.domain.value_objects import (
    Capacity,
    EventId,
    Money,
    ReservationId,
    TicketQuantity,
    UserId,
)

__all__ = [
    "Customer",
    "Event",
    "EventStatus",
    "Reservation",
    "ReservationStatus",
    "Venue",
    "EventId",
    "ReservationId",
    "UserId",
    "Money",
    "Capacity",
    "TicketQuantity",
]
