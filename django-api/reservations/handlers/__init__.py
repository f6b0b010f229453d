from reservations.handlers.views import (
    EventDetailView,
    EventListView,
    EventReservationListView,
    MyReservationListView,
    ReservationCalendarView,
    ReservationCancelView,
    ReservationDetailView,
    ReservationListCreateView,
    ReservationTicketView,
)

__all__ = [
    "EventDetailView",
    "EventListView",
    "EventReservationListView",
    "MyReservationListView",
    "ReservationCalendarView",
    "ReservationCancelView",
    "ReservationDetailView",
    "ReservationListCreateView",
    "ReservationTicketView",
]
