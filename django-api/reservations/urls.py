from django.urls import path

from reservations.handlers import (
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

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path("reservations", ReservationListCreateView.as_view(), name="reservation-list"),
    path(
        "reservations/my-reservations",
        MyReservationListView.as_view(),
        name="reservation-mine",
    ),
    path(
        "reservations/event/<uuid:event_id>",
        EventReservationListView.as_view(),
        name="reservation-event-list",
    ),
    path(
        "reservations/<uuid:reservation_id>",
        ReservationDetailView.as_view(),
        name="reservation-detail",
    ),
    path(
        "reservations/<uuid:reservation_id>/cancel",
        ReservationCancelView.as_view(),
        name="reservation-cancel",
    ),
    path(
        "reservations/<uuid:reservation_id>/ticket",
        ReservationTicketView.as_view(),
        name="reservation-ticket",
    ),
    path(
        "reservations/<uuid:reservation_id>/calendar",
        ReservationCalendarView.as_view(),
        name="reservation-calendar",
    ),
]
