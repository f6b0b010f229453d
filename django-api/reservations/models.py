"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.conf import settings
from django.db import models


class Venue(models.Model):
    """Persistence model for venues."""

    name = models.CharField(max_length=150)
    address = models.CharField(max_length=250)
    city = models.CharField(max_length=100)

    def __str__(self) -> str:
        return self.name


class Event(models.Model):
    """Persistence model for events and their ticket pool."""

    class Status(models.TextChoices):
        DRAFT = "Draft"
        PUBLISHED = "Published"
        CANCELLED = "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    event_date = models.DateTimeField()
    venue = models.ForeignKey(
        Venue, on_delete=models.PROTECT, related_name="events"
    )
    total_capacity = models.PositiveIntegerField()
    available_tickets = models.PositiveIntegerField()
    price_per_ticket = models.DecimalField(max_digits=18, decimal_places=2)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["event_date"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_capacity__gte=1),
                name="event_total_capacity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(available_tickets__gte=0)
                & models.Q(available_tickets__lte=models.F("total_capacity")),
                name="event_available_tickets_within_capacity",
            ),
            models.CheckConstraint(
                condition=models.Q(price_per_ticket__gte=0),
                name="event_price_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class Reservation(models.Model):
    """Persistence model for reservations."""

    class Status(models.TextChoices):
        CONFIRMED = "Confirmed"
        CANCELLED = "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="reservations")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="reservations"
    )
    number_of_tickets = models.PositiveIntegerField()
    reservation_date = models.DateTimeField()
    total_price = models.DecimalField(max_digits=18, decimal_places=2)
    booking_reference = models.CharField(max_length=100, unique=True, editable=False)
    status = models.CharField(max_length=20, choices=Status.choices)

    class Meta:
        ordering = ["-reservation_date"]
        indexes = [
            models.Index(fields=["user", "-reservation_date"], name="reservation_user_date_idx"),
            models.Index(fields=["event", "-reservation_date"], name="reservation_event_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(number_of_tickets__gte=1),
                name="reservation_tickets_positive",
            ),
        ]

    def __str__(self) -> str:
        return self.booking_reference
