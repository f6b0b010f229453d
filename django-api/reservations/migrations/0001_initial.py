import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Venue",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("name", models.CharField(max_length=150)),
                ("address", models.CharField(max_length=250)),
                ("city", models.CharField(max_length=100)),
            ],
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("event_date", models.DateTimeField()),
                ("total_capacity", models.PositiveIntegerField()),
                ("available_tickets", models.PositiveIntegerField()),
                ("price_per_ticket", models.DecimalField(decimal_places=2, max_digits=18)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Draft", "Draft"),
                            ("Published", "Published"),
                            ("Cancelled", "Cancelled"),
                        ],
                        default="Draft",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="events",
                        to="reservations.venue",
                    ),
                ),
            ],
            options={
                "ordering": ["event_date"],
                "constraints": [
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
                ],
            },
        ),
        migrations.CreateModel(
            name="Reservation",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("number_of_tickets", models.PositiveIntegerField()),
                ("reservation_date", models.DateTimeField()),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=18)),
                (
                    "booking_reference",
                    models.CharField(editable=False, max_length=100, unique=True),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("Confirmed", "Confirmed"), ("Cancelled", "Cancelled")],
                        max_length=20,
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to="reservations.event",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-reservation_date"],
                "indexes": [
                    models.Index(
                        fields=["user", "-reservation_date"],
                        name="reservation_user_date_idx",
                    ),
                    models.Index(
                        fields=["event", "-reservation_date"],
                        name="reservation_event_date_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(number_of_tickets__gte=1),
                        name="reservation_tickets_positive",
                    ),
                ],
            },
        ),
    ]
