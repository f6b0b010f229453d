"""Serializers for transforming domain models to API responses."""

from rest_framework import serializers

from reservations.domain import ReservationStatus


class ReservationCreateSerializer(serializers.Serializer):
    """Input for POST /api/reservations.

    The ticket range is checked by the service so that it reports
    INVALID_QUANTITY like every other reservation rule.
    """

    event_id = serializers.UUIDField()
    number_of_tickets = serializers.IntegerField()


class ReservationFilterSerializer(serializers.Serializer):
    """Query parameters for the admin reservation listing."""

    user_id = serializers.IntegerField(required=False, min_value=1)
    event_id = serializers.UUIDField(required=False)
    status = serializers.CharField(required=False, allow_blank=True)

    def validate_status(self, value: str) -> ReservationStatus | None:
        if not value:
            return None
        for status in ReservationStatus:
            if status.value.lower() == value.lower():
                return status
        raise serializers.ValidationError("Unknown reservation status")


class ReservationSerializer(serializers.Serializer):
    """Serializer for Reservation domain model."""

    id = serializers.UUIDField(source="id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    event_name = serializers.CharField(source="event.name")
    event_date = serializers.DateTimeField(source="event.event_date")
    user_id = serializers.IntegerField(source="user_id.value")
    user_name = serializers.CharField(source="customer.username")
    number_of_tickets = serializers.IntegerField()
    reservation_date = serializers.DateTimeField()
    total_price = serializers.DecimalField(
        source="total_price.amount", max_digits=18, decimal_places=2
    )
    booking_reference = serializers.CharField()
    status = serializers.CharField(source="status.value")


class EventFilterSerializer(serializers.Serializer):
    """Query parameters for GET /api/events."""

    search = serializers.CharField(required=False, allow_blank=True, max_length=200)
    city = serializers.CharField(required=False, allow_blank=True, max_length=100)
    date = serializers.DateField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs: dict) -> dict:
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError("start_date must not be after end_date")
        return attrs


class VenueSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    address = serializers.CharField()
    city = serializers.CharField()


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.UUIDField(source="id.value")
    name = serializers.CharField()
    description = serializers.CharField()
    event_date = serializers.DateTimeField()
    venue = VenueSerializer(allow_null=True)
    total_capacity = serializers.IntegerField(source="total_capacity.value")
    available_tickets = serializers.IntegerField(source="available_tickets.value")
    price_per_ticket = serializers.DecimalField(
        source="price_per_ticket.amount", max_digits=18, decimal_places=2
    )
    status = serializers.CharField(source="status.value")
