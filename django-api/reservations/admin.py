from django.contrib import admin

from reservations.models import Event, Reservation, Venue


class EventInline(admin.TabularInline):
    model = Event
    extra = 0
    fields = ["name", "event_date", "status", "total_capacity", "available_tickets"]
    readonly_fields = ["total_capacity", "available_tickets"]
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = ["name", "city"]
    search_fields = ["name", "city"]
    inlines = [EventInline]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["name", "event_date", "status", "available_tickets", "total_capacity"]
    list_filter = ["status"]
    search_fields = ["name"]

    def get_readonly_fields(self, request, obj=None):
        # Only the reservation workflow moves tickets once an event exists.
        if obj is None:
            return []
        return ["total_capacity", "available_tickets"]


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ["booking_reference", "event", "user", "number_of_tickets", "status"]
    list_filter = ["status", "event"]
    search_fields = ["booking_reference", "user__username"]
    readonly_fields = [
        "event",
        "user",
        "number_of_tickets",
        "reservation_date",
        "total_price",
        "booking_reference",
        "status",
    ]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
