"""Access to the ``BOXOFFICE`` settings dict with defaults."""

from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "MAX_TICKETS_PER_RESERVATION": 10,
    "BOOKING_REFERENCE_ATTEMPTS": 5,
    "TRANSACTION_RETRY_ATTEMPTS": 3,
    "TRANSACTION_RETRY_BACKOFF": 0.05,
    "NOTIFICATION_DISPATCHER": "thread_pool",
    "NOTIFICATION_WORKERS": 2,
    "CALENDAR_UID_DOMAIN": "boxoffice.example.com",
    "EVENT_DURATION_HOURS": 2,
}


def get_setting(name: str) -> Any:
    """Return a ``BOXOFFICE`` setting, falling back to its default."""
    overrides = getattr(settings, "BOXOFFICE", {})
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
