"""Booking reference generation.

References are computed in-process from the event id, the user id, the
current UTC time and a random component. The store enforces uniqueness; a
collision is resolved by asking the generator for another reference.
"""

import secrets
from datetime import datetime, timezone
from typing import Callable

from reservations.domain.value_objects import EventId, UserId

ReferenceGenerator = Callable[[EventId, UserId], str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_booking_reference(
    event_id: EventId,
    user_id: UserId,
    now: Callable[[], datetime] = _utcnow,
) -> str:
    """Return a reference like ``REF-EVT1A2B-USR0042-20250101120000123-9F3C1D``."""
    timestamp = now().strftime("%Y%m%d%H%M%S%f")[:-3]
    event_part = str(event_id)[:4].upper()
    user_part = str(user_id).zfill(4)[:4].upper()
    random_part = secrets.token_hex(3).upper()
    return f"REF-EVT{event_part}-USR{user_part}-{timestamp}-{random_part}"
