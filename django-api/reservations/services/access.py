"""Who is asking, and whether they may see a reservation."""

import logging
from dataclasses import dataclass

from reservations.domain import Reservation, UserId
from reservations.domain.errors import ForbiddenError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Requester:
    """Identity yielded by credential verification."""

    user_id: UserId
    is_admin: bool = False


def ensure_can_access(reservation: Reservation, requester: Requester) -> None:
    """Raise ForbiddenError unless the requester owns the reservation or is an admin."""
    if requester.is_admin or reservation.owned_by(requester.user_id):
        return
    logger.warning(
        "User %s denied access to reservation %s owned by user %s",
        requester.user_id,
        reservation.id,
        reservation.user_id,
    )
    raise ForbiddenError()
