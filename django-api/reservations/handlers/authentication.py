from rest_framework.authentication import TokenAuthentication

from reservations.domain import UserId
from reservations.services.access import Requester


class BearerTokenAuthentication(TokenAuthentication):
    """Accepts ``Authorization: Bearer <token>``."""

    keyword = "Bearer"


def requester_from(user) -> Requester:
    """Identity of an authenticated Django user; staff users are admins."""
    return Requester(user_id=UserId(user.pk), is_admin=user.is_staff)
