"""Event catalog service.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Browsing is read-only and never touches the inventory ledger's locks.
"""

import logging
from typing import Callable

from reservations.domain import Event, EventId
from reservations.domain.errors import EventNotFoundError
from reservations.services.reservation_service import parse_event_id
from reservations.stores.interfaces import EventFilter, Page, PageRequest, UnitOfWork

logger = logging.getLogger(__name__)


class EventService:
    """Service for event catalog operations."""

    def __init__(self, uow_factory: Callable[..., UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def list_events(self, criteria: EventFilter, page: PageRequest) -> Page[Event]:
        """Return published events, latest date first."""
        with self._uow_factory(read_only=True) as uow:
            return uow.events.list_published(criteria, page)

    def get_event(self, event_id: str | EventId, include_unpublished: bool = False) -> Event:
        """Return an event by ID.

        Draft and cancelled events are only visible with ``include_unpublished``.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist or is hidden.
        """
        event_id = parse_event_id(event_id)
        with self._uow_factory(read_only=True) as uow:
            event = uow.events.get_event(event_id)
        if event is None or not (event.is_published or include_unpublished):
            logger.info("Event %s not found in the catalog", event_id)
            raise EventNotFoundError(str(event_id))
        return event
