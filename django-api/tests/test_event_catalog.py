"""Tests for the event catalog.

Browsing is open to anonymous clients and only shows published events.
Run with: pytest tests/test_event_catalog.py -v
"""

from datetime import date, datetime, timezone
from functools import partial
from uuid import uuid4

import pytest
from rest_framework.test import APIClient

from memory_store import InMemoryUnitOfWork

from reservations.domain import EventStatus
from reservations.domain.errors import EventNotFoundError, InvalidIdError
from reservations.models import Event as EventRow
from reservations.models import Venue as VenueRow
from reservations.services.event_service import EventService
from reservations.stores.interfaces import EventFilter, PageRequest


@pytest.fixture
def catalog(memory_db) -> EventService:
    return EventService(partial(InMemoryUnitOfWork, memory_db))


class TestEventService:
    """Tests for EventService against the in-memory stores."""

    def test_lists_published_only(self, catalog, make_memory_event):
        shown = make_memory_event()
        make_memory_event(status=EventStatus.DRAFT)
        make_memory_event(status=EventStatus.CANCELLED)

        page = catalog.list_events(EventFilter(), PageRequest())

        assert [e.id for e in page.items] == [shown.id]
        assert page.total == 1

    def test_pages(self, catalog, make_memory_event):
        for _ in range(3):
            make_memory_event()

        page = catalog.list_events(EventFilter(), PageRequest(number=2, size=2))

        assert len(page.items) == 1
        assert page.total == 3
        assert not page.has_next

    def test_search_and_city_are_case_insensitive(self, catalog, make_memory_event):
        event = make_memory_event()

        assert catalog.list_events(EventFilter(search="NIGHT"), PageRequest()).total == 1
        assert catalog.list_events(EventFilter(city="london"), PageRequest()).total == 1
        assert catalog.list_events(EventFilter(city="Leeds"), PageRequest()).total == 0
        assert catalog.get_event(str(event.id)).name == "Night Shift"

    def test_date_filters(self, catalog, make_memory_event):
        make_memory_event()

        def total(criteria: EventFilter) -> int:
            return catalog.list_events(criteria, PageRequest()).total

        assert total(EventFilter(on_date=date(2030, 6, 1))) == 1
        assert total(EventFilter(on_date=date(2030, 6, 2))) == 0
        assert total(EventFilter(starts_from=date(2030, 6, 1))) == 1
        assert total(EventFilter(starts_from=date(2030, 6, 2))) == 0
        assert total(EventFilter(starts_until=date(2030, 5, 31))) == 0

    def test_unpublished_event_hidden_unless_requested(self, catalog, make_memory_event):
        draft = make_memory_event(status=EventStatus.DRAFT)

        with pytest.raises(EventNotFoundError):
            catalog.get_event(draft.id)
        assert catalog.get_event(draft.id, include_unpublished=True).id == draft.id

    def test_unknown_and_malformed_ids(self, catalog):
        with pytest.raises(EventNotFoundError):
            catalog.get_event(str(uuid4()))
        with pytest.raises(InvalidIdError):
            catalog.get_event("not-a-uuid")


@pytest.mark.django_db
class TestEventList:
    """Tests for GET /api/events"""

    def test_list_events_returns_paginated_results(
        self, api_client: APIClient, make_event
    ):
        for number in range(3):
            make_event(name=f"Night Shift {number}")

        response = api_client.get("/api/events", {"page_size": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 3
        assert len(body["results"]) == 2
        assert body["next"] is not None
        assert body["previous"] is None
        first = body["results"][0]
        assert first["venue"]["city"] == "London"
        assert first["available_tickets"] == 10
        assert first["price_per_ticket"] == "25.00"
        assert first["status"] == "Published"

    def test_list_events_empty_catalog(self, api_client: APIClient):
        response = api_client.get("/api/events")

        assert response.status_code == 200
        assert response.json() == {"count": 0, "next": None, "previous": None, "results": []}

    def test_unpublished_events_not_listed(self, api_client: APIClient, make_event):
        make_event(name="Draft", status=EventRow.Status.DRAFT)
        make_event(name="Cancelled", status=EventRow.Status.CANCELLED)

        assert api_client.get("/api/events").json()["count"] == 0

    def test_filters(self, api_client: APIClient, make_event):
        make_event(name="Night Shift")
        matinee = make_event(name="Matinee Strings")
        matinee.event_date = datetime(2030, 5, 1, 14, 0, tzinfo=timezone.utc)
        matinee.venue = VenueRow.objects.create(
            name="Sage Gateshead", address="St Mary's Square", city="Gateshead"
        )
        matinee.save()

        def names(**params) -> list[str]:
            return [e["name"] for e in api_client.get("/api/events", params).json()["results"]]

        assert names(search="matinee") == ["Matinee Strings"]
        assert names(city="london") == ["Night Shift"]
        assert names(date="2030-05-01") == ["Matinee Strings"]
        assert names(start_date="2030-05-15", end_date="2030-06-30") == ["Night Shift"]

    def test_invalid_filters_return_400(self, api_client: APIClient):
        assert api_client.get("/api/events", {"date": "June"}).status_code == 400
        response = api_client.get(
            "/api/events", {"start_date": "2030-06-02", "end_date": "2030-06-01"}
        )
        assert response.status_code == 400


@pytest.mark.django_db
class TestEventDetail:
    """Tests for GET /api/events/{id}"""

    def test_get_event_returns_details(self, api_client: APIClient, make_event):
        event = make_event()

        response = api_client.get(f"/api/events/{event.pk}")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == str(event.pk)
        assert body["name"] == "Night Shift"
        assert body["venue"]["name"] == "The Roundhouse"
        assert body["total_capacity"] == 10

    def test_get_event_not_found(self, api_client: APIClient):
        response = api_client.get(f"/api/events/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "EVENT_NOT_FOUND"

    def test_get_event_invalid_id_format(self, api_client: APIClient):
        response = api_client.get("/api/events/not-a-uuid")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ID"

    def test_draft_visible_to_staff_only(self, api_client: APIClient, make_event, admin_user):
        draft = make_event(status=EventRow.Status.DRAFT)

        assert api_client.get(f"/api/events/{draft.pk}").status_code == 404
        api_client.force_authenticate(admin_user)
        assert api_client.get(f"/api/events/{draft.pk}").status_code == 200
