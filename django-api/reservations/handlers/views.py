"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses (see handlers/errors.py)
- Never contain business logic
- Never expose internal error details
"""

from uuid import UUID

from django.http import HttpResponse
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from reservations.conf import get_setting
from reservations.domain import EventId, ReservationId, UserId
from reservations.domain.errors import EventNotFoundError
from reservations.handlers.authentication import requester_from
from reservations.handlers.errors import error_response
from reservations.handlers.pagination import StorePagination
from reservations.handlers.serializers import (
    EventFilterSerializer,
    EventSerializer,
    ReservationCreateSerializer,
    ReservationFilterSerializer,
    ReservationSerializer,
)
from reservations.services.documents import Document
from reservations.services.factory import (
    get_document_service,
    get_event_service,
    get_reservation_service,
)
from reservations.services.reservation_service import run_with_conflict_retry
from reservations.stores.interfaces import EventFilter, Page, ReservationFilter


def _with_retry(operation):
    return run_with_conflict_retry(
        operation,
        attempts=get_setting("TRANSACTION_RETRY_ATTEMPTS"),
        backoff=get_setting("TRANSACTION_RETRY_BACKOFF"),
    )


def _paginated(request: Request, paginator: StorePagination, page: Page) -> Response:
    results = ReservationSerializer(page.items, many=True).data
    return paginator.response(request, page, results)


def _document_response(document: Document) -> HttpResponse:
    response = HttpResponse(document.content, content_type=document.content_type)
    response["Content-Disposition"] = f'attachment; filename="{document.filename}"'
    return response


class ReservationListCreateView(APIView):
    """Handler for GET and POST /api/reservations"""

    def get(self, request: Request) -> Response:
        filters = ReservationFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        data = filters.validated_data
        criteria = ReservationFilter(
            user_id=UserId(data["user_id"]) if data.get("user_id") else None,
            event_id=EventId(data["event_id"]) if data.get("event_id") else None,
            status=data.get("status"),
        )
        paginator = StorePagination()
        page = get_reservation_service().list_reservations(
            requester_from(request.user), criteria, paginator.page_request(request)
        )
        return _paginated(request, paginator, page)

    def post(self, request: Request) -> Response:
        payload = ReservationCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        service = get_reservation_service()
        requester = requester_from(request.user)
        reservation = _with_retry(
            lambda: service.create_reservation(
                EventId(payload.validated_data["event_id"]),
                requester.user_id,
                payload.validated_data["number_of_tickets"],
            )
        )
        return Response(ReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)


class MyReservationListView(APIView):
    """Handler for GET /api/reservations/my-reservations"""

    def get(self, request: Request) -> Response:
        paginator = StorePagination()
        page = get_reservation_service().list_my_reservations(
            requester_from(request.user), paginator.page_request(request)
        )
        return _paginated(request, paginator, page)


class EventReservationListView(APIView):
    """Handler for GET /api/reservations/event/{event_id}"""

    def get(self, request: Request, event_id: UUID) -> Response:
        paginator = StorePagination()
        page = get_reservation_service().list_reservations_for_event(
            requester_from(request.user), EventId(event_id), paginator.page_request(request)
        )
        return _paginated(request, paginator, page)


class ReservationDetailView(APIView):
    """Handler for GET /api/reservations/{reservation_id}"""

    def get(self, request: Request, reservation_id: UUID) -> Response:
        reservation = get_reservation_service().get_reservation(
            ReservationId(reservation_id), requester_from(request.user)
        )
        return Response(ReservationSerializer(reservation).data)


class ReservationCancelView(APIView):
    """Handler for POST /api/reservations/{reservation_id}/cancel"""

    def post(self, request: Request, reservation_id: UUID) -> Response:
        service = get_reservation_service()
        requester = requester_from(request.user)
        _with_retry(
            lambda: service.cancel_reservation(ReservationId(reservation_id), requester)
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


class ReservationTicketView(APIView):
    """Handler for GET /api/reservations/{reservation_id}/ticket"""

    def get(self, request: Request, reservation_id: UUID) -> HttpResponse:
        document = get_document_service().ticket(
            ReservationId(reservation_id), requester_from(request.user)
        )
        return _document_response(document)


class ReservationCalendarView(APIView):
    """Handler for GET /api/reservations/{reservation_id}/calendar"""

    def get(self, request: Request, reservation_id: UUID) -> HttpResponse:
        document = get_document_service().calendar(
            ReservationId(reservation_id), requester_from(request.user)
        )
        return _document_response(document)


class EventListView(APIView):
    """Handler for GET /api/events"""

    permission_classes = [AllowAny]

    def get(self, request: Request) -> Response:
        filters = EventFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        data = filters.validated_data
        criteria = EventFilter(
            search=data.get("search") or None,
            city=data.get("city") or None,
            on_date=data.get("date"),
            starts_from=data.get("start_date"),
            starts_until=data.get("end_date"),
        )
        paginator = StorePagination()
        page = get_event_service().list_events(criteria, paginator.page_request(request))
        return paginator.response(request, page, EventSerializer(page.items, many=True).data)


class EventDetailView(APIView):
    """Handler for GET /api/events/{event_id}"""

    permission_classes = [AllowAny]

    def get(self, request: Request, event_id: str) -> Response:
        try:
            event = get_event_service().get_event(
                event_id, include_unpublished=request.user.is_staff
            )
        except EventNotFoundError as exc:
            # EVENT_NOT_FOUND is a 400 on reservation requests, a 404 here.
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(EventSerializer(event).data)
