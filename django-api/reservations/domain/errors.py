"""Domain error codes for the reservations module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_ID = "INVALID_ID"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    EVENT_NOT_PUBLISHED = "EVENT_NOT_PUBLISHED"
    INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"
    RESERVATION_NOT_FOUND = "RESERVATION_NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    ALREADY_CANCELLED = "ALREADY_CANCELLED"
    DOCUMENT_NOT_AVAILABLE = "DOCUMENT_NOT_AVAILABLE"
    TRANSACTION_CONFLICT = "TRANSACTION_CONFLICT"
    UNEXPECTED = "UNEXPECTED"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidQuantityError(DomainError):
    """Raised when the requested ticket count is out of range."""

    def __init__(self, maximum: int) -> None:
        super().__init__(
            code=ErrorCode.INVALID_QUANTITY,
            message=f"Number of tickets must be between 1 and {maximum}",
        )


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, field: str = "id") -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {field} format",
        )


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        object.__setattr__(self, "event_id", event_id)


class EventNotPublishedError(DomainError):
    """Raised when reserving against an event that is not published."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_PUBLISHED,
            message="Event is not published and cannot be reserved",
        )
        object.__setattr__(self, "event_id", event_id)


class InsufficientInventoryError(DomainError):
    """Raised when the event cannot supply the requested tickets."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_INVENTORY,
            message="Not enough tickets available",
        )
        object.__setattr__(self, "event_id", event_id)


class ReservationNotFoundError(DomainError):
    """Raised when a reservation is not found."""

    def __init__(self, reservation_id: str) -> None:
        super().__init__(
            code=ErrorCode.RESERVATION_NOT_FOUND,
            message="Reservation not found",
        )
        object.__setattr__(self, "reservation_id", reservation_id)


class ForbiddenError(DomainError):
    """Raised when the requester neither owns the reservation nor is an admin."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.FORBIDDEN,
            message="You are not allowed to access this reservation",
        )


class AlreadyCancelledError(DomainError):
    """Raised when cancelling a reservation that is already cancelled."""

    def __init__(self, reservation_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_CANCELLED,
            message="Reservation is already cancelled",
        )
        object.__setattr__(self, "reservation_id", reservation_id)


class DocumentNotAvailableError(DomainError):
    """Raised when a document is requested for a non-confirmed reservation."""

    def __init__(self, reservation_id: str) -> None:
        super().__init__(
            code=ErrorCode.DOCUMENT_NOT_AVAILABLE,
            message="Documents are only available for confirmed reservations",
        )
        object.__setattr__(self, "reservation_id", reservation_id)


class TransactionConflictError(DomainError):
    """Raised when the data store could not complete the transaction.

    Transient: the whole operation is safe to retry.
    """

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TRANSACTION_CONFLICT,
            message="The request conflicted with another request. Please try again",
        )


class UnexpectedError(DomainError):
    """Raised for failures that have no user-facing explanation."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.UNEXPECTED,
            message="An unexpected error occurred. Please try again later",
        )
