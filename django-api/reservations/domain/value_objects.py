"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self
from uuid import UUID


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ReservationId:
    """Unique identifier for a Reservation."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class UserId:
    """Identifier of the user owning a reservation."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __mul__(self, quantity: int) -> "Money":
        return Money(amount=self.amount * quantity)

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True)
class TicketQuantity:
    """Number of tickets requested by a single reservation."""

    value: int
    maximum: int

    def __post_init__(self) -> None:
        if self.value < 1:
            raise ValueError("Ticket quantity must be at least 1")
        if self.value > self.maximum:
            raise ValueError(f"Ticket quantity cannot exceed {self.maximum}")
