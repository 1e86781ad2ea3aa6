"""Uniform success/failure result type."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

UNKNOWN_ERROR_MESSAGE = "Unknown error. Check your connection."


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of an operation that never raises past its boundary."""

    value: T | None = None
    error: Exception | None = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str | None:
        """Human-readable failure message, or None on success."""
        if self.error is None:
            return None
        return str(self.error) or UNKNOWN_ERROR_MESSAGE
