"""
Result value handed to completion callbacks.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from scoville.errors import ScovilleError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a network operation: either a value or an error, never both."""

    value: Optional[T] = None
    error: Optional[ScovilleError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ScovilleError) -> "Result[T]":
        return cls(error=error)

    def unwrap(self) -> Optional[T]:
        """Return the value, or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value
