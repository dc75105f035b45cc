"""Typed success/failure result returned across engine boundaries."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from engine.errors import FileSessionError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or a FileSessionError, never both."""

    value: Optional[T] = None
    error: Optional[FileSessionError] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: FileSessionError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> Optional[str]:
        """Error message, or None on success."""
        return self.error.message if self.error is not None else None

    def unwrap(self) -> T:
        """Return the value or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value
