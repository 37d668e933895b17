"""Result models for JSON response decoding."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .errors import DecodeErrorKind, WebServiceError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class DecodeResult(Generic[T]):
    """Either a decoded value or the error that prevented decoding."""

    value: Optional[T] = None
    error: Optional[WebServiceError] = None

    @classmethod
    def success(cls, value: T) -> "DecodeResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: WebServiceError) -> "DecodeResult[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[DecodeErrorKind]:
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> T:
        """Return the value, or raise the captured error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
