"""Outcome of a step that can fail in an expected, recoverable way.

Used where a failure is handled on the spot (logged and defaulted) instead of
raised: an unknown conversation step, a webhook without a call id.
"""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str, code: str = "unknown") -> "Result[T]":
        return cls(ok=False, error=error, error_code=code)

    def unwrap_or(self, default: T) -> T:
        """The value on success, ``default`` otherwise."""
        return self.value if self.ok else default
