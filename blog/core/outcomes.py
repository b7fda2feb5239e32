"""
Typed outcomes returned by the service layer.

Expected conditions (missing entity, duplicate username, bad credentials,
non-owner mutation, invalid input) are values, not exceptions. The API layer
decides how each one is rendered.
"""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar
import enum

T = TypeVar("T")


class OutcomeKind(str, enum.Enum):
    """Outcome classification."""
    OK = "ok"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    VALIDATION_FAILED = "validation_failed"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a service operation: a value or a failure kind with detail."""
    kind: OutcomeKind
    value: Optional[T] = None
    detail: str = ""

    @property
    def is_ok(self) -> bool:
        return self.kind is OutcomeKind.OK

    @classmethod
    def ok(cls, value: T) -> "Outcome[T]":
        return cls(OutcomeKind.OK, value)

    @classmethod
    def not_found(cls, detail: str = "Not found") -> "Outcome[T]":
        return cls(OutcomeKind.NOT_FOUND, detail=detail)

    @classmethod
    def conflict(cls, detail: str = "Conflict") -> "Outcome[T]":
        return cls(OutcomeKind.CONFLICT, detail=detail)

    @classmethod
    def unauthenticated(cls, detail: str = "Login required") -> "Outcome[T]":
        return cls(OutcomeKind.UNAUTHENTICATED, detail=detail)

    @classmethod
    def forbidden(cls, detail: str = "Permission denied") -> "Outcome[T]":
        return cls(OutcomeKind.FORBIDDEN, detail=detail)

    @classmethod
    def validation_failed(cls, detail: str = "Invalid input") -> "Outcome[T]":
        return cls(OutcomeKind.VALIDATION_FAILED, detail=detail)
