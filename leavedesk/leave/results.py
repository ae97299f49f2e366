"""Discriminated outcomes of leave lifecycle operations.

Services return ``Success`` or ``Failure`` instead of raising, so callers can
tell "forbidden" from "already processed" from "not found". The HTTP layer
turns a ``Failure`` into the matching RFC 7807 problem via ``unwrap``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar, Union

from leavedesk.common.exceptions import (
    AppException,
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)

T = TypeVar("T")


class FailureKind(str, enum.Enum):
    forbidden = "forbidden"
    invalid_transition = "invalid_transition"
    not_found = "not_found"
    validation_error = "validation_error"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    ok = True


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    detail: str
    errors: Optional[dict[str, list[str]]] = field(default=None)
    entity_id: Any = None

    ok = False

    # ── constructors ────────────────────────────────────────────────

    @classmethod
    def forbidden(cls, detail: str) -> Failure:
        return cls(FailureKind.forbidden, detail)

    @classmethod
    def invalid_transition(cls, detail: str) -> Failure:
        return cls(FailureKind.invalid_transition, detail)

    @classmethod
    def not_found(cls, entity_id: Any) -> Failure:
        return cls(
            FailureKind.not_found,
            f"Leave with id '{entity_id}' does not exist.",
            entity_id=entity_id,
        )

    @classmethod
    def validation(cls, errors: dict[str, list[str]]) -> Failure:
        return cls(
            FailureKind.validation_error,
            "One or more fields failed validation.",
            errors=errors,
        )

    def to_exception(self) -> AppException:
        if self.kind is FailureKind.forbidden:
            return ForbiddenException(self.detail)
        if self.kind is FailureKind.invalid_transition:
            return InvalidTransitionException(self.detail)
        if self.kind is FailureKind.not_found:
            return NotFoundException("Leave", self.entity_id)
        return ValidationException(self.errors or {})


Result = Union[Success[T], Failure]


def unwrap(result: Result[T]) -> T:
    """Return the success value or raise the failure as an ``AppException``."""
    if isinstance(result, Failure):
        raise result.to_exception()
    return result.value
