"""Structured outcomes for route-building operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class FailureKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    COLLABORATOR = "collaborator"
    PRECONDITION = "precondition"


@dataclass(slots=True)
class OperationResult:
    """Outcome of a business operation; presentation decides how to notify."""

    ok: bool
    kind: Optional[FailureKind] = None
    reason: Optional[str] = None
    value: Any = None

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: FailureKind, reason: str) -> "OperationResult":
        return cls(ok=False, kind=kind, reason=reason)

    def __bool__(self) -> bool:
        return self.ok
