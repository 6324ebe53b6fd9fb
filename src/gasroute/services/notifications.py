"""Presentation adapter turning operation results into user notifications."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from .results import FailureKind, OperationResult

NotificationLevel = Literal["success", "info", "warning", "error"]

_LEVEL_BY_KIND: dict[FailureKind, NotificationLevel] = {
    FailureKind.VALIDATION: "error",
    FailureKind.NOT_FOUND: "error",
    FailureKind.COLLABORATOR: "error",
    FailureKind.PRECONDITION: "warning",
}


@dataclass(slots=True)
class Notification:
    level: NotificationLevel
    message: str


def notification_for(
    result: OperationResult,
    success_message: Optional[str] = None,
) -> Optional[Notification]:
    """Build the toast for a result; successes without a message stay silent."""

    if result.ok:
        return Notification("success", success_message) if success_message else None
    level = _LEVEL_BY_KIND.get(result.kind, "error") if result.kind else "error"
    return Notification(level, result.reason or "Operation failed")
