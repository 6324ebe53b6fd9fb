"""Shared request dependencies and result-to-HTTP mapping."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, Request, status

from ..schemas.route_builder import NotificationModel
from ..services.notifications import notification_for
from ..services.results import FailureKind, OperationResult
from ..services.session import RouteBuilderSession

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    FailureKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    FailureKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureKind.COLLABORATOR: status.HTTP_502_BAD_GATEWAY,
    FailureKind.PRECONDITION: status.HTTP_409_CONFLICT,
}


async def get_session(request: Request) -> RouteBuilderSession:
    session: RouteBuilderSession = request.app.state.session
    if not session.loaded:
        result = await session.load()
        if not result.ok:
            logger.warning(f"Location catalog unavailable: {result.reason}")
    return session


def raise_for_result(result: OperationResult, level: Optional[str] = None) -> None:
    if result.ok:
        return
    notification = notification_for(result)
    raise HTTPException(
        status_code=_STATUS_BY_KIND.get(result.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={
            "kind": result.kind.value if result.kind else None,
            "level": level or (notification.level if notification else "error"),
            "message": result.reason,
        },
    )


def success_notification(result: OperationResult, message: str) -> Optional[NotificationModel]:
    notification = notification_for(result, message)
    if notification is None:
        return None
    return NotificationModel(level=notification.level, message=notification.message)
