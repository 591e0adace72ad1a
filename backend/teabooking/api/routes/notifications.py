from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from teabooking.api.dependencies import get_notification_repo
from teabooking.api.errors import store_error
from teabooking.core.constants import NOTIFICATION_LIST_LIMIT
from teabooking.core.exceptions import DatabaseError
from teabooking.core.logging import get_logger
from teabooking.models.notification import NotificationCreate, NotificationUpdate
from teabooking.repositories.notification import NotificationRepository

logger = get_logger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def _not_found() -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"success": False, "message": "Notification not found"},
    )


@router.get("")
async def list_notifications(
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> JSONResponse:
    """Return the latest notifications, newest first."""
    try:
        items = await notification_repo.list_recent(NOTIFICATION_LIST_LIMIT)
    except DatabaseError as exc:
        return store_error("Error fetching notifications", exc)
    return JSONResponse(content=[n.to_json() for n in items])


@router.post("")
async def create_notification(
    body: NotificationCreate,
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> JSONResponse:
    try:
        notification = await notification_repo.add(body)
    except DatabaseError as exc:
        return store_error("Error creating notification", exc)
    logger.info("Notification created: id=%s", notification.id)
    return JSONResponse(
        content={"success": True, "notification": notification.to_json()}
    )


@router.put("/{notification_id}")
async def update_notification(
    notification_id: str,
    body: NotificationUpdate,
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> JSONResponse:
    try:
        notification = await notification_repo.update(notification_id, body.changes())
    except DatabaseError as exc:
        return store_error("Error updating notification", exc)
    if notification is None:
        return _not_found()
    return JSONResponse(
        content={"success": True, "notification": notification.to_json()}
    )


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> JSONResponse:
    try:
        removed = await notification_repo.delete(notification_id)
    except DatabaseError as exc:
        return store_error("Error deleting notification", exc)
    if not removed:
        return _not_found()
    return JSONResponse(content={"success": True})
