"""Notification endpoints: list, mark read, unread count, preferences."""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_current_user, require_permission
from leavedesk.common.constants import NotificationType
from leavedesk.common.pagination import PaginationParams
from leavedesk.core_hr.models import Employee
from leavedesk.database import get_db
from leavedesk.notifications.schemas import (
    NotificationListResponse,
    NotificationPreferencesOut,
    NotificationPreferencesUpdate,
    NotificationResponse,
)
from leavedesk.notifications.service import (
    NotificationPreferenceService,
    NotificationService,
)

router = APIRouter(prefix="", tags=["notifications"])


# ── GET /: list current user's notifications ───────────────────────

@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    status: str = Query(default="all", pattern="^(all|read|unread)$"),
    type: Optional[NotificationType] = Query(
        default=None, alias="type", description="Filter by notification type"
    ),
    pagination: PaginationParams = Depends(),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List notifications for the authenticated user (paginated)."""
    is_read = {"all": None, "read": True, "unread": False}[status]
    return await NotificationService.get_notifications(
        db,
        employee_id=employee.id,
        pagination=pagination,
        is_read=is_read,
        notification_type=type,
    )


# Static paths are registered before /{notification_id}/read so they
# are not parsed as UUIDs.

@router.get("/unread-count")
async def unread_count(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    count = await NotificationService.get_unread_count(db, employee.id)
    return {"data": {"count": count}}


@router.put("/read-all")
async def mark_all_read(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    count = await NotificationService.mark_all_read(db, employee.id)
    return {"message": "All notifications marked as read", "data": {"count": count}}


@router.get("/preferences")
async def get_preferences(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    prefs = await NotificationPreferenceService.get_preferences(db)
    return {"data": NotificationPreferencesOut.model_validate(prefs)}


@router.patch("/preferences")
async def update_preferences(
    body: NotificationPreferencesUpdate,
    employee: Employee = Depends(require_permission("organization:configure")),
    db: AsyncSession = Depends(get_db),
):
    prefs = await NotificationPreferenceService.update_preferences(
        db, body, actor_id=employee.id,
    )
    return {
        "message": "Notification preferences updated",
        "data": NotificationPreferencesOut.model_validate(prefs),
    }


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: uuid.UUID,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notification = await NotificationService.mark_read(db, notification_id, employee.id)
    return {
        "message": "Notification marked as read",
        "data": NotificationResponse.model_validate(notification),
    }
