"""Notification Pydantic schemas for request / response validation."""


import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from leavedesk.common.constants import NotificationType
from leavedesk.common.pagination import PaginationMeta


# ── Responses ───────────────────────────────────────────────────────

class NotificationResponse(BaseModel):
    """Single notification in API responses."""

    id: uuid.UUID
    type: NotificationType
    title: str
    message: str
    related_application_id: Optional[uuid.UUID] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationListMeta(PaginationMeta):
    """Extends standard pagination meta with unread count."""

    unread: int


class NotificationListResponse(BaseModel):
    """Paginated list of notifications with unread count in meta."""

    data: list[NotificationResponse]
    meta: NotificationListMeta


# ── Preferences ─────────────────────────────────────────────────────

class NotificationPreferencesOut(BaseModel):
    id: uuid.UUID
    new_leave_request: bool
    leave_approved: bool
    leave_rejected: bool
    low_balance_alert: bool
    upcoming_holiday: bool
    probation_ending: bool

    model_config = {"from_attributes": True}


class NotificationPreferencesUpdate(BaseModel):
    """Partial update; omitted switches keep their value."""

    new_leave_request: Optional[bool] = None
    leave_approved: Optional[bool] = None
    leave_rejected: Optional[bool] = None
    low_balance_alert: Optional[bool] = None
    upcoming_holiday: Optional[bool] = None
    probation_ending: Optional[bool] = None
