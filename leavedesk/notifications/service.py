"""Notification service: CRUD operations, preferences and leave dispatchers."""

from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.audit import create_audit_entry
from leavedesk.common.constants import LeaveStatus, NotificationType
from leavedesk.common.exceptions import ForbiddenException, NotFoundException
from leavedesk.common.pagination import PaginationParams
from leavedesk.notifications.models import Notification, NotificationPreference
from leavedesk.notifications.schemas import (
    NotificationListMeta,
    NotificationListResponse,
    NotificationPreferencesUpdate,
    NotificationResponse,
)

if TYPE_CHECKING:
    from leavedesk.leave.models import LeaveApplication


# ── Core service ────────────────────────────────────────────────────


class NotificationService:
    """Async notification operations."""

    @staticmethod
    async def create_notification(
        db: AsyncSession,
        *,
        recipient_id: uuid.UUID,
        type: NotificationType = NotificationType.general,
        title: str,
        message: str,
        related_application_id: Optional[uuid.UUID] = None,
    ) -> Notification:
        """Create a new notification and flush to DB."""
        notification = Notification(
            recipient_id=recipient_id,
            type=type,
            title=title,
            message=message,
            related_application_id=related_application_id,
            is_read=False,
        )
        db.add(notification)
        await db.flush()
        return notification

    @staticmethod
    async def get_notifications(
        db: AsyncSession,
        employee_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        is_read: Optional[bool] = None,
        notification_type: Optional[NotificationType] = None,
    ) -> NotificationListResponse:
        """Return paginated notifications for an employee, newest first."""
        query = (
            select(Notification)
            .where(Notification.recipient_id == employee_id)
            .order_by(Notification.created_at.desc(), Notification.id)
        )

        if is_read is not None:
            query = query.where(Notification.is_read == is_read)
        if notification_type is not None:
            query = query.where(Notification.type == notification_type)

        count_q = select(func.count()).select_from(query.order_by(None).subquery())
        total: int = (await db.execute(count_q)).scalar_one()

        rows = (
            await db.execute(
                query.offset(pagination.offset).limit(pagination.page_size)
            )
        ).scalars().all()

        total_pages = math.ceil(total / pagination.page_size) if total else 0

        # Badge count ignores the list filters
        unread = await NotificationService.get_unread_count(db, employee_id)

        return NotificationListResponse(
            data=[NotificationResponse.model_validate(n) for n in rows],
            meta=NotificationListMeta(
                page=pagination.page,
                page_size=pagination.page_size,
                total=total,
                total_pages=total_pages,
                has_next=pagination.page < total_pages,
                has_prev=pagination.page > 1,
                unread=unread,
            ),
        )

    @staticmethod
    async def mark_read(
        db: AsyncSession,
        notification_id: uuid.UUID,
        employee_id: uuid.UUID,
    ) -> Notification:
        """Mark a single notification as read. Verifies ownership."""
        result = await db.execute(
            select(Notification).where(Notification.id == notification_id)
        )
        notification = result.scalars().first()

        if notification is None:
            raise NotFoundException("Notification", notification_id)

        if notification.recipient_id != employee_id:
            raise ForbiddenException("You can only mark your own notifications as read.")

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now(timezone.utc)
            await db.flush()
        return notification

    @staticmethod
    async def mark_all_read(
        db: AsyncSession,
        employee_id: uuid.UUID,
    ) -> int:
        """Bulk-mark all unread notifications as read. Returns count updated."""
        now = datetime.now(timezone.utc)
        result = await db.execute(
            update(Notification)
            .where(
                Notification.recipient_id == employee_id,
                Notification.is_read.is_(False),
            )
            .values(is_read=True, read_at=now)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount  # type: ignore[return-value]

    @staticmethod
    async def get_unread_count(
        db: AsyncSession,
        employee_id: uuid.UUID,
    ) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(Notification)
            .where(
                Notification.recipient_id == employee_id,
                Notification.is_read.is_(False),
            )
        )
        return result.scalar_one()


# ── Organization-wide preferences ───────────────────────────────────


class NotificationPreferenceService:
    """Single-row switches that gate each notification trigger."""

    @staticmethod
    async def get_preferences(db: AsyncSession) -> NotificationPreference:
        """Return the preference row, creating the all-on default if missing."""
        result = await db.execute(select(NotificationPreference).limit(1))
        prefs = result.scalars().first()
        if prefs is None:
            prefs = NotificationPreference()
            db.add(prefs)
            await db.flush()
        return prefs

    @staticmethod
    async def update_preferences(
        db: AsyncSession,
        data: NotificationPreferencesUpdate,
        *,
        actor_id: uuid.UUID,
    ) -> NotificationPreference:
        prefs = await NotificationPreferenceService.get_preferences(db)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        old_values = {k: getattr(prefs, k) for k in changes}
        for field, value in changes.items():
            setattr(prefs, field, value)
        prefs.updated_at = datetime.now(timezone.utc)
        await db.flush()

        if changes:
            await create_audit_entry(
                db,
                action="update",
                table_name="notification_preferences",
                record_id=prefs.id,
                actor_id=actor_id,
                old_values=old_values,
                new_values=changes,
            )
        return prefs

    @staticmethod
    async def is_enabled(db: AsyncSession, switch: str) -> bool:
        prefs = await NotificationPreferenceService.get_preferences(db)
        return bool(getattr(prefs, switch))


# ── Leave dispatchers ───────────────────────────────────────────────
# Imported by the leave service. They take the ORM object directly and
# return None when the matching preference switch is off.


async def notify_pending_approval(
    db: AsyncSession,
    application: LeaveApplication,
    approver_id: uuid.UUID,
    applicant_name: str,
) -> Optional[Notification]:
    """Tell the reporting manager a new application is waiting."""
    if not await NotificationPreferenceService.is_enabled(db, "new_leave_request"):
        return None
    return await NotificationService.create_notification(
        db,
        recipient_id=approver_id,
        type=NotificationType.pending_approval,
        title="New Leave Request",
        message=(
            f"{applicant_name} requested {application.days_count} day(s) of leave "
            f"from {application.start_date} to {application.end_date}."
        ),
        related_application_id=application.id,
    )


async def notify_leave_status(
    db: AsyncSession,
    application: LeaveApplication,
) -> Optional[Notification]:
    """Tell the applicant their application was approved or rejected."""
    approved = application.status == LeaveStatus.approved
    switch = "leave_approved" if approved else "leave_rejected"
    if not await NotificationPreferenceService.is_enabled(db, switch):
        return None

    verdict = "approved" if approved else "rejected"
    message = (
        f"Your leave from {application.start_date} to {application.end_date} "
        f"has been {verdict}."
    )
    if application.remarks:
        message += f" Remarks: {application.remarks}"

    return await NotificationService.create_notification(
        db,
        recipient_id=application.employee_id,
        type=NotificationType.leave_status,
        title=f"Leave Request {verdict.capitalize()}",
        message=message,
        related_application_id=application.id,
    )


async def notify_leave_cancelled(
    db: AsyncSession,
    application: LeaveApplication,
    manager_id: uuid.UUID,
    applicant_name: str,
) -> Notification:
    return await NotificationService.create_notification(
        db,
        recipient_id=manager_id,
        type=NotificationType.leave_status,
        title="Leave Cancelled",
        message=(
            f"{applicant_name} cancelled their leave from "
            f"{application.start_date} to {application.end_date}."
        ),
        related_application_id=application.id,
    )
