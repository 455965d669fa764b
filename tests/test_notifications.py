"""Notification tests: listing, read state, preferences and leave triggers."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

import pytest

from leavedesk.common.constants import NotificationType, UserRole
from leavedesk.common.exceptions import ForbiddenException, NotFoundException
from leavedesk.common.pagination import PaginationParams
from leavedesk.leave.schemas import LeaveApplicationCreate
from leavedesk.leave.service import LeaveService
from leavedesk.notifications.schemas import NotificationPreferencesUpdate
from leavedesk.notifications.service import (
    NotificationPreferenceService,
    NotificationService,
)
from tests.conftest import auth_headers, make_balance, make_employee, make_leave_type


async def _notify(db, recipient, title="Hello", type=NotificationType.general):
    note = await NotificationService.create_notification(
        db, recipient_id=recipient.id, type=type, title=title, message=f"{title} body",
    )
    await db.commit()
    return note


class TestNotificationService:
    async def test_list_with_unread_badge(self, db):
        emp = await make_employee(db)
        other = await make_employee(db)
        first = await _notify(db, emp, "One")
        await _notify(db, emp, "Two")
        await _notify(db, other, "Not mine")
        await NotificationService.mark_read(db, first.id, emp.id)

        params = PaginationParams(page=1, page_size=1, sort=None)
        page = await NotificationService.get_notifications(db, emp.id, params)

        assert page.meta.total == 2
        assert page.meta.total_pages == 2
        assert page.meta.has_next is True
        assert page.meta.unread == 1

        unread_only = await NotificationService.get_notifications(
            db, emp.id, PaginationParams(page=1, page_size=10, sort=None), is_read=False,
        )
        assert [n.title for n in unread_only.data] == ["Two"]

    async def test_mark_read_checks_owner(self, db):
        emp = await make_employee(db)
        other = await make_employee(db)
        note = await _notify(db, emp)
        with pytest.raises(ForbiddenException):
            await NotificationService.mark_read(db, note.id, other.id)
        with pytest.raises(NotFoundException):
            await NotificationService.mark_read(db, uuid.uuid4(), emp.id)

    async def test_mark_all_read(self, db):
        emp = await make_employee(db)
        await _notify(db, emp, "One")
        await _notify(db, emp, "Two")
        assert await NotificationService.mark_all_read(db, emp.id) == 2
        assert await NotificationService.get_unread_count(db, emp.id) == 0

    async def test_preferences_default_on(self, db):
        prefs = await NotificationPreferenceService.get_preferences(db)
        assert prefs.new_leave_request is True
        assert await NotificationPreferenceService.is_enabled(db, "leave_approved")

    async def test_disabled_switch_suppresses_trigger(self, db):
        admin = await make_employee(db, role=UserRole.admin)
        manager = await make_employee(db, role=UserRole.manager)
        report = await make_employee(db, manager_id=manager.id)
        cl = await make_leave_type(db)
        await make_balance(db, report, cl)
        await NotificationPreferenceService.update_preferences(
            db, NotificationPreferencesUpdate(new_leave_request=False), actor_id=admin.id,
        )

        await LeaveService.apply_leave(
            db, report,
            LeaveApplicationCreate(
                leave_type_id=cl.id, start_date=date(2025, 3, 3), end_date=date(2025, 3, 3),
            ),
        )
        assert await NotificationService.get_unread_count(db, manager.id) == 0


class TestNotificationAPI:
    async def test_list_and_read(self, client, db):
        emp = await make_employee(db)
        note = await _notify(db, emp)

        resp = await client.get("/api/v1/notifications", headers=auth_headers(emp))
        assert resp.status_code == 200
        assert resp.json()["meta"]["unread"] == 1

        resp = await client.put(
            f"/api/v1/notifications/{note.id}/read", headers=auth_headers(emp),
        )
        assert resp.status_code == 200

        resp = await client.get("/api/v1/notifications/unread-count", headers=auth_headers(emp))
        assert resp.json() == {"data": {"count": 0}}

    async def test_preferences_require_configure(self, client, db):
        emp = await make_employee(db)
        resp = await client.patch(
            "/api/v1/notifications/preferences",
            json={"leave_rejected": False},
            headers=auth_headers(emp),
        )
        assert resp.status_code == 403

        admin = await make_employee(db, role=UserRole.admin)
        resp = await client.patch(
            "/api/v1/notifications/preferences",
            json={"leave_rejected": False},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200

        resp = await client.get("/api/v1/notifications/preferences", headers=auth_headers(emp))
        assert resp.json()["data"]["leave_rejected"] is False
        assert resp.json()["data"]["leave_approved"] is True
