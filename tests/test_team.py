"""Team views: reporting-line scope, stats, balances and member stats."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from unittest.mock import patch

from leavedesk.common.constants import LeaveStatus, UserRole
from leavedesk.leave.models import LeaveApplication
from leavedesk.team.service import TeamService, attendance_rate, working_days_passed
from tests.conftest import (
    auth_headers,
    make_balance,
    make_employee,
    make_leave_type,
)

TODAY = date(2025, 3, 12)


async def _leave(db, employee, leave_type, start, end, days, status, *, lop=Decimal("0")):
    app = LeaveApplication(
        id=uuid.uuid4(),
        employee_id=employee.id,
        leave_type_id=leave_type.id,
        start_date=start,
        end_date=end,
        days_count=Decimal(str(days)),
        status=status,
        is_lop=lop > 0,
        lop_days=lop,
    )
    db.add(app)
    await db.commit()
    return app


class TestHelpers:
    def test_working_days_passed(self):
        assert working_days_passed(7) == 5
        assert working_days_passed(10) == 7
        assert working_days_passed(-3) == 0

    def test_attendance_rate(self):
        assert attendance_rate(0, Decimal("3")) == 100
        assert attendance_rate(20, Decimal("5")) == 75
        assert attendance_rate(10, Decimal("15")) == 0


class TestTeamService:
    async def test_member_ids_are_active_direct_reports(self, db):
        manager = await make_employee(db, role=UserRole.manager)
        report = await make_employee(db, manager_id=manager.id)
        await make_employee(db, manager_id=manager.id, is_active=False)
        await make_employee(db, manager_id=report.id)

        ids = await TeamService.get_team_member_ids(db, manager.id)
        assert ids == [report.id]
        assert await TeamService.is_reporting_manager(db, manager.id) is True
        assert await TeamService.is_reporting_manager(db, uuid.uuid4()) is False

    async def test_show_all_excludes_self(self, db):
        hr = await make_employee(db, role=UserRole.hr)
        a = await make_employee(db)
        b = await make_employee(db)
        ids = await TeamService.get_team_member_ids(db, hr.id, show_all=True)
        assert set(ids) == {a.id, b.id}

    async def test_stats(self, db):
        manager = await make_employee(db, role=UserRole.manager)
        r1 = await make_employee(db, manager_id=manager.id)
        r2 = await make_employee(db, manager_id=manager.id)
        cl = await make_leave_type(db)
        await _leave(db, r1, cl, date(2025, 3, 11), date(2025, 3, 13), 3, LeaveStatus.approved)
        await _leave(db, r2, cl, date(2025, 3, 12), date(2025, 3, 12), 1, LeaveStatus.approved)
        await _leave(db, r2, cl, date(2025, 3, 14), date(2025, 3, 14), 1, LeaveStatus.approved)
        await _leave(db, r2, cl, date(2025, 3, 20), date(2025, 3, 20), 1, LeaveStatus.approved)
        await _leave(db, r1, cl, date(2025, 4, 1), date(2025, 4, 1), 1, LeaveStatus.pending)

        stats = await TeamService.get_team_stats(db, [r1.id, r2.id], TODAY)

        assert stats.total_team_members == 2
        assert stats.on_leave_today == 2
        assert stats.pending_approvals == 1
        # Upcoming starts after today and within a week
        assert stats.upcoming_leaves == 1

    async def test_empty_team_stats(self, db):
        stats = await TeamService.get_team_stats(db, [], TODAY)
        assert stats.total_team_members == 0

    async def test_balances_are_clamped(self, db):
        emp = await make_employee(db)
        cl = await make_leave_type(db)
        await make_balance(db, emp, cl, entitled=Decimal("2"), used=Decimal("5"))

        [member] = await TeamService.get_team_balances(db, [emp.id], 2025)

        item = member.balances[0]
        assert item.available == Decimal("0")
        assert item.entitled == Decimal("2")
        assert item.code == "CL"

    async def test_member_stats(self, db):
        emp = await make_employee(db)
        cl = await make_leave_type(db)
        await _leave(db, emp, cl, date(2025, 2, 3), date(2025, 2, 7), 5, LeaveStatus.approved,
                     lop=Decimal("2"))
        await _leave(db, emp, cl, date(2025, 3, 3), date(2025, 3, 3), 1, LeaveStatus.pending)
        await _leave(db, emp, cl, date(2025, 3, 4), date(2025, 3, 4), 1, LeaveStatus.rejected)

        # 70 calendar days since Jan 1 -> 50 working days
        [entry] = await TeamService.get_team_member_stats(db, [emp.id], 2025, date(2025, 3, 12))

        assert entry.total_leaves_taken == Decimal("5")
        assert entry.lop_days == Decimal("2")
        assert entry.pending_requests == 1
        assert entry.attendance_rate == 90


class TestTeamAPI:
    async def test_plain_employee_forbidden(self, client, db):
        emp = await make_employee(db)
        resp = await client.get("/api/v1/team/members", headers=auth_headers(emp))
        assert resp.status_code == 403

    async def test_employee_with_reports_has_team(self, client, db):
        lead = await make_employee(db, first_name="Lead")
        await make_employee(db, manager_id=lead.id, first_name="Junior")
        resp = await client.get("/api/v1/team/members", headers=auth_headers(lead))
        assert resp.status_code == 200
        assert resp.json()["data"][0]["first_name"] == "Junior"

    async def test_manager_without_reports_gets_empty_team(self, client, db):
        manager = await make_employee(db, role=UserRole.manager)
        resp = await client.get("/api/v1/team/stats", headers=auth_headers(manager))
        assert resp.status_code == 200
        assert resp.json()["data"]["total_team_members"] == 0

    async def test_hr_sees_everyone(self, client, db):
        hr = await make_employee(db, role=UserRole.hr)
        await make_employee(db)
        await make_employee(db)
        resp = await client.get("/api/v1/team/members", headers=auth_headers(hr))
        assert resp.json()["meta"]["total"] == 2

    async def test_is_manager(self, client, db):
        lead = await make_employee(db)
        await make_employee(db, manager_id=lead.id)
        resp = await client.get("/api/v1/team/is-manager", headers=auth_headers(lead))
        assert resp.json() == {"data": {"is_reporting_manager": True}}

    async def test_stats_use_local_today(self, client, db):
        manager = await make_employee(db, role=UserRole.manager)
        report = await make_employee(db, manager_id=manager.id)
        cl = await make_leave_type(db)
        await _leave(db, report, cl, TODAY, TODAY, 1, LeaveStatus.approved)
        with patch("leavedesk.common.clock.today", return_value=TODAY):
            resp = await client.get("/api/v1/team/stats", headers=auth_headers(manager))
        assert resp.json()["data"]["on_leave_today"] == 1
