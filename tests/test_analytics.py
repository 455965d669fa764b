"""Analytics: pure aggregation helpers plus the HTTP report endpoints."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from unittest.mock import patch

from leavedesk.analytics.aggregation import (
    BalanceFigures,
    LeaveRecord,
    balance_summary,
    department_usage,
    leave_type_distribution,
    monthly_trends,
)
from leavedesk.analytics.service import AnalyticsService
from leavedesk.common.constants import LeaveStatus, UserRole
from leavedesk.leave.models import LeaveApplication
from tests.conftest import (
    auth_headers,
    make_balance,
    make_department,
    make_employee,
    make_leave_type,
)


def _rec(
    days,
    *,
    status=LeaveStatus.approved,
    start=date(2025, 3, 10),
    employee_id=None,
    department=None,
    type_id=None,
    type_name="Casual Leave",
    type_code="CL",
) -> LeaveRecord:
    return LeaveRecord(
        employee_id=employee_id or uuid.uuid4(),
        start_date=start,
        days_count=Decimal(str(days)),
        status=status,
        department_name=department,
        leave_type_id=type_id,
        leave_type_name=type_name,
        leave_type_code=type_code,
    )


# ═════════════════════════════════════════════════════════════════════
# Pure aggregation
# ═════════════════════════════════════════════════════════════════════


class TestMonthlyTrends:
    def test_twelve_months_in_order(self):
        trends = monthly_trends([])
        assert [t.month for t in trends][:3] == ["Jan", "Feb", "Mar"]
        assert len(trends) == 12
        assert all(t.approved == 0 for t in trends)

    def test_bucketed_by_start_month(self):
        # Jan 30 .. Feb 3 counts wholly toward January
        trends = monthly_trends([_rec(3, start=date(2025, 1, 30))])
        assert trends[0].approved == 3.0
        assert trends[1].approved == 0

    def test_split_by_status(self):
        trends = monthly_trends([
            _rec(2, status=LeaveStatus.approved),
            _rec("1.5", status=LeaveStatus.pending),
            _rec(1, status=LeaveStatus.rejected),
            _rec(4, status=LeaveStatus.cancelled),
        ])
        march = trends[2]
        assert (march.approved, march.pending, march.rejected) == (2.0, 1.5, 1.0)


class TestDepartmentUsage:
    def test_counts_distinct_employees(self):
        emp = uuid.uuid4()
        usage = department_usage([
            _rec(2, employee_id=emp, department="Engineering"),
            _rec(1, employee_id=emp, department="Engineering"),
            _rec(1, department="Engineering"),
        ])
        assert usage[0].department == "Engineering"
        assert usage[0].total_days == 4
        assert usage[0].employee_count == 2

    def test_unassigned_and_sorted(self):
        usage = department_usage([
            _rec(1, department="Sales"),
            _rec(5),
            _rec(3, department="Sales", status=LeaveStatus.pending),
        ])
        assert [u.department for u in usage] == ["Unassigned", "Sales"]
        assert usage[1].total_days == 1

    def test_half_days_round_up(self):
        usage = department_usage([_rec("2.5", department="Ops")])
        assert usage[0].total_days == 3


class TestLeaveTypeDistribution:
    def test_zero_total_gives_zero_percent(self):
        assert leave_type_distribution([]) == []
        dist = leave_type_distribution([_rec(0, type_id=uuid.uuid4())])
        assert dist[0].percentage == 0

    def test_thirds_do_not_exceed_hundred(self):
        ids = [uuid.uuid4() for _ in range(3)]
        dist = leave_type_distribution([
            _rec(1, type_id=ids[0], type_name="A", type_code="A"),
            _rec(1, type_id=ids[1], type_name="B", type_code="B"),
            _rec(1, type_id=ids[2], type_name="C", type_code="C"),
        ])
        assert [d.percentage for d in dist] == [33, 33, 33]

    def test_rounding_overshoot_is_trimmed(self):
        ids = [uuid.uuid4() for _ in range(5)]
        records = [
            _rec(1, type_id=ids[i], type_name=f"T{i}", type_code=f"T{i}")
            for i in range(4)
        ]
        records.append(_rec(4, type_id=ids[4], type_name="Big", type_code="BG"))
        dist = leave_type_distribution(records)
        assert sum(d.percentage for d in dist) == 100
        assert dist[0].name == "Big"
        assert dist[0].percentage == 50

    def test_missing_type_gets_placeholders(self):
        dist = leave_type_distribution([
            _rec(2, type_id=None, type_name=None, type_code=None),
        ])
        assert (dist[0].name, dist[0].code, dist[0].percentage) == ("Unknown", "??", 100)


class TestBalanceSummary:
    def test_totals_and_utilization(self):
        summary = balance_summary([
            BalanceFigures(Decimal("12"), Decimal("3"), Decimal("2"), Decimal("-2")),
            BalanceFigures(Decimal("8"), Decimal("2"), Decimal("0"), Decimal("0")),
        ])
        assert summary.total_entitled == 20
        assert summary.total_used == 5
        assert summary.total_available == 15
        assert summary.utilization_rate == 25

    def test_empty(self):
        summary = balance_summary([])
        assert summary.utilization_rate == 0
        assert summary.total_entitled == 0


# ═════════════════════════════════════════════════════════════════════
# Service and API
# ═════════════════════════════════════════════════════════════════════


async def _application(db, employee, leave_type, start, end, days, status) -> LeaveApplication:
    app = LeaveApplication(
        id=uuid.uuid4(),
        employee_id=employee.id,
        leave_type_id=leave_type.id,
        start_date=start,
        end_date=end,
        days_count=Decimal(str(days)),
        status=status,
    )
    db.add(app)
    await db.commit()
    return app


class TestAnalyticsService:
    async def test_leave_analytics_for_year(self, db):
        dept = await make_department(db, "Engineering")
        emp = await make_employee(db, department_id=dept.id)
        cl = await make_leave_type(db)
        await make_balance(db, emp, cl, year=2025, entitled=Decimal("12"), used=Decimal("3"))
        await _application(db, emp, cl, date(2025, 3, 3), date(2025, 3, 5), 3, LeaveStatus.approved)
        await _application(db, emp, cl, date(2025, 4, 7), date(2025, 4, 7), 1, LeaveStatus.cancelled)
        await _application(db, emp, cl, date(2024, 4, 7), date(2024, 4, 7), 1, LeaveStatus.approved)

        report = await AnalyticsService.get_leave_analytics(db, 2025)

        assert report.total_applications == 1
        assert report.approved_applications == 1
        assert report.monthly_trends[2].approved == 3.0
        assert report.department_usage[0].department == "Engineering"
        assert report.leave_type_distribution[0].percentage == 100
        assert report.balance_summary.utilization_rate == 25

    async def test_organization_stats(self, db):
        emp = await make_employee(db)
        await make_employee(db, is_active=False)
        cl = await make_leave_type(db)
        today = date(2025, 3, 12)
        await _application(db, emp, cl, date(2025, 3, 11), date(2025, 3, 13), 3, LeaveStatus.approved)
        await _application(db, emp, cl, date(2025, 3, 17), date(2025, 3, 17), 1, LeaveStatus.approved)
        await _application(db, emp, cl, date(2025, 3, 25), date(2025, 3, 25), 1, LeaveStatus.pending)

        stats = await AnalyticsService.get_organization_stats(db, today)

        assert stats.total_employees == 2
        assert stats.active_employees == 1
        assert stats.total_pending_leaves == 1
        assert stats.employees_on_leave_today == 1
        assert stats.upcoming_leaves_this_week == 1

    async def test_department_overview_skips_empty_departments(self, db):
        eng = await make_department(db, "Engineering")
        await make_department(db, "Empty")
        emp = await make_employee(db, department_id=eng.id)
        cl = await make_leave_type(db)
        await _application(db, emp, cl, date(2025, 3, 12), date(2025, 3, 12), 1, LeaveStatus.approved)

        overview = await AnalyticsService.get_department_leave_overview(db, date(2025, 3, 12))

        assert len(overview) == 1
        assert overview[0].department_name == "Engineering"
        assert overview[0].on_leave_today == 1
        assert overview[0].pending_requests == 0


class TestAnalyticsAPI:
    async def test_requires_hr(self, client, db):
        emp = await make_employee(db)
        resp = await client.get("/api/v1/analytics/leave", headers=auth_headers(emp))
        assert resp.status_code == 403

    async def test_hr_gets_report_for_current_year(self, client, db):
        hr = await make_employee(db, role=UserRole.hr)
        with patch("leavedesk.common.clock.today", return_value=date(2025, 6, 1)):
            resp = await client.get("/api/v1/analytics/leave", headers=auth_headers(hr))
        assert resp.status_code == 200
        body = resp.json()
        assert body["year"] == 2025
        assert len(body["monthly_trends"]) == 12

    async def test_recent_requests(self, client, db):
        admin = await make_employee(db, role=UserRole.admin)
        cl = await make_leave_type(db)
        await _application(db, admin, cl, date(2025, 3, 3), date(2025, 3, 3), 1, LeaveStatus.pending)
        resp = await client.get(
            "/api/v1/analytics/recent-leave-requests", headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data[0]["leave_type"] == "Casual Leave"
        assert data[0]["status"] == "pending"
