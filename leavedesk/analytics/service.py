"""Analytics service: read-only aggregation across leave and HR tables.

All methods are static async. Counting that the database can do cheaply
(COUNT / SUM / GROUP BY) stays in SQL; the per-year report fetches flat
rows once and folds them with ``leavedesk.analytics.aggregation``.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavedesk.analytics.aggregation import (
    BalanceFigures,
    LeaveRecord,
    balance_summary,
    department_usage,
    leave_type_distribution,
    monthly_trends,
)
from leavedesk.analytics.schemas import (
    DepartmentLeaveOverview,
    LeaveAnalyticsResponse,
    OrganizationStats,
    RecentLeaveRequest,
)
from leavedesk.common.constants import UNKNOWN_LEAVE_TYPE_NAME, LeaveStatus
from leavedesk.core_hr.models import Department, Employee
from leavedesk.leave.balance import round_half_up, to_decimal
from leavedesk.leave.models import LeaveApplication, LeaveBalance, LeaveType


class AnalyticsService:
    """Async report and dashboard queries."""

    # ═════════════════════════════════════════════════════════════════
    # Yearly leave analytics
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_leave_analytics(db: AsyncSession, year: int) -> LeaveAnalyticsResponse:
        """Trends, department usage, type split and balances for *year*.

        Applications are selected by ``start_date`` within the year;
        cancelled ones are left out.
        """
        rows = await db.execute(
            select(
                LeaveApplication.employee_id,
                LeaveApplication.start_date,
                LeaveApplication.days_count,
                LeaveApplication.status,
                Department.name,
                LeaveType.id,
                LeaveType.name,
                LeaveType.code,
            )
            .join(Employee, LeaveApplication.employee_id == Employee.id)
            .outerjoin(Department, Employee.department_id == Department.id)
            .outerjoin(LeaveType, LeaveApplication.leave_type_id == LeaveType.id)
            .where(
                LeaveApplication.start_date >= date(year, 1, 1),
                LeaveApplication.start_date <= date(year, 12, 31),
                LeaveApplication.status != LeaveStatus.cancelled,
            )
        )
        records = [LeaveRecord(*row) for row in rows.all()]

        balance_rows = await db.execute(
            select(
                LeaveBalance.entitled_days,
                LeaveBalance.used_days,
                LeaveBalance.carried_forward_days,
                LeaveBalance.adjusted_days,
            ).where(LeaveBalance.year == year)
        )
        balances = [BalanceFigures(*row) for row in balance_rows.all()]

        return LeaveAnalyticsResponse(
            year=year,
            monthly_trends=monthly_trends(records),
            department_usage=department_usage(records),
            leave_type_distribution=leave_type_distribution(records),
            balance_summary=balance_summary(balances),
            total_applications=len(records),
            approved_applications=sum(1 for r in records if r.status == LeaveStatus.approved),
        )

    # ═════════════════════════════════════════════════════════════════
    # Organization dashboard
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_organization_stats(db: AsyncSession, today: date) -> OrganizationStats:
        month_start = today.replace(day=1)
        month_end = today.replace(day=calendar.monthrange(today.year, today.month)[1])

        total = await db.execute(select(func.count(Employee.id)))
        active = await db.execute(
            select(func.count(Employee.id)).where(Employee.is_active.is_(True))
        )

        applications = select(func.count(LeaveApplication.id))
        pending = await db.execute(
            applications.where(LeaveApplication.status == LeaveStatus.pending)
        )
        on_leave = await db.execute(
            applications.where(
                LeaveApplication.status == LeaveStatus.approved,
                LeaveApplication.start_date <= today,
                LeaveApplication.end_date >= today,
            )
        )
        upcoming = await db.execute(
            applications.where(
                LeaveApplication.status == LeaveStatus.approved,
                LeaveApplication.start_date >= today,
                LeaveApplication.start_date <= today + timedelta(days=7),
            )
        )
        lop = await db.execute(
            select(func.coalesce(func.sum(LeaveApplication.lop_days), 0)).where(
                LeaveApplication.status == LeaveStatus.approved,
                LeaveApplication.is_lop.is_(True),
                LeaveApplication.start_date >= month_start,
                LeaveApplication.end_date <= month_end,
            )
        )

        return OrganizationStats(
            total_employees=total.scalar_one(),
            active_employees=active.scalar_one(),
            total_pending_leaves=pending.scalar_one(),
            employees_on_leave_today=on_leave.scalar_one(),
            upcoming_leaves_this_week=upcoming.scalar_one(),
            total_lop_days_this_month=round_half_up(lop.scalar_one()),
        )

    @staticmethod
    async def get_recent_leave_requests(
        db: AsyncSession,
        limit: int = 10,
    ) -> list[RecentLeaveRequest]:
        result = await db.execute(
            select(LeaveApplication)
            .options(
                selectinload(LeaveApplication.employee),
                selectinload(LeaveApplication.leave_type),
            )
            .order_by(LeaveApplication.created_at.desc(), LeaveApplication.id)
            .limit(limit)
        )
        return [
            RecentLeaveRequest(
                id=app.id,
                employee_name=app.employee.full_name,
                leave_type=app.leave_type.name if app.leave_type else UNKNOWN_LEAVE_TYPE_NAME,
                start_date=app.start_date,
                end_date=app.end_date,
                days_count=float(to_decimal(app.days_count)),
                status=app.status,
                created_at=app.created_at,
            )
            for app in result.scalars().all()
        ]

    @staticmethod
    async def get_department_leave_overview(
        db: AsyncSession,
        today: date,
    ) -> list[DepartmentLeaveOverview]:
        """Per department: active headcount, on leave today, pending requests.

        Departments without active employees are omitted.
        """
        departments = (
            await db.execute(select(Department).order_by(Department.name))
        ).scalars().all()

        headcount_rows = await db.execute(
            select(Employee.department_id, func.count(Employee.id))
            .where(Employee.is_active.is_(True), Employee.department_id.is_not(None))
            .group_by(Employee.department_id)
        )
        headcount = dict(headcount_rows.all())

        def _per_department(*conditions):
            return (
                select(Employee.department_id, func.count(LeaveApplication.id))
                .join(Employee, LeaveApplication.employee_id == Employee.id)
                .where(Employee.is_active.is_(True), *conditions)
                .group_by(Employee.department_id)
            )

        on_leave = dict(
            (
                await db.execute(
                    _per_department(
                        LeaveApplication.status == LeaveStatus.approved,
                        LeaveApplication.start_date <= today,
                        LeaveApplication.end_date >= today,
                    )
                )
            ).all()
        )
        pending = dict(
            (
                await db.execute(
                    _per_department(LeaveApplication.status == LeaveStatus.pending)
                )
            ).all()
        )

        return [
            DepartmentLeaveOverview(
                department_id=dept.id,
                department_name=dept.name,
                total_employees=headcount[dept.id],
                on_leave_today=on_leave.get(dept.id, 0),
                pending_requests=pending.get(dept.id, 0),
            )
            for dept in departments
            if headcount.get(dept.id, 0) > 0
        ]
