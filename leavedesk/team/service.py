"""Team service: single-level reporting-line resolution and team views.

A manager's team is the set of active employees whose
``reporting_manager_id`` is the manager. HR and admin views pass
``show_all`` and see every active employee instead. There is no
multi-level rollup.
"""

from __future__ import annotations

import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavedesk.common.constants import (
    UNKNOWN_LEAVE_TYPE_CODE,
    UNKNOWN_LEAVE_TYPE_NAME,
    LeaveStatus,
)
from leavedesk.core_hr.models import Employee
from leavedesk.leave.balance import clamped_available, round_half_up, to_decimal, total_entitlement
from leavedesk.leave.models import LeaveApplication, LeaveBalance
from leavedesk.leave.schemas import EmployeeBrief, LeaveApplicationOut, LeaveTypeBrief
from leavedesk.team.schemas import (
    TeamBalanceItem,
    TeamMemberBalancesOut,
    TeamMemberOut,
    TeamMemberStatsOut,
    TeamStatsOut,
)

_ZERO = Decimal("0")


def working_days_passed(days_passed: int) -> int:
    """Approximate weekdays in *days_passed* calendar days."""
    return (max(days_passed, 0) * 5) // 7


def attendance_rate(working_days: int, leave_days: Decimal) -> int:
    """Share of working days not on leave, as a whole percentage (0-100)."""
    if working_days <= 0:
        return 100
    rate = (Decimal(working_days) - to_decimal(leave_days)) / Decimal(working_days) * 100
    return max(0, round_half_up(rate))


class TeamService:
    """Async team queries."""

    @staticmethod
    async def is_reporting_manager(db: AsyncSession, employee_id: uuid.UUID) -> bool:
        result = await db.execute(
            select(func.count())
            .select_from(Employee)
            .where(
                Employee.reporting_manager_id == employee_id,
                Employee.is_active.is_(True),
            )
        )
        return result.scalar_one() > 0

    @staticmethod
    async def get_team_member_ids(
        db: AsyncSession,
        manager_id: uuid.UUID,
        *,
        show_all: bool = False,
    ) -> list[uuid.UUID]:
        query = select(Employee.id).where(Employee.is_active.is_(True))
        if show_all:
            query = query.where(Employee.id != manager_id)
        else:
            query = query.where(Employee.reporting_manager_id == manager_id)
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_team_members(
        db: AsyncSession,
        member_ids: Sequence[uuid.UUID],
    ) -> list[TeamMemberOut]:
        if not member_ids:
            return []
        result = await db.execute(
            select(Employee)
            .where(Employee.id.in_(member_ids))
            .options(selectinload(Employee.department))
            .order_by(Employee.first_name, Employee.last_name)
        )
        return [
            TeamMemberOut(
                id=emp.id,
                employee_code=emp.employee_code,
                first_name=emp.first_name,
                last_name=emp.last_name,
                full_name=emp.full_name,
                email=emp.email,
                designation=emp.designation,
                department_name=emp.department.name if emp.department else None,
                employment_type=emp.employment_type,
                date_of_joining=emp.date_of_joining,
            )
            for emp in result.scalars().all()
        ]

    @staticmethod
    async def get_team_leave_requests(
        db: AsyncSession,
        member_ids: Sequence[uuid.UUID],
        *,
        status: str = "pending",
    ) -> list[LeaveApplicationOut]:
        """``status`` is "pending" or "all"; newest first."""
        if not member_ids:
            return []
        query = (
            select(LeaveApplication)
            .where(LeaveApplication.employee_id.in_(member_ids))
            .options(
                selectinload(LeaveApplication.employee).selectinload(Employee.department),
                selectinload(LeaveApplication.leave_type),
            )
            .order_by(LeaveApplication.created_at.desc(), LeaveApplication.id)
        )
        if status == "pending":
            query = query.where(LeaveApplication.status == LeaveStatus.pending)

        result = await db.execute(query)
        out = []
        for app in result.scalars().all():
            item = LeaveApplicationOut.model_validate(app)
            emp = app.employee
            item.applicant = EmployeeBrief(
                id=emp.id,
                employee_code=emp.employee_code,
                full_name=emp.full_name,
                department_name=emp.department.name if emp.department else None,
            )
            if app.leave_type is not None:
                item.leave_type_info = LeaveTypeBrief.model_validate(app.leave_type)
            out.append(item)
        return out

    @staticmethod
    async def get_team_stats(
        db: AsyncSession,
        member_ids: Sequence[uuid.UUID],
        today: date,
    ) -> TeamStatsOut:
        if not member_ids:
            return TeamStatsOut()

        base = select(func.count()).select_from(LeaveApplication).where(
            LeaveApplication.employee_id.in_(member_ids)
        )
        on_leave = await db.execute(
            base.where(
                LeaveApplication.status == LeaveStatus.approved,
                LeaveApplication.start_date <= today,
                LeaveApplication.end_date >= today,
            )
        )
        pending = await db.execute(
            base.where(LeaveApplication.status == LeaveStatus.pending)
        )
        upcoming = await db.execute(
            base.where(
                LeaveApplication.status == LeaveStatus.approved,
                LeaveApplication.start_date > today,
                LeaveApplication.start_date <= today + timedelta(days=7),
            )
        )
        return TeamStatsOut(
            total_team_members=len(member_ids),
            on_leave_today=on_leave.scalar_one(),
            pending_approvals=pending.scalar_one(),
            upcoming_leaves=upcoming.scalar_one(),
        )

    @staticmethod
    async def get_team_balances(
        db: AsyncSession,
        member_ids: Sequence[uuid.UUID],
        year: int,
    ) -> list[TeamMemberBalancesOut]:
        """Per member balances; ``available`` is floored at zero here."""
        if not member_ids:
            return []
        result = await db.execute(
            select(LeaveBalance)
            .where(
                LeaveBalance.employee_id.in_(member_ids),
                LeaveBalance.year == year,
            )
            .options(selectinload(LeaveBalance.leave_type))
        )

        by_member: dict[uuid.UUID, list[TeamBalanceItem]] = {mid: [] for mid in member_ids}
        for bal in result.scalars().all():
            lt = bal.leave_type
            by_member[bal.employee_id].append(
                TeamBalanceItem(
                    leave_type_id=lt.id if lt else None,
                    name=lt.name if lt else UNKNOWN_LEAVE_TYPE_NAME,
                    code=lt.code if lt else UNKNOWN_LEAVE_TYPE_CODE,
                    entitled=total_entitlement(
                        entitled=bal.entitled_days,
                        carried_forward=bal.carried_forward_days,
                        adjusted=bal.adjusted_days,
                    ),
                    used=bal.used_days,
                    available=clamped_available(
                        entitled=bal.entitled_days,
                        used=bal.used_days,
                        carried_forward=bal.carried_forward_days,
                        adjusted=bal.adjusted_days,
                    ),
                )
            )
        return [
            TeamMemberBalancesOut(member_id=mid, balances=items)
            for mid, items in by_member.items()
        ]

    @staticmethod
    async def get_team_member_stats(
        db: AsyncSession,
        member_ids: Sequence[uuid.UUID],
        year: int,
        today: date,
    ) -> list[TeamMemberStatsOut]:
        """Leaves taken, pending count, LOP days and attendance per member."""
        if not member_ids:
            return []
        result = await db.execute(
            select(
                LeaveApplication.employee_id,
                LeaveApplication.status,
                LeaveApplication.days_count,
                LeaveApplication.is_lop,
                LeaveApplication.lop_days,
            ).where(
                LeaveApplication.employee_id.in_(member_ids),
                LeaveApplication.start_date >= date(year, 1, 1),
                LeaveApplication.end_date <= date(year, 12, 31),
            )
        )

        stats = {mid: TeamMemberStatsOut(member_id=mid) for mid in member_ids}
        for employee_id, status, days_count, is_lop, lop_days in result.all():
            entry = stats[employee_id]
            if status == LeaveStatus.approved:
                entry.total_leaves_taken += to_decimal(days_count)
                if is_lop:
                    lop = to_decimal(lop_days)
                    entry.lop_days += lop if lop > 0 else to_decimal(days_count)
            elif status == LeaveStatus.pending:
                entry.pending_requests += 1

        working_days = working_days_passed((today - date(year, 1, 1)).days)
        for entry in stats.values():
            entry.attendance_rate = attendance_rate(working_days, entry.total_leaves_taken)
        return list(stats.values())
