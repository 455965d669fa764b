"""Leave service layer: balances, adjustments, applications and approvals.

Business logic:
  - Balance listing with the derived ``available`` figure
  - Absolute balance adjustments with a best-effort audit trail
  - Leave application with weekend/holiday exclusion, half days and LOP
  - Approval, rejection and cancellation; ``used_days`` moves in the
    same transaction as the status change
  - Role-scoped leave history
"""

from __future__ import annotations

import calendar
import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavedesk.common.audit import create_audit_entry, record_audit_best_effort
from leavedesk.common.constants import (
    UNKNOWN_LEAVE_TYPE_CODE,
    UNKNOWN_LEAVE_TYPE_NAME,
    ApprovalAction,
    LeaveStatus,
    UserRole,
)
from leavedesk.common.exceptions import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from leavedesk.common.pagination import PaginatedResponse, PaginationParams, paginate
from leavedesk.core_hr.models import Employee
from leavedesk.holidays.service import HolidayService
from leavedesk.leave.balance import lop_shortfall, to_decimal
from leavedesk.leave.models import LeaveApplication, LeaveBalance, LeaveType
from leavedesk.leave.schemas import (
    BalanceAdjustRequest,
    EmployeeBrief,
    LeaveActionRequest,
    LeaveApplicationCreate,
    LeaveApplicationOut,
    LeaveBalanceOut,
    LeaveTypeBrief,
    LeaveTypeOut,
)
from leavedesk.notifications.service import (
    notify_leave_cancelled,
    notify_leave_status,
    notify_pending_approval,
)
from leavedesk.team.service import TeamService

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_HALF = Decimal("0.5")
_PRIVILEGED = (UserRole.hr, UserRole.admin)


# ═════════════════════════════════════════════════════════════════════
# Pure helpers
# ═════════════════════════════════════════════════════════════════════


def count_leave_days(
    start: date,
    end: date,
    holidays: Iterable[date] = (),
    *,
    is_half_day: bool = False,
) -> Decimal:
    """Working days (Mon-Fri, minus *holidays*) in [start, end].

    A half-day request counts 0.5 when its single day is a working day.
    """
    skip = set(holidays)
    days = 0
    current = start
    while current <= end:
        if current.weekday() < 5 and current not in skip:
            days += 1
        current += timedelta(days=1)
    if is_half_day:
        return _HALF if days else _ZERO
    return Decimal(days)


def month_bounds(day: date) -> tuple[date, date]:
    """First and last day of the month containing *day*."""
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave operations: types, balances, applications, approvals."""

    # ─────────────────────────────────────────────────────────────────
    # Response builders
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _employee_brief(emp: Employee) -> EmployeeBrief:
        return EmployeeBrief(
            id=emp.id,
            employee_code=emp.employee_code,
            full_name=emp.full_name,
            department_name=emp.department.name if emp.department else None,
        )

    @staticmethod
    def _application_out(
        app: LeaveApplication,
        *,
        employee: Optional[Employee] = None,
        leave_type: Optional[LeaveType] = None,
    ) -> LeaveApplicationOut:
        out = LeaveApplicationOut.model_validate(app)
        if employee is not None:
            out.applicant = LeaveService._employee_brief(employee)
        if leave_type is not None:
            out.leave_type_info = LeaveTypeBrief.model_validate(leave_type)
        return out

    @staticmethod
    def _balance_out(balance: LeaveBalance, leave_type: Optional[LeaveType]) -> LeaveBalanceOut:
        return LeaveBalanceOut(
            id=balance.id,
            employee_id=balance.employee_id,
            leave_type_id=balance.leave_type_id,
            year=balance.year,
            entitled_days=balance.entitled_days,
            used_days=balance.used_days,
            carried_forward_days=balance.carried_forward_days,
            adjusted_days=balance.adjusted_days,
            available=balance.available,
            leave_type_name=leave_type.name if leave_type else UNKNOWN_LEAVE_TYPE_NAME,
            leave_type_code=leave_type.code if leave_type else UNKNOWN_LEAVE_TYPE_CODE,
        )

    # ─────────────────────────────────────────────────────────────────
    # Access helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def assert_can_view(
        db: AsyncSession,
        viewer: Employee,
        role: UserRole,
        employee_id: uuid.UUID,
    ) -> None:
        """Self, HR/admin, or the employee's reporting manager."""
        if employee_id == viewer.id or role in _PRIVILEGED:
            return
        reports = await TeamService.get_team_member_ids(db, viewer.id)
        if employee_id not in reports:
            raise ForbiddenException("You can only view your own or your team's leave.")

    @staticmethod
    async def _get_balance_row(
        db: AsyncSession,
        employee_id: uuid.UUID,
        leave_type_id: Optional[uuid.UUID],
        year: int,
    ) -> Optional[LeaveBalance]:
        if leave_type_id is None:
            return None
        result = await db.execute(
            select(LeaveBalance).where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.leave_type_id == leave_type_id,
                LeaveBalance.year == year,
            )
        )
        return result.scalars().first()

    @staticmethod
    async def _get_pending_days(
        db: AsyncSession,
        employee_id: uuid.UUID,
        leave_type_id: uuid.UUID,
        year: int,
    ) -> Decimal:
        """Paid days already requested and awaiting a decision."""
        result = await db.execute(
            select(
                func.coalesce(
                    func.sum(LeaveApplication.days_count - LeaveApplication.lop_days), 0
                )
            ).where(
                LeaveApplication.employee_id == employee_id,
                LeaveApplication.leave_type_id == leave_type_id,
                LeaveApplication.status == LeaveStatus.pending,
                LeaveApplication.start_date >= date(year, 1, 1),
                LeaveApplication.start_date <= date(year, 12, 31),
            )
        )
        return to_decimal(result.scalar_one())

    # ─────────────────────────────────────────────────────────────────
    # Leave types and balances
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_leave_types(
        db: AsyncSession,
        *,
        is_active: Optional[bool] = True,
    ) -> list[LeaveTypeOut]:
        query = select(LeaveType).order_by(LeaveType.name)
        if is_active is not None:
            query = query.where(LeaveType.is_active == is_active)
        result = await db.execute(query)
        return [LeaveTypeOut.model_validate(lt) for lt in result.scalars().all()]

    @staticmethod
    async def get_employee_balances(
        db: AsyncSession,
        employee_id: uuid.UUID,
        year: int,
    ) -> list[LeaveBalanceOut]:
        """Every balance row for the employee and year, unclamped."""
        result = await db.execute(
            select(LeaveBalance)
            .where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.year == year,
            )
            .options(selectinload(LeaveBalance.leave_type))
        )
        balances = [
            LeaveService._balance_out(b, b.leave_type)
            for b in result.scalars().all()
        ]
        return sorted(balances, key=lambda b: b.leave_type_name)

    @staticmethod
    async def adjust_balance(
        db: AsyncSession,
        balance_id: uuid.UUID,
        data: BalanceAdjustRequest,
        *,
        actor_id: uuid.UUID,
    ) -> LeaveBalanceOut:
        """Replace ``adjusted_days`` with an absolute value.

        The audit entry is best-effort: if it cannot be written the
        adjustment still stands and the failure is only logged.
        """
        result = await db.execute(
            select(LeaveBalance)
            .where(LeaveBalance.id == balance_id)
            .options(selectinload(LeaveBalance.leave_type))
        )
        balance = result.scalars().first()
        if balance is None:
            raise NotFoundException("LeaveBalance", str(balance_id))

        old_adjusted = balance.adjusted_days
        balance.adjusted_days = data.adjusted_days
        balance.updated_at = datetime.now(timezone.utc)
        await db.flush()

        await record_audit_best_effort(
            db,
            action="leave_balance_adjustment",
            table_name="leave_balances",
            record_id=balance.id,
            actor_id=actor_id,
            old_values={"adjusted_days": str(old_adjusted)},
            new_values={
                "adjusted_days": str(data.adjusted_days),
                "reason": data.reason,
            },
        )

        return LeaveService._balance_out(balance, balance.leave_type)

    # ─────────────────────────────────────────────────────────────────
    # Apply
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def apply_leave(
        db: AsyncSession,
        employee: Employee,
        data: LeaveApplicationCreate,
    ) -> LeaveApplicationOut:
        """File a pending application; a balance shortfall is recorded as LOP."""
        leave_type = await db.get(LeaveType, data.leave_type_id)
        if leave_type is None or not leave_type.is_active:
            raise ValidationException(
                {"leave_type_id": ["Leave type does not exist or is inactive."]}
            )

        # ── Working days ────────────────────────────────────────────
        holidays = await HolidayService.holiday_dates_between(
            db, data.start_date, data.end_date,
        )
        days = count_leave_days(
            data.start_date, data.end_date, holidays, is_half_day=data.is_half_day,
        )
        if days <= 0:
            raise ValidationException(
                {"dates": ["No working days in the selected range "
                           "(all days are weekends or holidays)."]}
            )

        # ── Overlap ─────────────────────────────────────────────────
        overlap = await db.execute(
            select(func.count()).select_from(LeaveApplication).where(
                LeaveApplication.employee_id == employee.id,
                LeaveApplication.status.in_([LeaveStatus.pending, LeaveStatus.approved]),
                LeaveApplication.start_date <= data.end_date,
                LeaveApplication.end_date >= data.start_date,
            )
        )
        if overlap.scalar_one() > 0:
            raise ValidationException(
                {"dates": ["You already have a pending or approved leave "
                           "overlapping these dates."]}
            )

        # ── Balance / LOP ───────────────────────────────────────────
        if leave_type.is_paid:
            year = data.start_date.year
            balance = await LeaveService._get_balance_row(
                db, employee.id, leave_type.id, year,
            )
            available = balance.available if balance else _ZERO
            available -= await LeaveService._get_pending_days(
                db, employee.id, leave_type.id, year,
            )
            lop_days = lop_shortfall(days, available)
        else:
            lop_days = days

        application = LeaveApplication(
            employee_id=employee.id,
            leave_type_id=leave_type.id,
            start_date=data.start_date,
            end_date=data.end_date,
            days_count=days,
            is_half_day=data.is_half_day,
            reason=data.reason,
            status=LeaveStatus.pending,
            is_lop=lop_days > 0,
            lop_days=lop_days,
        )
        db.add(application)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            table_name="leave_applications",
            record_id=application.id,
            actor_id=employee.id,
            new_values={
                "leave_type": leave_type.code,
                "start_date": data.start_date.isoformat(),
                "end_date": data.end_date.isoformat(),
                "days_count": str(days),
                "lop_days": str(lop_days),
            },
        )

        if employee.reporting_manager_id:
            await notify_pending_approval(
                db, application, employee.reporting_manager_id, employee.full_name,
            )

        await db.refresh(application)
        return LeaveService._application_out(
            application, employee=employee, leave_type=leave_type,
        )

    # ─────────────────────────────────────────────────────────────────
    # Pending approvals
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_pending_approvals(
        db: AsyncSession,
        approver: Employee,
        role: UserRole,
    ) -> list[LeaveApplicationOut]:
        """Pending applications the approver may act on, oldest first."""
        query = (
            select(LeaveApplication)
            .join(Employee, LeaveApplication.employee_id == Employee.id)
            .where(
                LeaveApplication.status == LeaveStatus.pending,
                LeaveApplication.employee_id != approver.id,
            )
            .options(
                selectinload(LeaveApplication.employee).selectinload(Employee.department),
                selectinload(LeaveApplication.leave_type),
            )
            .order_by(LeaveApplication.created_at, LeaveApplication.start_date)
        )
        if role not in _PRIVILEGED:
            query = query.where(Employee.reporting_manager_id == approver.id)

        result = await db.execute(query)
        return [
            LeaveService._application_out(a, employee=a.employee, leave_type=a.leave_type)
            for a in result.scalars().all()
        ]

    # ─────────────────────────────────────────────────────────────────
    # Approve / reject
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def process_application(
        db: AsyncSession,
        application_id: uuid.UUID,
        data: LeaveActionRequest,
        *,
        approver: Employee,
        role: UserRole,
    ) -> LeaveApplicationOut:
        """Move a pending application to approved or rejected.

        Approval adds the paid portion (``days_count - lop_days``) to the
        matching balance's ``used_days`` in the caller's transaction, so the
        status change and the deduction commit or roll back together.
        """
        now = datetime.now(timezone.utc)

        result = await db.execute(
            select(LeaveApplication)
            .where(LeaveApplication.id == application_id)
            .options(
                selectinload(LeaveApplication.employee).selectinload(Employee.department),
                selectinload(LeaveApplication.leave_type),
            )
        )
        application = result.scalars().first()
        if application is None:
            raise NotFoundException("LeaveApplication", str(application_id))

        if application.status != LeaveStatus.pending:
            raise ValidationException(
                {"status": [f"Leave application is already {application.status.value}."]}
            )

        applicant = application.employee
        if applicant.id == approver.id:
            raise ForbiddenException("You cannot act on your own leave application.")
        if role not in _PRIVILEGED and applicant.reporting_manager_id != approver.id:
            raise ForbiddenException(
                "Only the reporting manager or HR can act on this leave application."
            )

        approving = data.action == ApprovalAction.approve
        new_status = LeaveStatus.approved if approving else LeaveStatus.rejected

        application.status = new_status
        application.reviewed_by = approver.id
        application.reviewed_at = now
        application.remarks = data.remarks
        application.updated_at = now

        deducted = _ZERO
        if approving:
            balance = await LeaveService._get_balance_row(
                db, application.employee_id, application.leave_type_id,
                application.start_date.year,
            )
            deducted = application.days_count - application.lop_days
            if balance is not None and deducted > 0:
                balance.used_days = balance.used_days + deducted
                balance.updated_at = now

        await db.flush()

        await create_audit_entry(
            db,
            action=data.action.value,
            table_name="leave_applications",
            record_id=application.id,
            actor_id=approver.id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={
                "status": new_status.value,
                "remarks": data.remarks,
                "used_days_delta": str(deducted),
            },
        )

        await notify_leave_status(db, application)

        logger.info(
            "Leave application %s %s by %s", application.id, new_status.value, approver.id,
        )
        return LeaveService._application_out(
            application, employee=applicant, leave_type=application.leave_type,
        )

    # ─────────────────────────────────────────────────────────────────
    # Cancel
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def cancel_application(
        db: AsyncSession,
        application_id: uuid.UUID,
        employee: Employee,
    ) -> LeaveApplicationOut:
        """Applicant cancels a pending or approved application.

        Cancelling an approved application returns its deducted days.
        """
        now = datetime.now(timezone.utc)

        result = await db.execute(
            select(LeaveApplication)
            .where(LeaveApplication.id == application_id)
            .options(selectinload(LeaveApplication.leave_type))
        )
        application = result.scalars().first()
        if application is None:
            raise NotFoundException("LeaveApplication", str(application_id))

        if application.employee_id != employee.id:
            raise ForbiddenException("You can only cancel your own leave applications.")

        if application.status not in (LeaveStatus.pending, LeaveStatus.approved):
            raise ValidationException(
                {"status": [f"Cannot cancel a leave application that is "
                            f"{application.status.value}."]}
            )

        previous = application.status
        restored = _ZERO
        if previous == LeaveStatus.approved:
            balance = await LeaveService._get_balance_row(
                db, application.employee_id, application.leave_type_id,
                application.start_date.year,
            )
            restored = application.days_count - application.lop_days
            if balance is not None and restored > 0:
                balance.used_days = max(_ZERO, balance.used_days - restored)
                balance.updated_at = now

        application.status = LeaveStatus.cancelled
        application.cancelled_at = now
        application.updated_at = now
        await db.flush()

        await create_audit_entry(
            db,
            action="cancel",
            table_name="leave_applications",
            record_id=application.id,
            actor_id=employee.id,
            old_values={"status": previous.value},
            new_values={
                "status": LeaveStatus.cancelled.value,
                "used_days_restored": str(restored),
            },
        )

        if employee.reporting_manager_id:
            await notify_leave_cancelled(
                db, application, employee.reporting_manager_id, employee.full_name,
            )

        return LeaveService._application_out(
            application, employee=employee, leave_type=application.leave_type,
        )

    # ─────────────────────────────────────────────────────────────────
    # History
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_leave_history(
        db: AsyncSession,
        viewer: Employee,
        role: UserRole,
        pagination: PaginationParams,
        *,
        year: Optional[int] = None,
        month: Optional[date] = None,
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[uuid.UUID] = None,
    ) -> PaginatedResponse:
        """Applications visible to the viewer, newest first.

        admin/hr see everyone; managers see themselves and their direct
        reports; everyone else sees only their own.

        ``month`` is any day of the month to show. It keeps applications
        whose date range overlaps that month, so a leave spanning a month
        boundary appears under both months.
        """
        query = select(LeaveApplication).options(
            selectinload(LeaveApplication.employee).selectinload(Employee.department),
            selectinload(LeaveApplication.leave_type),
        )

        if role in _PRIVILEGED:
            scope: Optional[set[uuid.UUID]] = None
        elif role == UserRole.manager:
            scope = {viewer.id, *await TeamService.get_team_member_ids(db, viewer.id)}
        else:
            scope = {viewer.id}

        if employee_id is not None:
            if scope is not None and employee_id not in scope:
                raise ForbiddenException("You can only view your own or your team's leave.")
            query = query.where(LeaveApplication.employee_id == employee_id)
        elif scope is not None:
            query = query.where(LeaveApplication.employee_id.in_(scope))

        if year is not None:
            query = query.where(
                LeaveApplication.start_date >= date(year, 1, 1),
                LeaveApplication.start_date <= date(year, 12, 31),
            )
        if month is not None:
            month_start, month_end = month_bounds(month)
            query = query.where(
                LeaveApplication.start_date <= month_end,
                LeaveApplication.end_date >= month_start,
            )
        if status is not None:
            query = query.where(LeaveApplication.status == status)

        query = query.order_by(LeaveApplication.created_at.desc(), LeaveApplication.id)

        page = await paginate(db, query, pagination, model=LeaveApplication)
        page.data = [
            LeaveService._application_out(a, employee=a.employee, leave_type=a.leave_type)
            for a in page.data
        ]
        return page
