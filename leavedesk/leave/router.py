"""Leave router: balances, adjustments, applications, approvals, history.

All endpoints require authentication. Balance adjustment needs the
``leave:adjust_balance`` permission; approvals are checked per
application against the applicant's reporting line.
"""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import current_role, get_current_user, require_permission
from leavedesk.common import clock
from leavedesk.common.constants import LeaveStatus
from leavedesk.common.pagination import PaginationParams
from leavedesk.core_hr.models import Employee
from leavedesk.database import get_db
from leavedesk.leave.schemas import (
    BalanceAdjustRequest,
    LeaveActionRequest,
    LeaveApplicationCreate,
    LeaveApplicationOut,
    LeaveBalanceOut,
)
from leavedesk.leave.service import LeaveService

router = APIRouter(prefix="", tags=["leave"])


# ── GET /types ──────────────────────────────────────────────────────

@router.get("/types")
async def leave_types(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"data": await LeaveService.get_leave_types(db)}


# ── GET /balances ───────────────────────────────────────────────────

@router.get("/balances")
async def balances(
    request: Request,
    employee_id: Optional[uuid.UUID] = Query(None, description="Defaults to the caller"),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Balances for one employee and year with the computed ``available``."""
    target = employee_id or employee.id
    await LeaveService.assert_can_view(db, employee, current_role(request), target)
    data = await LeaveService.get_employee_balances(
        db, target, year or clock.today().year,
    )
    return {"data": data}


# ── PUT /balances/{id}/adjustment ───────────────────────────────────

@router.put("/balances/{balance_id}/adjustment", response_model=None)
async def adjust_balance(
    balance_id: uuid.UUID,
    body: BalanceAdjustRequest,
    employee: Employee = Depends(require_permission("leave:adjust_balance")),
    db: AsyncSession = Depends(get_db),
):
    """Set ``adjusted_days`` to an absolute value (not a delta)."""
    balance: LeaveBalanceOut = await LeaveService.adjust_balance(
        db, balance_id, body, actor_id=employee.id,
    )
    return {"data": balance, "message": "Leave balance adjusted"}


# ── Applications ────────────────────────────────────────────────────

@router.post("/applications", status_code=201)
async def apply_leave(
    body: LeaveApplicationCreate,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    application = await LeaveService.apply_leave(db, employee, body)
    return {"data": application, "message": "Leave application submitted"}


@router.get("/applications")
async def leave_history(
    request: Request,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[str] = Query(None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$"),
    status: Optional[LeaveStatus] = Query(None),
    employee_id: Optional[uuid.UUID] = Query(None),
    pagination: PaginationParams = Depends(),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Leave history scoped by role: all, own plus team, or own.

    ``month`` (YYYY-MM) drives the leave calendar: applications overlapping
    that month, whichever month they start in.
    """
    return await LeaveService.get_leave_history(
        db,
        employee,
        current_role(request),
        pagination,
        year=year,
        month=date.fromisoformat(f"{month}-01") if month else None,
        status=status,
        employee_id=employee_id,
    )


# Registered before /applications/{application_id}/... routes.
@router.get("/approvals/pending")
async def pending_approvals(
    request: Request,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    data = await LeaveService.list_pending_approvals(db, employee, current_role(request))
    return {"data": data, "meta": {"total": len(data)}}


@router.post("/applications/{application_id}/action")
async def process_application(
    request: Request,
    application_id: uuid.UUID,
    body: LeaveActionRequest,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Approve or reject a pending application."""
    application: LeaveApplicationOut = await LeaveService.process_application(
        db,
        application_id,
        body,
        approver=employee,
        role=current_role(request),
    )
    return {
        "data": application,
        "message": f"Leave application {application.status.value}",
    }


@router.post("/applications/{application_id}/cancel")
async def cancel_application(
    application_id: uuid.UUID,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    application = await LeaveService.cancel_application(db, application_id, employee)
    return {"data": application, "message": "Leave application cancelled"}
