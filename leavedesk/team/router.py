"""Team endpoints: reporting line, team leave, balances and stats."""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import current_role, get_current_user, is_privileged
from leavedesk.common import clock
from leavedesk.common.constants import UserRole
from leavedesk.common.exceptions import ForbiddenException
from leavedesk.core_hr.models import Employee
from leavedesk.database import get_db
from leavedesk.team.service import TeamService

router = APIRouter(prefix="", tags=["team"])


async def team_member_ids(
    request: Request,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[uuid.UUID]:
    """Team scope for the caller: everyone for HR/admin, else direct reports."""
    role = current_role(request)
    if is_privileged(role):
        return await TeamService.get_team_member_ids(db, employee.id, show_all=True)

    member_ids = await TeamService.get_team_member_ids(db, employee.id)
    if not member_ids and role != UserRole.manager:
        raise ForbiddenException("Only reporting managers, HR and admins have a team view.")
    return member_ids


@router.get("/is-manager")
async def is_manager(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await TeamService.is_reporting_manager(db, employee.id)
    return {"data": {"is_reporting_manager": result}}


@router.get("/members")
async def list_members(
    member_ids: list[uuid.UUID] = Depends(team_member_ids),
    db: AsyncSession = Depends(get_db),
):
    members = await TeamService.get_team_members(db, member_ids)
    return {"data": members, "meta": {"total": len(members)}}


@router.get("/leave-requests")
async def team_leave_requests(
    status: str = Query(default="pending", pattern="^(pending|all)$"),
    member_ids: list[uuid.UUID] = Depends(team_member_ids),
    db: AsyncSession = Depends(get_db),
):
    requests = await TeamService.get_team_leave_requests(db, member_ids, status=status)
    return {"data": requests, "meta": {"total": len(requests)}}


@router.get("/stats")
async def team_stats(
    member_ids: list[uuid.UUID] = Depends(team_member_ids),
    db: AsyncSession = Depends(get_db),
):
    return {"data": await TeamService.get_team_stats(db, member_ids, clock.today())}


@router.get("/balances")
async def team_balances(
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    member_ids: list[uuid.UUID] = Depends(team_member_ids),
    db: AsyncSession = Depends(get_db),
):
    target_year = year or clock.today().year
    return {"data": await TeamService.get_team_balances(db, member_ids, target_year)}


@router.get("/member-stats")
async def team_member_stats(
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    member_ids: list[uuid.UUID] = Depends(team_member_ids),
    db: AsyncSession = Depends(get_db),
):
    today = clock.today()
    stats = await TeamService.get_team_member_stats(
        db, member_ids, year or today.year, today,
    )
    return {"data": stats}
