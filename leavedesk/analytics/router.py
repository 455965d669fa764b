"""Analytics router: yearly leave report and organization dashboard.

Every endpoint requires the ``analytics:read`` permission (HR, admin).
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.analytics.schemas import LeaveAnalyticsResponse, OrganizationStats
from leavedesk.analytics.service import AnalyticsService
from leavedesk.auth.dependencies import require_permission
from leavedesk.common import clock
from leavedesk.core_hr.models import Employee
from leavedesk.database import get_db

router = APIRouter(prefix="", tags=["analytics"])


# ── GET /leave ──────────────────────────────────────────────────────

@router.get("/leave", response_model=LeaveAnalyticsResponse)
async def leave_analytics(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    employee: Employee = Depends(require_permission("analytics:read")),
    db: AsyncSession = Depends(get_db),
):
    """Monthly trends, department usage, type distribution, balances."""
    return await AnalyticsService.get_leave_analytics(db, year or clock.today().year)


# ── GET /organization-stats ─────────────────────────────────────────

@router.get("/organization-stats", response_model=OrganizationStats)
async def organization_stats(
    employee: Employee = Depends(require_permission("analytics:read")),
    db: AsyncSession = Depends(get_db),
):
    return await AnalyticsService.get_organization_stats(db, clock.today())


# ── GET /recent-leave-requests ──────────────────────────────────────

@router.get("/recent-leave-requests")
async def recent_leave_requests(
    limit: int = Query(10, ge=1, le=50),
    employee: Employee = Depends(require_permission("analytics:read")),
    db: AsyncSession = Depends(get_db),
):
    return {"data": await AnalyticsService.get_recent_leave_requests(db, limit)}


# ── GET /department-overview ────────────────────────────────────────

@router.get("/department-overview")
async def department_overview(
    employee: Employee = Depends(require_permission("analytics:read")),
    db: AsyncSession = Depends(get_db),
):
    return {"data": await AnalyticsService.get_department_leave_overview(db, clock.today())}
