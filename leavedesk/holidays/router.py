"""Holiday endpoints: calendar listing, states, CRUD and built-in import."""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_current_user, require_permission
from leavedesk.common import clock
from leavedesk.common.constants import MAX_REGIONAL_HOLIDAYS_PER_YEAR
from leavedesk.core_hr.models import Employee
from leavedesk.database import get_db
from leavedesk.holidays.schemas import (
    HolidayCreate,
    HolidayListMeta,
    HolidayOut,
    HolidayUpdate,
)
from leavedesk.holidays.service import HolidayService

router = APIRouter(prefix="", tags=["holidays"])


@router.get("")
async def list_holidays(
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    state: Optional[str] = Query(default=None, description="State code or name"),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Holidays for a year, optionally narrowed to those observed in a state."""
    target_year = year or clock.today().year
    holidays = await HolidayService.list_holidays(db, target_year, state=state)
    return {
        "data": [HolidayOut.model_validate(h) for h in holidays],
        "meta": HolidayListMeta(
            year=target_year,
            state=state,
            total=len(holidays),
            max_regional_per_year=MAX_REGIONAL_HOLIDAYS_PER_YEAR,
        ),
    }


@router.get("/states")
async def list_states(
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    states = await HolidayService.get_available_states(db, year or clock.today().year)
    return {"data": states}


@router.post("/import", status_code=201)
async def import_calendar(
    year: int = Query(..., ge=2000, le=2100),
    employee: Employee = Depends(require_permission("holiday:manage")),
    db: AsyncSession = Depends(get_db),
):
    """Import the built-in calendar; holidays already present are skipped."""
    result = await HolidayService.import_calendar(db, year, actor_id=employee.id)
    message = (
        f"Imported {result.imported} holiday(s)"
        if result.imported
        else "All holidays for this year are already imported"
    )
    return {"data": result, "message": message}


@router.post("", status_code=201)
async def create_holiday(
    body: HolidayCreate,
    employee: Employee = Depends(require_permission("holiday:manage")),
    db: AsyncSession = Depends(get_db),
):
    holiday = await HolidayService.create_holiday(db, body, actor_id=employee.id)
    return {"data": HolidayOut.model_validate(holiday), "message": "Holiday created"}


@router.patch("/{holiday_id}")
async def update_holiday(
    holiday_id: uuid.UUID,
    body: HolidayUpdate,
    employee: Employee = Depends(require_permission("holiday:manage")),
    db: AsyncSession = Depends(get_db),
):
    holiday = await HolidayService.update_holiday(
        db, holiday_id, body, actor_id=employee.id,
    )
    return {"data": HolidayOut.model_validate(holiday), "message": "Holiday updated"}


@router.delete("/{holiday_id}")
async def delete_holiday(
    holiday_id: uuid.UUID,
    employee: Employee = Depends(require_permission("holiday:manage")),
    db: AsyncSession = Depends(get_db),
):
    await HolidayService.delete_holiday(db, holiday_id, actor_id=employee.id)
    return {"message": "Holiday deleted"}
