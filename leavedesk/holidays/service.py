"""Holiday service: calendar queries, CRUD and built-in calendar import."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.audit import create_audit_entry
from leavedesk.common.constants import HolidayType
from leavedesk.common.exceptions import (
    ConflictError,
    NotFoundException,
    ValidationException,
)
from leavedesk.config import settings
from leavedesk.holidays.calendar import builtin_calendar, expand_states, holiday_key
from leavedesk.holidays.models import Holiday
from leavedesk.holidays.schemas import (
    HolidayCreate,
    HolidayImportResult,
    HolidayUpdate,
)

logger = logging.getLogger(__name__)


def _normalize_scope(
    holiday_type: HolidayType,
    states: Optional[Sequence[str]],
) -> dict:
    """Derive the national/optional flags and state list from the type."""
    if holiday_type == HolidayType.regional:
        expanded = sorted(set(expand_states(states or [])))
        if not expanded:
            raise ValidationException(
                {"states": ["Regional holidays must list at least one state."]}
            )
        return {"is_national": False, "is_optional": True, "states": expanded}
    return {
        "is_national": holiday_type == HolidayType.national,
        "is_optional": False,
        "states": None,
    }


class HolidayService:
    """Async holiday operations."""

    @staticmethod
    async def list_holidays(
        db: AsyncSession,
        year: int,
        *,
        state: Optional[str] = None,
    ) -> list[Holiday]:
        """Holidays for *year* by date; with *state*, those observed there."""
        result = await db.execute(
            select(Holiday)
            .where(Holiday.year == year)
            .order_by(Holiday.date, Holiday.name)
        )
        holidays = list(result.scalars().all())
        if state:
            wanted = expand_states([state])[0]
            holidays = [h for h in holidays if h.observed_in(wanted)]
        return holidays

    @staticmethod
    async def get_available_states(db: AsyncSession, year: int) -> list[str]:
        """Distinct states named by the year's regional holidays."""
        result = await db.execute(
            select(Holiday.states).where(
                Holiday.year == year,
                Holiday.holiday_type == HolidayType.regional,
            )
        )
        states: set[str] = set()
        for row_states in result.scalars().all():
            states.update(row_states or [])
        return sorted(states)

    @staticmethod
    async def get_holiday(db: AsyncSession, holiday_id: uuid.UUID) -> Holiday:
        holiday = await db.get(Holiday, holiday_id)
        if holiday is None:
            raise NotFoundException("Holiday", holiday_id)
        return holiday

    @staticmethod
    async def holiday_dates_between(
        db: AsyncSession,
        start: date,
        end: date,
    ) -> set[date]:
        """Dates of mandatory (non-optional) holidays in [start, end]."""
        result = await db.execute(
            select(Holiday).where(Holiday.date >= start, Holiday.date <= end)
        )
        return {h.date for h in result.scalars().all() if not h.is_optional}

    @staticmethod
    async def create_holiday(
        db: AsyncSession,
        data: HolidayCreate,
        *,
        actor_id: uuid.UUID,
    ) -> Holiday:
        scope = _normalize_scope(data.holiday_type, data.states)
        holiday = Holiday(
            name=data.name.strip(),
            date=data.date,
            year=data.date.year,
            holiday_type=data.holiday_type,
            description=data.description,
            created_by=actor_id,
            updated_by=actor_id,
            **scope,
        )
        db.add(holiday)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("holiday", f"{data.name} on {data.date}")

        await create_audit_entry(
            db,
            action="create",
            table_name="holidays",
            record_id=holiday.id,
            actor_id=actor_id,
            new_values={
                "name": holiday.name,
                "date": holiday.date.isoformat(),
                "holiday_type": holiday.holiday_type.value,
            },
        )
        await db.refresh(holiday)
        return holiday

    @staticmethod
    async def update_holiday(
        db: AsyncSession,
        holiday_id: uuid.UUID,
        data: HolidayUpdate,
        *,
        actor_id: uuid.UUID,
    ) -> Holiday:
        holiday = await HolidayService.get_holiday(db, holiday_id)
        changes = data.model_dump(exclude_unset=True)
        old_values = {
            "name": holiday.name,
            "date": holiday.date.isoformat(),
            "holiday_type": holiday.holiday_type.value,
            "states": holiday.states,
        }

        if changes.get("name"):
            holiday.name = changes["name"].strip()
        if changes.get("date"):
            holiday.date = changes["date"]
            holiday.year = changes["date"].year
        if "description" in changes:
            holiday.description = changes["description"]
        if "holiday_type" in changes or "states" in changes:
            holiday_type = changes.get("holiday_type") or holiday.holiday_type
            states = changes["states"] if "states" in changes else holiday.states
            for field, value in _normalize_scope(holiday_type, states).items():
                setattr(holiday, field, value)
            holiday.holiday_type = holiday_type
        holiday.updated_by = actor_id

        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("holiday", f"{holiday.name} on {holiday.date}")

        await create_audit_entry(
            db,
            action="update",
            table_name="holidays",
            record_id=holiday.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values={
                "name": holiday.name,
                "date": holiday.date.isoformat(),
                "holiday_type": holiday.holiday_type.value,
                "states": holiday.states,
            },
        )
        await db.refresh(holiday)
        return holiday

    @staticmethod
    async def delete_holiday(
        db: AsyncSession,
        holiday_id: uuid.UUID,
        *,
        actor_id: uuid.UUID,
    ) -> None:
        holiday = await HolidayService.get_holiday(db, holiday_id)
        await create_audit_entry(
            db,
            action="delete",
            table_name="holidays",
            record_id=holiday.id,
            actor_id=actor_id,
            old_values={"name": holiday.name, "date": holiday.date.isoformat()},
        )
        await db.delete(holiday)
        await db.flush()

    @staticmethod
    async def import_calendar(
        db: AsyncSession,
        year: int,
        *,
        actor_id: uuid.UUID,
        batch_size: Optional[int] = None,
    ) -> HolidayImportResult:
        """Insert the built-in calendar for *year*, skipping existing name/date pairs."""
        seeds = builtin_calendar(year)
        if not seeds:
            raise ValidationException(
                {"year": [f"No built-in holiday calendar is available for {year}."]}
            )

        result = await db.execute(
            select(Holiday.name, Holiday.date).where(Holiday.year == year)
        )
        existing = {holiday_key(name, day) for name, day in result.all()}

        fresh = []
        for seed in seeds:
            if seed.dedupe_key in existing:
                continue
            existing.add(seed.dedupe_key)
            fresh.append(seed)

        size = batch_size or settings.HOLIDAY_IMPORT_BATCH_SIZE
        for start in range(0, len(fresh), size):
            batch = fresh[start:start + size]
            db.add_all([
                Holiday(
                    name=seed.name,
                    date=seed.date,
                    year=seed.year,
                    is_national=seed.is_national,
                    is_optional=seed.is_optional,
                    states=seed.states,
                    holiday_type=seed.holiday_type,
                    created_by=actor_id,
                    updated_by=actor_id,
                )
                for seed in batch
            ])
            await db.flush()
            logger.info(
                "Imported holiday batch %d-%d for %d",
                start + 1, start + len(batch), year,
            )

        if fresh:
            await create_audit_entry(
                db,
                action="import",
                table_name="holidays",
                record_id=None,
                actor_id=actor_id,
                new_values={"year": year, "imported": len(fresh)},
            )

        return HolidayImportResult(
            year=year,
            imported=len(fresh),
            skipped=len(seeds) - len(fresh),
            total=len(seeds),
        )
