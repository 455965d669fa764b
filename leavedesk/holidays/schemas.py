"""Holiday Pydantic schemas."""

from __future__ import annotations

import uuid
import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from leavedesk.common.constants import HolidayType


class HolidayOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    date: dt.date
    year: int
    is_national: bool
    is_optional: bool
    states: Optional[list[str]] = None
    holiday_type: HolidayType
    description: Optional[str] = None


class HolidayCreate(BaseModel):
    """States may be given as codes ("MH") or full names."""

    name: str = Field(..., min_length=2, max_length=200)
    date: dt.date
    holiday_type: HolidayType = HolidayType.company
    states: Optional[list[str]] = None
    description: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def _regional_needs_states(self) -> HolidayCreate:
        if self.holiday_type == HolidayType.regional and not self.states:
            raise ValueError("Regional holidays must list at least one state.")
        return self


class HolidayUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    date: Optional[dt.date] = None
    holiday_type: Optional[HolidayType] = None
    states: Optional[list[str]] = None
    description: Optional[str] = Field(None, max_length=1000)


class HolidayListMeta(BaseModel):
    year: int
    state: Optional[str] = None
    total: int
    max_regional_per_year: int


class HolidayImportResult(BaseModel):
    year: int
    imported: int
    skipped: int
    total: int
