"""Leave Pydantic v2 schemas: request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Out                → response bodies (read)
  - *Brief              → compact embedded representations
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from leavedesk.common.constants import ApprovalAction, LeaveStatus


def _half_day_granular(value: Decimal) -> Decimal:
    if (value * 2) % 1 != 0:
        raise ValueError("Must be a multiple of 0.5 days.")
    return value


# ═════════════════════════════════════════════════════════════════════
# Embedded / shared
# ═════════════════════════════════════════════════════════════════════


class EmployeeBrief(BaseModel):
    """Minimal employee info embedded in leave responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    full_name: str
    department_name: Optional[str] = None


class LeaveTypeBrief(BaseModel):
    """Minimal leave type info embedded in leave responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    code: str
    name: str
    is_paid: bool = True


# ═════════════════════════════════════════════════════════════════════
# Leave Type
# ═════════════════════════════════════════════════════════════════════


class LeaveTypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    code: str
    name: str
    description: Optional[str] = None
    default_days: Decimal
    is_paid: bool = True
    is_active: bool = True


# ═════════════════════════════════════════════════════════════════════
# Leave Balance
# ═════════════════════════════════════════════════════════════════════


class LeaveBalanceOut(BaseModel):
    """Balance for one leave type; ``available`` is computed, never stored."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    year: int
    entitled_days: Decimal
    used_days: Decimal
    carried_forward_days: Decimal
    adjusted_days: Decimal
    available: Decimal

    leave_type_name: str
    leave_type_code: str


class BalanceAdjustRequest(BaseModel):
    """Absolute replacement for ``adjusted_days``; not a delta."""

    adjusted_days: Decimal = Field(..., ge=-365, le=365)
    reason: str = Field(..., min_length=3, max_length=500)

    @field_validator("adjusted_days")
    @classmethod
    def _granularity(cls, v: Decimal) -> Decimal:
        return _half_day_granular(v)

    @field_validator("reason")
    @classmethod
    def _strip_reason(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Reason must be at least 3 characters.")
        return v


# ═════════════════════════════════════════════════════════════════════
# Leave Application
# ═════════════════════════════════════════════════════════════════════


class LeaveApplicationCreate(BaseModel):
    """Payload for applying for leave."""

    leave_type_id: uuid.UUID
    start_date: date = Field(..., description="First day of leave (inclusive)")
    end_date: date = Field(..., description="Last day of leave (inclusive)")
    is_half_day: bool = False
    reason: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def _check_dates(self) -> LeaveApplicationCreate:
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date.")
        if self.is_half_day and self.start_date != self.end_date:
            raise ValueError("A half-day request must start and end on the same date.")
        return self


class LeaveApplicationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: Optional[uuid.UUID] = None
    start_date: date
    end_date: date
    days_count: Decimal
    is_half_day: bool = False
    reason: Optional[str] = None
    status: LeaveStatus
    is_lop: bool = False
    lop_days: Decimal = Decimal("0")
    reviewed_by: Optional[uuid.UUID] = None
    reviewed_at: Optional[datetime] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None

    applicant: Optional[EmployeeBrief] = None
    leave_type_info: Optional[LeaveTypeBrief] = None


class LeaveActionRequest(BaseModel):
    """Approve or reject a pending application."""

    action: ApprovalAction
    remarks: Optional[str] = Field(None, max_length=1000)
