"""Team view schemas."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from leavedesk.common.constants import EmploymentType


class TeamMemberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    designation: Optional[str] = None
    department_name: Optional[str] = None
    employment_type: EmploymentType
    date_of_joining: date


class TeamStatsOut(BaseModel):
    total_team_members: int = 0
    on_leave_today: int = 0
    pending_approvals: int = 0
    upcoming_leaves: int = 0


class TeamBalanceItem(BaseModel):
    leave_type_id: Optional[uuid.UUID] = None
    name: str
    code: str
    entitled: Decimal
    used: Decimal
    available: Decimal


class TeamMemberBalancesOut(BaseModel):
    member_id: uuid.UUID
    balances: list[TeamBalanceItem]


class TeamMemberStatsOut(BaseModel):
    member_id: uuid.UUID
    total_leaves_taken: Decimal = Decimal("0")
    pending_requests: int = 0
    lop_days: Decimal = Decimal("0")
    attendance_rate: int = 100
