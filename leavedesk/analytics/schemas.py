"""Analytics Pydantic v2 schemas: report and dashboard responses."""


import uuid
from datetime import date, datetime

from pydantic import BaseModel

from leavedesk.common.constants import LeaveStatus


# ── Leave analytics (reports page) ──────────────────────────────────

class MonthlyLeaveTrend(BaseModel):
    month: str
    approved: float = 0
    pending: float = 0
    rejected: float = 0


class DepartmentUsage(BaseModel):
    department: str
    total_days: int
    employee_count: int


class LeaveTypeDistribution(BaseModel):
    name: str
    code: str
    total_days: int
    percentage: int


class BalanceSummary(BaseModel):
    total_entitled: int = 0
    total_used: int = 0
    total_available: int = 0
    utilization_rate: int = 0


class LeaveAnalyticsResponse(BaseModel):
    """Everything the reports page charts for one year."""

    year: int
    monthly_trends: list[MonthlyLeaveTrend]
    department_usage: list[DepartmentUsage]
    leave_type_distribution: list[LeaveTypeDistribution]
    balance_summary: BalanceSummary
    total_applications: int
    approved_applications: int


# ── Organization dashboard ──────────────────────────────────────────

class OrganizationStats(BaseModel):
    total_employees: int = 0
    active_employees: int = 0
    total_pending_leaves: int = 0
    employees_on_leave_today: int = 0
    upcoming_leaves_this_week: int = 0
    total_lop_days_this_month: int = 0


class RecentLeaveRequest(BaseModel):
    id: uuid.UUID
    employee_name: str
    leave_type: str
    start_date: date
    end_date: date
    days_count: float
    status: LeaveStatus
    created_at: datetime


class DepartmentLeaveOverview(BaseModel):
    department_id: uuid.UUID
    department_name: str
    total_employees: int
    on_leave_today: int
    pending_requests: int
