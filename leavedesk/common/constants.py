"""Enums and constants for leavedesk, matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum


# ── Employee / Core HR ──────────────────────────────────────────────

class EmploymentType(str, enum.Enum):
    full_time = "full_time"
    part_time = "part_time"
    contract = "contract"


class GenderType(str, enum.Enum):
    male = "male"
    female = "female"
    other = "other"


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    employee = "employee"
    manager = "manager"
    hr = "hr"
    admin = "admin"


# Roles that see the whole organization instead of a reporting line.
PRIVILEGED_ROLES: frozenset[UserRole] = frozenset({UserRole.hr, UserRole.admin})


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"


class ApprovalAction(str, enum.Enum):
    approve = "approve"
    reject = "reject"


# ── Holidays ────────────────────────────────────────────────────────

class HolidayType(str, enum.Enum):
    national = "national"
    regional = "regional"
    company = "company"


MAX_REGIONAL_HOLIDAYS_PER_YEAR = 6

STATE_CODE_MAP: dict[str, str] = {
    "AN": "Andaman and Nicobar Islands",
    "AP": "Andhra Pradesh",
    "AR": "Arunachal Pradesh",
    "AS": "Assam",
    "BR": "Bihar",
    "CG": "Chhattisgarh",
    "CH": "Chandigarh",
    "DD": "Daman and Diu",
    "DL": "Delhi",
    "DN": "Dadra and Nagar Haveli",
    "GA": "Goa",
    "GJ": "Gujarat",
    "HP": "Himachal Pradesh",
    "HR": "Haryana",
    "JH": "Jharkhand",
    "JK": "Jammu and Kashmir",
    "KA": "Karnataka",
    "KL": "Kerala",
    "LA": "Ladakh",
    "LD": "Lakshadweep",
    "MH": "Maharashtra",
    "ML": "Meghalaya",
    "MN": "Manipur",
    "MP": "Madhya Pradesh",
    "MZ": "Mizoram",
    "NL": "Nagaland",
    "OR": "Odisha",
    "PB": "Punjab",
    "PY": "Puducherry",
    "RJ": "Rajasthan",
    "SK": "Sikkim",
    "TG": "Telangana",
    "TN": "Tamil Nadu",
    "TR": "Tripura",
    "UK": "Uttarakhand",
    "UP": "Uttar Pradesh",
    "WB": "West Bengal",
}


# ── Notifications ───────────────────────────────────────────────────

class NotificationType(str, enum.Enum):
    leave_status = "leave_status"
    pending_approval = "pending_approval"
    general = "general"


# ── Organization ────────────────────────────────────────────────────

class BannerColor(str, enum.Enum):
    red = "red"
    yellow = "yellow"


# ── Role-based permissions ──────────────────────────────────────────

_EMPLOYEE_PERMISSIONS = [
    "leave:apply",
    "leave:read_own",
    "holiday:read",
    "notification:read_own",
]

PERMISSIONS: dict[UserRole, list[str]] = {
    UserRole.employee: _EMPLOYEE_PERMISSIONS,
    UserRole.manager: _EMPLOYEE_PERMISSIONS + [
        "leave:read_team",
        "leave:approve",
        "team:read",
    ],
    UserRole.hr: _EMPLOYEE_PERMISSIONS + [
        "leave:read_team",
        "leave:read_all",
        "leave:approve",
        "leave:adjust_balance",
        "team:read",
        "employee:create",
        "employee:update",
        "employee:manage_roles",
        "department:manage",
        "holiday:manage",
        "analytics:read",
        "organization:configure",
        "audit:read",
    ],
    UserRole.admin: _EMPLOYEE_PERMISSIONS + [
        "leave:read_team",
        "leave:read_all",
        "leave:approve",
        "leave:adjust_balance",
        "team:read",
        "employee:create",
        "employee:update",
        "employee:manage_roles",
        "department:manage",
        "holiday:manage",
        "analytics:read",
        "organization:configure",
        "audit:read",
    ],
}

# ── Misc constants ──────────────────────────────────────────────────

MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
UNASSIGNED_DEPARTMENT = "Unassigned"
UNKNOWN_LEAVE_TYPE_NAME = "Unknown"
UNKNOWN_LEAVE_TYPE_CODE = "??"
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
