"""Organization Pydantic v2 schemas."""


import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from leavedesk.common.constants import BannerColor


# ── Settings ────────────────────────────────────────────────────────

class OrganizationSettingsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: Optional[str] = None
    address: Optional[str] = None
    fiscal_year_start: Optional[str] = None
    working_days: Optional[str] = None
    leave_policy_url: Optional[str] = None
    employee_handbook_url: Optional[str] = None
    posh_policy_url: Optional[str] = None
    cpp_url: Optional[str] = None
    updated_at: datetime


class OrganizationSettingsUpdate(BaseModel):
    """Partial update. ``name`` is required when the row does not exist yet."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=1000)
    fiscal_year_start: Optional[str] = Field(None, max_length=20)
    working_days: Optional[str] = Field(None, max_length=100)


# ── Policy documents ────────────────────────────────────────────────

class PolicyDocumentKey(str, Enum):
    leave_policy = "leave_policy"
    employee_handbook = "employee_handbook"
    posh_policy = "posh_policy"
    cpp = "cpp"


POLICY_DOCUMENT_LABELS: dict[PolicyDocumentKey, str] = {
    PolicyDocumentKey.leave_policy: "Leave Policy",
    PolicyDocumentKey.employee_handbook: "Employee Handbook",
    PolicyDocumentKey.posh_policy: "POSH Policy",
    PolicyDocumentKey.cpp: "CPP (Company Policy & Procedure)",
}


class PolicyDocumentOut(BaseModel):
    key: PolicyDocumentKey
    label: str
    url: Optional[str] = None


class PolicyDocumentUpdate(BaseModel):
    """A blank or missing ``url`` clears the link."""

    url: Optional[str] = Field(None, max_length=500)

    @field_validator("url")
    @classmethod
    def _check_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v


# ── Announcement banners ────────────────────────────────────────────

class BannerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    message: str
    color: BannerColor
    is_active: bool
    position: int
    created_at: datetime
    updated_at: datetime


class BannerUpsert(BaseModel):
    message: str = Field("", max_length=500)
    color: BannerColor = BannerColor.yellow
    is_active: bool = True


# ── Audit log ───────────────────────────────────────────────────────

class AuditLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    actor_id: Optional[uuid.UUID] = None
    actor_email: Optional[str] = None
    action: str
    table_name: str
    record_id: Optional[uuid.UUID] = None
    old_values: Optional[dict[str, Any]] = None
    new_values: Optional[dict[str, Any]] = None
    created_at: datetime
