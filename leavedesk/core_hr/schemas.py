"""Core HR Pydantic v2 schemas: request / response validation.

Naming conventions:
  - *Create / *Update  → request bodies (write)
  - *Response / *Detail → response bodies (read)
  - *Summary           → compact read representation

The ``create-employee`` function keeps the camelCase wire contract its
callers already use; those models set ``alias_generator=to_camel``.
"""


import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from leavedesk.common.constants import EmploymentType, GenderType, UserRole


# ═════════════════════════════════════════════════════════════════════
# Department
# ═════════════════════════════════════════════════════════════════════


class DepartmentResponse(BaseModel):
    """Full department representation."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    # Derived by the service layer
    employee_count: int = 0


class DepartmentBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str


class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = Field(None, max_length=1000)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Department name is required")
        return v


class DepartmentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = Field(None, max_length=1000)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Department name cannot be blank")
        return v


# ═════════════════════════════════════════════════════════════════════
# Employee: read schemas
# ═════════════════════════════════════════════════════════════════════


class EmployeeSummary(BaseModel):
    """Compact employee card used in lists and as an embedded manager."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    designation: Optional[str] = None
    department_id: Optional[uuid.UUID] = None
    is_active: bool = True


class EmployeeDetail(BaseModel):
    """Full employee record with enrichments set by the service layer."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: Optional[str] = None
    gender: Optional[GenderType] = None
    department_id: Optional[uuid.UUID] = None
    reporting_manager_id: Optional[uuid.UUID] = None
    designation: Optional[str] = None
    work_location: Optional[str] = None
    state: Optional[str] = None
    employment_type: EmploymentType
    date_of_joining: date
    is_active: bool
    created_at: datetime
    updated_at: datetime

    # Enriched
    department_info: Optional[DepartmentBrief] = None
    manager: Optional[EmployeeSummary] = None
    role: UserRole = UserRole.employee
    direct_reports_count: int = 0


# ═════════════════════════════════════════════════════════════════════
# Employee: write schemas
# ═════════════════════════════════════════════════════════════════════


class EmployeeUpdate(BaseModel):
    """Partial update; only the fields sent are changed."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    gender: Optional[GenderType] = None
    department_id: Optional[uuid.UUID] = None
    designation: Optional[str] = Field(None, max_length=150)
    work_location: Optional[str] = Field(None, max_length=150)
    state: Optional[str] = Field(None, max_length=100)
    employment_type: Optional[EmploymentType] = None
    date_of_joining: Optional[date] = None
    is_active: Optional[bool] = None


class AssignManagerRequest(BaseModel):
    """``None`` clears the reporting manager."""

    reporting_manager_id: Optional[uuid.UUID] = None


class RoleUpdateRequest(BaseModel):
    role: UserRole


# ═════════════════════════════════════════════════════════════════════
# create-employee function (camelCase contract)
# ═════════════════════════════════════════════════════════════════════


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateEmployeeRequest(_CamelModel):
    employee_id: str = Field(..., min_length=1, max_length=20)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    department_id: uuid.UUID
    employment_type: EmploymentType = EmploymentType.full_time
    date_of_joining: date
    gender: Optional[GenderType] = None
    work_location: Optional[str] = Field(None, max_length=150)
    state: Optional[str] = Field(None, max_length=100)

    @field_validator("employee_id", "first_name", "last_name")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        return v

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()


class CreateEmployeeResponse(_CamelModel):
    temp_password: str
    email_sent: bool
