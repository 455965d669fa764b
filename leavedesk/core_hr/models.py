"""Core HR ORM models: Department, Employee.

SQLAlchemy 2.0 async-compatible models with Mapped[] annotations.
Column names match the schema created by 001_initial_schema.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leavedesk.common.constants import EmploymentType, GenderType
from leavedesk.database import Base

if TYPE_CHECKING:
    from leavedesk.auth.models import RoleAssignment
    from leavedesk.leave.models import LeaveApplication, LeaveBalance


# ═════════════════════════════════════════════════════════════════════
# Department
# ═════════════════════════════════════════════════════════════════════


class Department(Base):
    """Organisational department. Employee counts are derived, never stored."""

    __tablename__ = "departments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(150), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )

    # ── Relationships ───────────────────────────────────────────────
    employees: Mapped[list[Employee]] = relationship(
        back_populates="department", foreign_keys="Employee.department_id",
    )

    def __repr__(self) -> str:
        return f"<Department {self.name!r}>"


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(Base):
    """Employee record; ``reporting_manager_id`` forms the reporting tree."""

    __tablename__ = "employees"

    # ── Primary key ─────────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # ── Identifiers ─────────────────────────────────────────────────
    employee_code: Mapped[str] = mapped_column(
        sa.String(20), unique=True, nullable=False,
    )

    # ── Name / Contact ──────────────────────────────────────────────
    first_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        sa.String(255), unique=True, nullable=False,
    )
    phone: Mapped[Optional[str]] = mapped_column(sa.String(20))
    gender: Mapped[Optional[GenderType]] = mapped_column(
        sa.Enum(GenderType, name="gender_type"),
    )

    # ── Org hierarchy ───────────────────────────────────────────────
    department_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("departments.id"),
    )
    reporting_manager_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"),
    )
    designation: Mapped[Optional[str]] = mapped_column(sa.String(150))
    work_location: Mapped[Optional[str]] = mapped_column(sa.String(150))
    state: Mapped[Optional[str]] = mapped_column(sa.String(100))

    # ── Employment ──────────────────────────────────────────────────
    employment_type: Mapped[EmploymentType] = mapped_column(
        sa.Enum(EmploymentType, name="employment_type"),
        server_default=EmploymentType.full_time.value,
    )
    date_of_joining: Mapped[date] = mapped_column(sa.Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, server_default=sa.text("TRUE"),
    )

    # ── Timestamps ──────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )

    # ── Relationships ───────────────────────────────────────────────
    department: Mapped[Optional[Department]] = relationship(
        back_populates="employees", foreign_keys=[department_id],
    )
    reporting_manager: Mapped[Optional[Employee]] = relationship(
        remote_side=[id], foreign_keys=[reporting_manager_id],
        back_populates="direct_reports",
    )
    direct_reports: Mapped[list[Employee]] = relationship(
        back_populates="reporting_manager",
        foreign_keys=[reporting_manager_id],
    )
    role_assignment: Mapped[Optional["RoleAssignment"]] = relationship(
        back_populates="employee",
        foreign_keys="RoleAssignment.employee_id",
        uselist=False,
    )
    leave_balances: Mapped[list["LeaveBalance"]] = relationship(
        back_populates="employee",
    )
    leave_applications: Mapped[list["LeaveApplication"]] = relationship(
        back_populates="employee",
        foreign_keys="LeaveApplication.employee_id",
    )

    # ── Helpers ─────────────────────────────────────────────────────

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return (
            f"<Employee {self.employee_code} "
            f"{self.first_name} {self.last_name}>"
        )
