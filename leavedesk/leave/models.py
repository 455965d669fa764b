"""Leave ORM models: LeaveType, LeaveBalance, LeaveApplication."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leavedesk.common.constants import LeaveStatus
from leavedesk.database import Base
from leavedesk.leave.balance import compute_available


class LeaveType(Base):
    __tablename__ = "leave_types"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    code: Mapped[str] = mapped_column(sa.String(10), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    default_days: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), server_default=sa.text("0")
    )
    is_paid: Mapped[bool] = mapped_column(sa.Boolean, server_default=sa.text("TRUE"))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, server_default=sa.text("TRUE"))
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )

    # Relationships
    balances: Mapped[list[LeaveBalance]] = relationship(back_populates="leave_type")
    applications: Mapped[list[LeaveApplication]] = relationship(
        back_populates="leave_type"
    )


class LeaveBalance(Base):
    """Per employee, leave type and year. ``available`` is derived."""

    __tablename__ = "leave_balances"
    __table_args__ = (
        sa.UniqueConstraint(
            "employee_id", "leave_type_id", "year", name="uq_leave_balance"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"), nullable=False
    )
    leave_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("leave_types.id"), nullable=False
    )
    year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    entitled_days: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), nullable=False, server_default=sa.text("0")
    )
    used_days: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), nullable=False, server_default=sa.text("0")
    )
    carried_forward_days: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), nullable=False, server_default=sa.text("0")
    )
    adjusted_days: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), nullable=False, server_default=sa.text("0")
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )

    # Relationships
    employee: Mapped["Employee"] = relationship(back_populates="leave_balances")
    leave_type: Mapped[LeaveType] = relationship(back_populates="balances")

    @property
    def available(self) -> Decimal:
        return compute_available(
            entitled=self.entitled_days,
            used=self.used_days,
            carried_forward=self.carried_forward_days,
            adjusted=self.adjusted_days,
        )


class LeaveApplication(Base):
    __tablename__ = "leave_applications"
    __table_args__ = (
        sa.Index("ix_leave_applications_employee_status", "employee_id", "status"),
        sa.Index("ix_leave_applications_start_date", "start_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"), nullable=False
    )
    leave_type_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("leave_types.id")
    )
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    days_count: Mapped[Decimal] = mapped_column(sa.Numeric(5, 1), nullable=False)
    is_half_day: Mapped[bool] = mapped_column(
        sa.Boolean, server_default=sa.text("FALSE")
    )
    reason: Mapped[Optional[str]] = mapped_column(sa.Text)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status"),
        nullable=False,
        server_default=LeaveStatus.pending.value,
    )
    is_lop: Mapped[bool] = mapped_column(sa.Boolean, server_default=sa.text("FALSE"))
    lop_days: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), nullable=False, server_default=sa.text("0")
    )
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id")
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )
    remarks: Mapped[Optional[str]] = mapped_column(sa.Text)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )

    # Relationships
    employee: Mapped["Employee"] = relationship(
        back_populates="leave_applications", foreign_keys=[employee_id]
    )
    reviewer: Mapped[Optional["Employee"]] = relationship(
        foreign_keys=[reviewed_by]
    )
    leave_type: Mapped[Optional[LeaveType]] = relationship(
        back_populates="applications"
    )
