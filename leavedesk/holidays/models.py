"""Holiday ORM model."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from leavedesk.common.audit import AuditMixin
from leavedesk.common.constants import HolidayType
from leavedesk.database import Base


class Holiday(Base, AuditMixin):
    """A calendar holiday. Regional ones list the states observing them."""

    __tablename__ = "holidays"
    __table_args__ = (
        sa.UniqueConstraint("name", "date", name="uq_holiday_name_date"),
        sa.Index("ix_holidays_year", "year"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    is_national: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, server_default=sa.text("FALSE"),
    )
    is_optional: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, server_default=sa.text("FALSE"),
    )
    states: Mapped[Optional[list]] = mapped_column(JSONB)
    holiday_type: Mapped[HolidayType] = mapped_column(
        sa.Enum(HolidayType, name="holiday_type"),
        nullable=False,
        server_default=HolidayType.company.value,
    )
    description: Mapped[Optional[str]] = mapped_column(sa.Text)

    def observed_in(self, state: str) -> bool:
        """National and company holidays apply everywhere."""
        if self.holiday_type != HolidayType.regional:
            return True
        return state in (self.states or [])

    def __repr__(self) -> str:
        return f"<Holiday {self.name!r} {self.date}>"
