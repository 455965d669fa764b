"""Organization ORM models: settings row and announcement banners."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from leavedesk.common.audit import AuditMixin
from leavedesk.common.constants import BannerColor
from leavedesk.database import Base


class OrganizationSettings(Base, AuditMixin):
    """Company profile and policy document links (single row)."""

    __tablename__ = "organization_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(sa.String(255))
    address: Mapped[Optional[str]] = mapped_column(sa.Text)
    fiscal_year_start: Mapped[Optional[str]] = mapped_column(sa.String(20))
    working_days: Mapped[Optional[str]] = mapped_column(sa.String(100))

    # ── Policy documents ────────────────────────────────────────────
    leave_policy_url: Mapped[Optional[str]] = mapped_column(sa.String(500))
    employee_handbook_url: Mapped[Optional[str]] = mapped_column(sa.String(500))
    posh_policy_url: Mapped[Optional[str]] = mapped_column(sa.String(500))
    cpp_url: Mapped[Optional[str]] = mapped_column(sa.String(500))

    def __repr__(self) -> str:
        return f"<OrganizationSettings {self.name!r}>"


class AnnouncementBanner(Base):
    """Marquee message shown across the app; one banner per position."""

    __tablename__ = "announcement_banners"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    message: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    color: Mapped[BannerColor] = mapped_column(
        sa.Enum(BannerColor, name="banner_color"),
        nullable=False,
        default=BannerColor.yellow,
    )
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=True, server_default=sa.text("TRUE"),
    )
    position: Mapped[int] = mapped_column(sa.Integer, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )

    def __repr__(self) -> str:
        return f"<AnnouncementBanner #{self.position} {self.color.value}>"
