"""Audit mixin, audit-log model, and async helpers for recording changes."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from leavedesk.database import Base

logger = logging.getLogger(__name__)


# ── Mixin for any auditable model ───────────────────────────────────

class AuditMixin:
    """
    Add ``created_at``, ``updated_at``, ``created_by``, ``updated_by``
    to any SQLAlchemy model via::

        class Holiday(Base, AuditMixin):
            ...
    """

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id"),
        nullable=True,
    )
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id"),
        nullable=True,
    )


# ── Append-only audit log ───────────────────────────────────────────

class AuditLog(Base):
    """Append-only record of data changes, keyed by table and row."""

    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    actor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id"),
        nullable=True,
    )
    action: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    table_name: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    record_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), nullable=True,
    )
    old_values: Mapped[Optional[dict]] = mapped_column(JSONB, nullable=True)
    new_values: Mapped[Optional[dict]] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )

    __table_args__ = (
        sa.Index("ix_audit_logs_actor_id", "actor_id"),
        sa.Index("ix_audit_logs_record", "table_name", "record_id"),
        sa.Index("ix_audit_logs_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLog {self.action} {self.table_name}"
            f"/{self.record_id} by {self.actor_id}>"
        )


# ── Helpers ─────────────────────────────────────────────────────────

async def create_audit_entry(
    session: AsyncSession,
    *,
    action: str,
    table_name: str,
    record_id: Optional[uuid.UUID],
    actor_id: Optional[uuid.UUID] = None,
    old_values: Optional[dict[str, Any]] = None,
    new_values: Optional[dict[str, Any]] = None,
) -> AuditLog:
    """
    Create and flush an audit-log entry in the caller's transaction.

    Args:
        session: Async SQLAlchemy session.
        action: create | update | delete | approve | reject | etc.
        table_name: e.g. "employees", "leave_balances".
        record_id: UUID of the affected row.
        actor_id: UUID of the employee performing the action.
        old_values: Previous state (for updates/deletes).
        new_values: New state (for creates/updates).
    """
    entry = AuditLog(
        actor_id=actor_id,
        action=action,
        table_name=table_name,
        record_id=record_id,
        old_values=old_values,
        new_values=new_values,
    )
    session.add(entry)
    await session.flush()
    return entry


async def record_audit_best_effort(
    session: AsyncSession,
    **entry: Any,
) -> Optional[AuditLog]:
    """Write an audit entry inside a SAVEPOINT; never fail the caller.

    A database error rolls back only the savepoint, is logged, and the
    surrounding transaction carries on. Returns ``None`` in that case.
    """
    try:
        async with session.begin_nested():
            return await create_audit_entry(session, **entry)
    except SQLAlchemyError:
        logger.warning(
            "Audit entry %s on %s/%s was not recorded",
            entry.get("action"),
            entry.get("table_name"),
            entry.get("record_id"),
            exc_info=True,
        )
        return None
