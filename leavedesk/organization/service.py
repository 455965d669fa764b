"""Organization service: settings, policy links, banners and the audit log.

``organization_settings`` holds a single row; it is created by the first
update that supplies a ``name``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.audit import AuditLog, create_audit_entry
from leavedesk.common.exceptions import NotFoundException, ValidationException
from leavedesk.core_hr.models import Employee
from leavedesk.organization.models import AnnouncementBanner, OrganizationSettings
from leavedesk.organization.schemas import (
    POLICY_DOCUMENT_LABELS,
    AuditLogOut,
    BannerUpsert,
    OrganizationSettingsUpdate,
    PolicyDocumentKey,
    PolicyDocumentOut,
)

MAX_AUDIT_LOG_LIMIT = 200


def _url_column(key: PolicyDocumentKey) -> str:
    return f"{key.value}_url"


class OrganizationService:
    """Async operations on the organization profile and banners."""

    # ── Settings ────────────────────────────────────────────────────

    @staticmethod
    async def get_settings(db: AsyncSession) -> Optional[OrganizationSettings]:
        result = await db.execute(select(OrganizationSettings).limit(1))
        return result.scalars().first()

    @staticmethod
    async def update_settings(
        db: AsyncSession,
        data: OrganizationSettingsUpdate,
        *,
        actor_id: uuid.UUID,
    ) -> OrganizationSettings:
        changes = data.model_dump(exclude_unset=True)
        org = await OrganizationService.get_settings(db)

        if org is None:
            if not changes.get("name"):
                raise ValidationException(
                    {"name": ["Organization name is required."]}
                )
            org = OrganizationSettings(**changes, created_by=actor_id, updated_by=actor_id)
            db.add(org)
            await db.flush()
            await db.refresh(org)
            await create_audit_entry(
                db,
                action="create",
                table_name="organization_settings",
                record_id=org.id,
                actor_id=actor_id,
                new_values=changes,
            )
            return org

        if changes.get("name", "") is None:
            raise ValidationException({"name": ["Organization name cannot be cleared."]})

        old_values = {k: getattr(org, k) for k in changes}
        for field, value in changes.items():
            setattr(org, field, value)
        org.updated_by = actor_id
        org.updated_at = datetime.now(timezone.utc)
        await db.flush()

        if changes:
            await create_audit_entry(
                db,
                action="update",
                table_name="organization_settings",
                record_id=org.id,
                actor_id=actor_id,
                old_values=old_values,
                new_values=changes,
            )
        return org

    # ── Policy documents ────────────────────────────────────────────

    @staticmethod
    async def list_policy_documents(db: AsyncSession) -> list[PolicyDocumentOut]:
        org = await OrganizationService.get_settings(db)
        return [
            PolicyDocumentOut(
                key=key,
                label=label,
                url=getattr(org, _url_column(key)) if org else None,
            )
            for key, label in POLICY_DOCUMENT_LABELS.items()
        ]

    @staticmethod
    async def set_policy_document(
        db: AsyncSession,
        key: PolicyDocumentKey,
        url: Optional[str],
        *,
        actor_id: uuid.UUID,
    ) -> PolicyDocumentOut:
        """Set or clear one policy link on the existing settings row."""
        org = await OrganizationService.get_settings(db)
        if org is None:
            raise ValidationException(
                {"organization": ["Save the organization settings before adding documents."]}
            )

        column = _url_column(key)
        old_url = getattr(org, column)
        setattr(org, column, url)
        org.updated_by = actor_id
        org.updated_at = datetime.now(timezone.utc)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            table_name="organization_settings",
            record_id=org.id,
            actor_id=actor_id,
            old_values={column: old_url},
            new_values={column: url},
        )
        return PolicyDocumentOut(key=key, label=POLICY_DOCUMENT_LABELS[key], url=url)

    # ── Announcement banners ────────────────────────────────────────

    @staticmethod
    async def list_banners(
        db: AsyncSession,
        *,
        active_only: bool = False,
    ) -> list[AnnouncementBanner]:
        query = select(AnnouncementBanner).order_by(AnnouncementBanner.position)
        if active_only:
            query = query.where(AnnouncementBanner.is_active.is_(True))
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def upsert_banner(
        db: AsyncSession,
        position: int,
        data: BannerUpsert,
        *,
        actor_id: uuid.UUID,
    ) -> AnnouncementBanner:
        """Update the banner at *position*, or create it."""
        result = await db.execute(
            select(AnnouncementBanner).where(AnnouncementBanner.position == position)
        )
        banner = result.scalars().first()
        values = data.model_dump(mode="json")

        if banner is None:
            banner = AnnouncementBanner(position=position, **data.model_dump())
            db.add(banner)
            action, old_values = "create", None
        else:
            old_values = {
                "message": banner.message,
                "color": banner.color.value,
                "is_active": banner.is_active,
            }
            banner.message = data.message
            banner.color = data.color
            banner.is_active = data.is_active
            banner.updated_at = datetime.now(timezone.utc)
            action = "update"
        await db.flush()
        await db.refresh(banner)

        await create_audit_entry(
            db,
            action=action,
            table_name="announcement_banners",
            record_id=banner.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values={"position": position, **values},
        )
        return banner

    @staticmethod
    async def delete_banner(
        db: AsyncSession,
        position: int,
        *,
        actor_id: uuid.UUID,
    ) -> None:
        result = await db.execute(
            select(AnnouncementBanner).where(AnnouncementBanner.position == position)
        )
        banner = result.scalars().first()
        if banner is None:
            raise NotFoundException("AnnouncementBanner", position)

        await create_audit_entry(
            db,
            action="delete",
            table_name="announcement_banners",
            record_id=banner.id,
            actor_id=actor_id,
            old_values={"position": position, "message": banner.message},
        )
        await db.delete(banner)
        await db.flush()

    # ── Audit log ───────────────────────────────────────────────────

    @staticmethod
    async def list_audit_logs(
        db: AsyncSession,
        *,
        limit: int = 50,
        table_name: Optional[str] = None,
    ) -> list[AuditLogOut]:
        """Newest entries first, each with the acting employee's email."""
        query = (
            select(AuditLog, Employee.email)
            .outerjoin(Employee, AuditLog.actor_id == Employee.id)
            .order_by(AuditLog.created_at.desc(), AuditLog.id)
            .limit(min(limit, MAX_AUDIT_LOG_LIMIT))
        )
        if table_name:
            query = query.where(AuditLog.table_name == table_name)

        result = await db.execute(query)
        entries = []
        for log, email in result.all():
            entry = AuditLogOut.model_validate(log)
            entry.actor_email = email
            entries.append(entry)
        return entries
