"""Organization router: settings, policy documents, banners, audit log.

Reads of settings, documents and banners are open to any signed-in
employee; writes need ``organization:configure`` and the audit log needs
``audit:read``.
"""


from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_current_user, require_permission
from leavedesk.core_hr.models import Employee
from leavedesk.database import get_db
from leavedesk.organization.schemas import (
    BannerOut,
    BannerUpsert,
    OrganizationSettingsOut,
    OrganizationSettingsUpdate,
    PolicyDocumentKey,
    PolicyDocumentUpdate,
)
from leavedesk.organization.service import MAX_AUDIT_LOG_LIMIT, OrganizationService

router = APIRouter(prefix="", tags=["organization"])


# ── Settings ────────────────────────────────────────────────────────

@router.get("/settings")
async def get_settings(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    org = await OrganizationService.get_settings(db)
    return {"data": OrganizationSettingsOut.model_validate(org) if org else None}


@router.patch("/settings")
async def update_settings(
    body: OrganizationSettingsUpdate,
    employee: Employee = Depends(require_permission("organization:configure")),
    db: AsyncSession = Depends(get_db),
):
    org = await OrganizationService.update_settings(db, body, actor_id=employee.id)
    return {
        "data": OrganizationSettingsOut.model_validate(org),
        "message": "Organization settings saved",
    }


# ── Policy documents ────────────────────────────────────────────────

@router.get("/policy-documents")
async def list_policy_documents(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"data": await OrganizationService.list_policy_documents(db)}


@router.put("/policy-documents/{key}")
async def set_policy_document(
    key: PolicyDocumentKey,
    body: PolicyDocumentUpdate,
    employee: Employee = Depends(require_permission("organization:configure")),
    db: AsyncSession = Depends(get_db),
):
    doc = await OrganizationService.set_policy_document(
        db, key, body.url, actor_id=employee.id,
    )
    return {"data": doc, "message": "Policy document updated"}


# ── Announcement banners ────────────────────────────────────────────

@router.get("/banners")
async def list_banners(
    active_only: bool = Query(False),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    banners = await OrganizationService.list_banners(db, active_only=active_only)
    return {"data": [BannerOut.model_validate(b) for b in banners]}


@router.put("/banners/{position}")
async def upsert_banner(
    body: BannerUpsert,
    position: int = Path(..., ge=1, le=10),
    employee: Employee = Depends(require_permission("organization:configure")),
    db: AsyncSession = Depends(get_db),
):
    banner = await OrganizationService.upsert_banner(
        db, position, body, actor_id=employee.id,
    )
    return {"data": BannerOut.model_validate(banner), "message": "Banner saved"}


@router.delete("/banners/{position}")
async def delete_banner(
    position: int = Path(..., ge=1, le=10),
    employee: Employee = Depends(require_permission("organization:configure")),
    db: AsyncSession = Depends(get_db),
):
    await OrganizationService.delete_banner(db, position, actor_id=employee.id)
    return {"message": "Banner deleted"}


# ── Audit log ───────────────────────────────────────────────────────

@router.get("/audit-logs")
async def list_audit_logs(
    limit: int = Query(50, ge=1, le=MAX_AUDIT_LOG_LIMIT),
    table_name: Optional[str] = Query(None, max_length=50),
    employee: Employee = Depends(require_permission("audit:read")),
    db: AsyncSession = Depends(get_db),
):
    logs = await OrganizationService.list_audit_logs(db, limit=limit, table_name=table_name)
    return {"data": logs, "meta": {"total": len(logs)}}
