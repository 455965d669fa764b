"""Organization settings, policy links, banners and the audit-log view."""

from __future__ import annotations

import pytest

from leavedesk.common.constants import BannerColor, UserRole
from leavedesk.common.exceptions import NotFoundException, ValidationException
from leavedesk.organization.schemas import (
    BannerUpsert,
    OrganizationSettingsUpdate,
    PolicyDocumentKey,
    PolicyDocumentUpdate,
)
from leavedesk.organization.service import OrganizationService
from tests.conftest import auth_headers, make_employee


class TestSettings:
    async def test_first_save_needs_name(self, db):
        admin = await make_employee(db, role=UserRole.admin)
        with pytest.raises(ValidationException):
            await OrganizationService.update_settings(
                db, OrganizationSettingsUpdate(address="Pune"), actor_id=admin.id,
            )

    async def test_create_then_update(self, db):
        admin = await make_employee(db, role=UserRole.admin)
        org = await OrganizationService.update_settings(
            db, OrganizationSettingsUpdate(name="Acme"), actor_id=admin.id,
        )
        assert org.name == "Acme"

        org = await OrganizationService.update_settings(
            db, OrganizationSettingsUpdate(address="Pune"), actor_id=admin.id,
        )
        assert (org.name, org.address) == ("Acme", "Pune")


class TestPolicyDocuments:
    async def test_all_keys_listed_without_settings(self, db):
        docs = await OrganizationService.list_policy_documents(db)
        assert [d.key for d in docs] == list(PolicyDocumentKey)
        assert all(d.url is None for d in docs)

    async def test_set_requires_settings_row(self, db):
        admin = await make_employee(db, role=UserRole.admin)
        with pytest.raises(ValidationException):
            await OrganizationService.set_policy_document(
                db, PolicyDocumentKey.leave_policy, "https://example.com/leave.pdf",
                actor_id=admin.id,
            )

    async def test_set_and_clear(self, db):
        admin = await make_employee(db, role=UserRole.admin)
        await OrganizationService.update_settings(
            db, OrganizationSettingsUpdate(name="Acme"), actor_id=admin.id,
        )
        await OrganizationService.set_policy_document(
            db, PolicyDocumentKey.posh_policy, "https://example.com/posh.pdf",
            actor_id=admin.id,
        )
        docs = {d.key: d.url for d in await OrganizationService.list_policy_documents(db)}
        assert docs[PolicyDocumentKey.posh_policy] == "https://example.com/posh.pdf"

        await OrganizationService.set_policy_document(
            db, PolicyDocumentKey.posh_policy, None, actor_id=admin.id,
        )
        docs = {d.key: d.url for d in await OrganizationService.list_policy_documents(db)}
        assert docs[PolicyDocumentKey.posh_policy] is None

    def test_url_validation(self):
        assert PolicyDocumentUpdate(url="  ").url is None
        with pytest.raises(ValueError):
            PolicyDocumentUpdate(url="ftp://example.com/file")


class TestBanners:
    async def test_upsert_by_position(self, db):
        admin = await make_employee(db, role=UserRole.admin)
        await OrganizationService.upsert_banner(
            db, 1, BannerUpsert(message="Office closed Friday"), actor_id=admin.id,
        )
        banner = await OrganizationService.upsert_banner(
            db, 1, BannerUpsert(message="Office open Friday", color=BannerColor.red),
            actor_id=admin.id,
        )
        banners = await OrganizationService.list_banners(db)
        assert len(banners) == 1
        assert banner.message == "Office open Friday"
        assert banner.color == BannerColor.red

    async def test_active_only(self, db):
        admin = await make_employee(db, role=UserRole.admin)
        await OrganizationService.upsert_banner(
            db, 1, BannerUpsert(message="Live"), actor_id=admin.id,
        )
        await OrganizationService.upsert_banner(
            db, 2, BannerUpsert(message="Hidden", is_active=False), actor_id=admin.id,
        )
        active = await OrganizationService.list_banners(db, active_only=True)
        assert [b.position for b in active] == [1]

    async def test_delete_missing(self, db):
        admin = await make_employee(db, role=UserRole.admin)
        with pytest.raises(NotFoundException):
            await OrganizationService.delete_banner(db, 3, actor_id=admin.id)


class TestOrganizationAPI:
    async def test_settings_flow(self, client, db):
        admin = await make_employee(db, role=UserRole.admin)
        emp = await make_employee(db)

        resp = await client.get("/api/v1/organization/settings", headers=auth_headers(emp))
        assert resp.json() == {"data": None}

        resp = await client.patch(
            "/api/v1/organization/settings",
            json={"name": "Acme"},
            headers=auth_headers(emp),
        )
        assert resp.status_code == 403

        resp = await client.patch(
            "/api/v1/organization/settings",
            json={"name": "Acme", "email": "hr@acme.example.com"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["name"] == "Acme"

    async def test_banner_position_bounds(self, client, db):
        admin = await make_employee(db, role=UserRole.admin)
        resp = await client.put(
            "/api/v1/organization/banners/11",
            json={"message": "Too far"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 422

    async def test_audit_log_lists_actor(self, client, db):
        admin = await make_employee(db, role=UserRole.admin, email="admin@acme.example.com")
        await client.put(
            "/api/v1/organization/banners/1",
            json={"message": "Hello"},
            headers=auth_headers(admin),
        )
        resp = await client.get(
            "/api/v1/organization/audit-logs?table_name=announcement_banners",
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        [entry] = resp.json()["data"]
        assert entry["action"] == "create"
        assert entry["actor_email"] == "admin@acme.example.com"

    async def test_audit_log_requires_permission(self, client, db):
        manager = await make_employee(db, role=UserRole.manager)
        resp = await client.get(
            "/api/v1/organization/audit-logs", headers=auth_headers(manager),
        )
        assert resp.status_code == 403
