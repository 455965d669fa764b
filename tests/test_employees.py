"""Employee tests: listing, detail access, updates, reporting lines, roles
and the camelCase create-employee function.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from leavedesk.auth.models import RoleAssignment, UserCredential
from leavedesk.auth.security import verify_password
from leavedesk.common.audit import AuditLog
from leavedesk.common.constants import UserRole
from leavedesk.common.exceptions import (
    ConflictError,
    ForbiddenException,
    UpstreamServiceError,
    ValidationException,
)
from leavedesk.core_hr.mailer import _welcome_html
from leavedesk.core_hr.models import Employee
from leavedesk.core_hr.schemas import CreateEmployeeRequest, EmployeeUpdate
from leavedesk.core_hr.service import EmployeeService
from leavedesk.leave.models import LeaveBalance
from tests.conftest import (
    auth_headers,
    make_department,
    make_employee,
    make_leave_type,
)

CREATE_URL = "/api/v1/functions/create-employee"


def _payload(department_id, **overrides) -> dict:
    body = {
        "employeeId": "EMP-1001",
        "firstName": "Asha",
        "lastName": "Verma",
        "email": "Asha.Verma@Example.com",
        "departmentId": str(department_id),
        "employmentType": "full_time",
        "dateOfJoining": "2025-04-01",
        "state": "Maharashtra",
    }
    body.update(overrides)
    return body


# ═════════════════════════════════════════════════════════════════════
# Service
# ═════════════════════════════════════════════════════════════════════


class TestAssignManager:
    async def test_assign_and_clear(self, db):
        boss = await make_employee(db, first_name="Boss")
        emp = await make_employee(db)

        detail = await EmployeeService.assign_manager(db, emp.id, boss.id, actor_id=boss.id)
        assert detail.reporting_manager_id == boss.id
        assert detail.manager.first_name == "Boss"

        detail = await EmployeeService.assign_manager(db, emp.id, None, actor_id=boss.id)
        assert detail.reporting_manager_id is None
        assert detail.manager is None

    async def test_self_assignment_rejected(self, db):
        emp = await make_employee(db)
        with pytest.raises(ValidationException) as exc:
            await EmployeeService.assign_manager(db, emp.id, emp.id)
        assert "reporting_manager_id" in exc.value.errors

    async def test_cycle_rejected(self, db):
        top = await make_employee(db, first_name="Top")
        middle = await make_employee(db, manager_id=top.id)
        bottom = await make_employee(db, manager_id=middle.id)

        with pytest.raises(ValidationException) as exc:
            await EmployeeService.assign_manager(db, top.id, bottom.id)
        assert "cycle" in exc.value.errors["reporting_manager_id"][0]

    async def test_inactive_manager_rejected(self, db):
        gone = await make_employee(db, is_active=False)
        emp = await make_employee(db)
        with pytest.raises(ValidationException):
            await EmployeeService.assign_manager(db, emp.id, gone.id)


class TestSetRole:
    async def test_hr_promotes_to_manager(self, db):
        hr = await make_employee(db, role=UserRole.hr)
        emp = await make_employee(db)

        detail = await EmployeeService.set_role(
            db, emp.id, UserRole.manager, actor_id=hr.id, actor_role=UserRole.hr,
        )
        assert detail.role == UserRole.manager

        detail = await EmployeeService.set_role(
            db, emp.id, UserRole.employee, actor_id=hr.id, actor_role=UserRole.hr,
        )
        assert detail.role == UserRole.employee
        rows = await db.execute(
            select(RoleAssignment).where(RoleAssignment.employee_id == emp.id)
        )
        assert len(rows.scalars().all()) == 1

    async def test_only_admin_grants_admin(self, db):
        hr = await make_employee(db, role=UserRole.hr)
        emp = await make_employee(db)
        with pytest.raises(ForbiddenException):
            await EmployeeService.set_role(
                db, emp.id, UserRole.admin, actor_id=hr.id, actor_role=UserRole.hr,
            )

    async def test_only_admin_revokes_admin(self, db):
        hr = await make_employee(db, role=UserRole.hr)
        admin = await make_employee(db, role=UserRole.admin)
        with pytest.raises(ForbiddenException):
            await EmployeeService.set_role(
                db, admin.id, UserRole.employee, actor_id=hr.id, actor_role=UserRole.hr,
            )

    async def test_role_change_audited(self, db):
        admin = await make_employee(db, role=UserRole.admin)
        emp = await make_employee(db)
        await EmployeeService.set_role(
            db, emp.id, UserRole.hr, actor_id=admin.id, actor_role=UserRole.admin,
        )
        entry = (
            await db.execute(select(AuditLog).where(AuditLog.action == "role_change"))
        ).scalars().one()
        assert entry.old_values == {"role": "employee"}
        assert entry.new_values == {"role": "hr"}


class TestUpdateEmployee:
    async def test_partial_update(self, db):
        emp = await make_employee(db, first_name="Old")
        detail = await EmployeeService.update_employee(
            db, emp.id, EmployeeUpdate(first_name="New", designation="Engineer"),
        )
        assert detail.first_name == "New"
        assert detail.designation == "Engineer"
        assert detail.last_name == "User"

    async def test_unknown_department(self, db):
        emp = await make_employee(db)
        with pytest.raises(ValidationException):
            await EmployeeService.update_employee(
                db, emp.id, EmployeeUpdate(department_id=uuid.uuid4()),
            )


class TestCreateEmployeeService:
    async def test_creates_records_and_balances(self, db):
        dept = await make_department(db)
        await make_leave_type(db, code="CL", name="Casual Leave", default_days=Decimal("12"))
        await make_leave_type(db, code="EL", name="Earned Leave", default_days=Decimal("15"))
        await make_leave_type(db, code="XX", name="Retired", is_active=False)
        data = CreateEmployeeRequest.model_validate(_payload(dept.id))

        with patch(
            "leavedesk.core_hr.mailer.send_welcome_email",
            new_callable=AsyncMock,
            return_value=True,
        ) as send:
            result = await EmployeeService.create_employee(db, data)

        assert result.email_sent is True
        send.assert_awaited_once()
        assert send.await_args.kwargs["to"] == "asha.verma@example.com"

        emp = (
            await db.execute(select(Employee).where(Employee.employee_code == "EMP-1001"))
        ).scalars().one()
        assert emp.email == "asha.verma@example.com"

        credential = await db.get(UserCredential, emp.id)
        assert verify_password(result.temp_password, credential.password_hash)
        assert credential.must_change_password is True

        balances = (
            await db.execute(select(LeaveBalance).where(LeaveBalance.employee_id == emp.id))
        ).scalars().all()
        assert sorted(b.entitled_days for b in balances) == [Decimal("12"), Decimal("15")]
        assert {b.year for b in balances} == {2025}

    async def test_mail_failure_is_not_fatal(self, db):
        dept = await make_department(db)
        data = CreateEmployeeRequest.model_validate(_payload(dept.id))
        with patch(
            "leavedesk.core_hr.mailer.send_welcome_email",
            new_callable=AsyncMock,
            side_effect=UpstreamServiceError("Mail API", "timed out"),
        ):
            result = await EmployeeService.create_employee(db, data)
        assert result.email_sent is False
        assert len(result.temp_password) >= 8

    async def test_mail_sent_after_commit(self, db):
        dept = await make_department(db)
        data = CreateEmployeeRequest.model_validate(_payload(dept.id))
        open_transaction = []

        async def _send(**kwargs):
            open_transaction.append(db.in_transaction())
            return True

        with patch("leavedesk.core_hr.mailer.send_welcome_email", side_effect=_send):
            await EmployeeService.create_employee(db, data)

        assert open_transaction == [False]

    async def test_failed_commit_sends_no_mail(self, db):
        dept = await make_department(db)
        data = CreateEmployeeRequest.model_validate(_payload(dept.id))

        with patch(
            "leavedesk.core_hr.mailer.send_welcome_email", new_callable=AsyncMock,
        ) as send, patch.object(
            db, "commit", AsyncMock(side_effect=SQLAlchemyError("disk I/O error")),
        ):
            with pytest.raises(SQLAlchemyError):
                await EmployeeService.create_employee(db, data)
        await db.rollback()

        send.assert_not_awaited()
        found = await db.execute(select(Employee).where(Employee.employee_code == "EMP-1001"))
        assert found.scalars().first() is None

    def test_welcome_html_escapes_values(self):
        body = _welcome_html(
            "<script>alert(1)</script>", "EMP-<1>", "a&b@example.com", 'p"w<d>',
        )
        assert "<script>" not in body
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in body
        assert "EMP-&lt;1&gt;" in body
        assert "a&amp;b@example.com" in body
        assert "p&quot;w&lt;d&gt;" in body

    async def test_duplicate_email(self, db):
        dept = await make_department(db)
        await make_employee(db, email="asha.verma@example.com")
        data = CreateEmployeeRequest.model_validate(_payload(dept.id))
        with pytest.raises(ConflictError) as exc:
            await EmployeeService.create_employee(db, data)
        assert "email" in exc.value.errors


# ═════════════════════════════════════════════════════════════════════
# API
# ═════════════════════════════════════════════════════════════════════


class TestEmployeeAPI:
    async def test_list_with_search(self, client, db):
        viewer = await make_employee(db, first_name="Viewer")
        await make_employee(db, first_name="Priya", last_name="Nair")
        resp = await client.get(
            "/api/v1/employees?search=priya", headers=auth_headers(viewer),
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["meta"]["total"] == 1
        assert body["data"][0]["full_name"] == "Priya Nair"

    async def test_detail_access(self, client, db):
        manager = await make_employee(db, role=UserRole.manager)
        report = await make_employee(db, manager_id=manager.id)
        stranger = await make_employee(db)

        resp = await client.get(f"/api/v1/employees/{report.id}", headers=auth_headers(manager))
        assert resp.status_code == 200
        assert resp.json()["data"]["manager"]["id"] == str(manager.id)

        resp = await client.get(f"/api/v1/employees/{report.id}", headers=auth_headers(stranger))
        assert resp.status_code == 403

        resp = await client.get(f"/api/v1/employees/{manager.id}", headers=auth_headers(manager))
        assert resp.json()["data"]["role"] == "manager"
        assert resp.json()["data"]["direct_reports_count"] == 1

    async def test_expired_token(self, client, db):
        from tests.conftest import create_access_token

        emp = await make_employee(db)
        resp = await client.get(
            "/api/v1/employees",
            headers={"Authorization": f"Bearer {create_access_token(emp.id, expired=True)}"},
        )
        assert resp.status_code == 401

    async def test_update_requires_permission(self, client, db):
        emp = await make_employee(db)
        resp = await client.patch(
            f"/api/v1/employees/{emp.id}",
            json={"designation": "Lead"},
            headers=auth_headers(emp),
        )
        assert resp.status_code == 403

    async def test_manager_cycle_via_api(self, client, db):
        hr = await make_employee(db, role=UserRole.hr)
        top = await make_employee(db)
        bottom = await make_employee(db, manager_id=top.id)
        resp = await client.put(
            f"/api/v1/employees/{top.id}/manager",
            json={"reporting_manager_id": str(bottom.id)},
            headers=auth_headers(hr),
        )
        assert resp.status_code == 422
        assert "reporting_manager_id" in resp.json()["errors"]

    async def test_set_role_via_api(self, client, db):
        admin = await make_employee(db, role=UserRole.admin)
        emp = await make_employee(db)
        resp = await client.put(
            f"/api/v1/employees/{emp.id}/role",
            json={"role": "manager"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json()["message"] == "Role set to manager"


class TestCreateEmployeeFunction:
    async def test_success_camel_case(self, client, db):
        hr = await make_employee(db, role=UserRole.hr)
        dept = await make_department(db)
        with patch(
            "leavedesk.core_hr.mailer.send_welcome_email",
            new_callable=AsyncMock,
            return_value=False,
        ):
            resp = await client.post(
                CREATE_URL, json=_payload(dept.id), headers=auth_headers(hr),
            )
        assert resp.status_code == 200
        body = resp.json()
        assert set(body) == {"tempPassword", "emailSent"}
        assert body["emailSent"] is False

    async def test_employee_forbidden(self, client, db):
        emp = await make_employee(db)
        dept = await make_department(db)
        resp = await client.post(CREATE_URL, json=_payload(dept.id), headers=auth_headers(emp))
        assert resp.status_code == 403
        assert "error" in resp.json()

    async def test_missing_field(self, client, db):
        hr = await make_employee(db, role=UserRole.hr)
        dept = await make_department(db)
        body = _payload(dept.id)
        del body["firstName"]
        resp = await client.post(CREATE_URL, json=body, headers=auth_headers(hr))
        assert resp.status_code == 400
        assert resp.json()["error"].startswith("firstName")

    async def test_duplicate_code(self, client, db):
        hr = await make_employee(db, role=UserRole.hr)
        dept = await make_department(db)
        with patch(
            "leavedesk.core_hr.mailer.send_welcome_email",
            new_callable=AsyncMock,
            return_value=True,
        ):
            first = await client.post(CREATE_URL, json=_payload(dept.id), headers=auth_headers(hr))
            second = await client.post(
                CREATE_URL,
                json=_payload(dept.id, email="someone.else@example.com"),
                headers=auth_headers(hr),
            )
        assert first.status_code == 200
        assert second.status_code == 409
        assert "EMP-1001" in second.json()["error"]

    async def test_unknown_department(self, client, db):
        hr = await make_employee(db, role=UserRole.hr)
        resp = await client.post(
            CREATE_URL, json=_payload(uuid.uuid4()), headers=auth_headers(hr),
        )
        assert resp.status_code == 422
        assert resp.json() == {"error": "Department does not exist."}

    async def test_no_token(self, client):
        resp = await client.post(CREATE_URL, json={})
        assert resp.status_code == 401
