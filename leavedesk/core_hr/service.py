"""Core HR service layer: async CRUD + business logic.

Uses:
  - ``paginate()`` from leavedesk.common.pagination
  - ``apply_filters / apply_search`` from leavedesk.common.filters
  - ``create_audit_entry`` from leavedesk.common.audit
  - ``NotFoundException / ConflictError / ValidationException`` from
    leavedesk.common.exceptions
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavedesk.auth.models import RoleAssignment, UserCredential
from leavedesk.auth.security import generate_temp_password, hash_password
from leavedesk.common.audit import create_audit_entry
from leavedesk.common.constants import UserRole
from leavedesk.common.exceptions import (
    ConflictError,
    ForbiddenException,
    NotFoundException,
    UpstreamServiceError,
    ValidationException,
)
from leavedesk.common.filters import apply_filters, apply_search
from leavedesk.common.pagination import PaginatedResponse, PaginationParams, paginate
from leavedesk.core_hr import mailer
from leavedesk.core_hr.models import Department, Employee
from leavedesk.core_hr.schemas import (
    CreateEmployeeRequest,
    CreateEmployeeResponse,
    DepartmentBrief,
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
    EmployeeDetail,
    EmployeeSummary,
    EmployeeUpdate,
)
from leavedesk.leave.models import LeaveBalance, LeaveType

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


def _audit_value(value: Any) -> Any:
    """JSON-safe form of a column value for the audit trail."""
    if hasattr(value, "value"):
        return value.value
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


async def _ensure_department(db: AsyncSession, department_id: uuid.UUID, field: str) -> Department:
    department = await db.get(Department, department_id)
    if department is None:
        raise ValidationException({field: ["Department does not exist."]})
    return department


# ═════════════════════════════════════════════════════════════════════
# EmployeeService
# ═════════════════════════════════════════════════════════════════════


class EmployeeService:
    """Async CRUD operations for employees."""

    # ── List (paginated, searchable, filterable) ────────────────────

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        pagination: PaginationParams,
        *,
        search: Optional[str] = None,
        department_id: Optional[uuid.UUID] = None,
        is_active: Optional[bool] = None,
        reporting_manager_id: Optional[uuid.UUID] = None,
    ) -> PaginatedResponse:
        """Return a paginated, filtered, searchable employee list."""

        query = select(Employee).order_by(Employee.first_name, Employee.last_name)

        filters: dict[str, Any] = {
            "department_id": department_id,
            "is_active": is_active,
            "reporting_manager_id": reporting_manager_id,
        }
        query = apply_filters(query, Employee, filters)

        if search:
            query = apply_search(
                query,
                Employee,
                search,
                ["first_name", "last_name", "email", "employee_code"],
            )

        return await paginate(db, query, pagination, model=Employee)

    # ── Get single ──────────────────────────────────────────────────

    @staticmethod
    async def get_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
    ) -> EmployeeDetail:
        """Load full employee detail including relationships."""

        result = await db.execute(
            select(Employee)
            .where(Employee.id == employee_id)
            .options(
                selectinload(Employee.department),
                selectinload(Employee.reporting_manager),
                selectinload(Employee.role_assignment),
            )
            .execution_options(populate_existing=True)
        )
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))

        count_result = await db.execute(
            select(func.count())
            .select_from(Employee)
            .where(
                Employee.reporting_manager_id == employee.id,
                Employee.is_active.is_(True),
            )
        )

        detail = EmployeeDetail.model_validate(employee)
        detail.direct_reports_count = count_result.scalar() or 0
        if employee.department:
            detail.department_info = DepartmentBrief.model_validate(employee.department)
        if employee.reporting_manager:
            detail.manager = EmployeeSummary.model_validate(employee.reporting_manager)
        if employee.role_assignment:
            detail.role = employee.role_assignment.role
        return detail

    # ── Update ──────────────────────────────────────────────────────

    @staticmethod
    async def update_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        data: EmployeeUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> EmployeeDetail:
        """Partial-update an existing employee."""

        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))

        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return await EmployeeService.get_employee(db, employee_id)

        if changes.get("department_id") is not None:
            await _ensure_department(db, changes["department_id"], "department_id")

        old_values: dict[str, Any] = {}
        for field, value in changes.items():
            old_values[field] = _audit_value(getattr(employee, field, None))
            setattr(employee, field, value)
        employee.updated_at = datetime.now(timezone.utc)

        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("email", changes.get("email", ""))

        await create_audit_entry(
            db,
            action="update",
            table_name="employees",
            record_id=employee.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values={k: _audit_value(v) for k, v in changes.items()},
        )

        return await EmployeeService.get_employee(db, employee_id)

    # ── Reporting manager ───────────────────────────────────────────

    @staticmethod
    async def assign_manager(
        db: AsyncSession,
        employee_id: uuid.UUID,
        manager_id: Optional[uuid.UUID],
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> EmployeeDetail:
        """Set or clear ``reporting_manager_id``.

        Rejects self-assignment and any assignment that would make the
        employee an indirect manager of their own manager.
        """
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))

        if manager_id is not None:
            if manager_id == employee_id:
                raise ValidationException(
                    {"reporting_manager_id": ["An employee cannot report to themselves."]}
                )
            manager = await db.get(Employee, manager_id)
            if manager is None or not manager.is_active:
                raise ValidationException(
                    {"reporting_manager_id": ["Manager does not exist or is inactive."]}
                )

            # Walk up the chain from the proposed manager.
            seen: set[uuid.UUID] = set()
            cursor: Optional[uuid.UUID] = manager.reporting_manager_id
            while cursor is not None and cursor not in seen:
                if cursor == employee_id:
                    raise ValidationException(
                        {"reporting_manager_id": [
                            "This assignment would create a reporting cycle."
                        ]}
                    )
                seen.add(cursor)
                cursor = (
                    await db.execute(
                        select(Employee.reporting_manager_id).where(Employee.id == cursor)
                    )
                ).scalar_one_or_none()

        old_manager = employee.reporting_manager_id
        employee.reporting_manager_id = manager_id
        employee.updated_at = datetime.now(timezone.utc)
        await db.flush()

        await create_audit_entry(
            db,
            action="assign_manager",
            table_name="employees",
            record_id=employee.id,
            actor_id=actor_id,
            old_values={"reporting_manager_id": _audit_value(old_manager)},
            new_values={"reporting_manager_id": _audit_value(manager_id)},
        )
        return await EmployeeService.get_employee(db, employee_id)

    # ── Role ────────────────────────────────────────────────────────

    @staticmethod
    async def set_role(
        db: AsyncSession,
        employee_id: uuid.UUID,
        role: UserRole,
        *,
        actor_id: uuid.UUID,
        actor_role: UserRole,
    ) -> EmployeeDetail:
        """Replace the employee's single role. Only admins touch the admin role."""
        result = await db.execute(
            select(Employee)
            .where(Employee.id == employee_id)
            .options(selectinload(Employee.role_assignment))
        )
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))

        assignment = employee.role_assignment
        current = assignment.role if assignment else UserRole.employee
        if actor_role != UserRole.admin and UserRole.admin in (role, current):
            raise ForbiddenException("Only an admin can grant or revoke the admin role.")

        if assignment is None:
            db.add(RoleAssignment(employee_id=employee.id, role=role, assigned_by=actor_id))
        else:
            assignment.role = role
            assignment.assigned_by = actor_id
            assignment.assigned_at = datetime.now(timezone.utc)
        await db.flush()

        await create_audit_entry(
            db,
            action="role_change",
            table_name="user_roles",
            record_id=employee.id,
            actor_id=actor_id,
            old_values={"role": current.value},
            new_values={"role": role.value},
        )
        db.expire(employee, ["role_assignment"])
        return await EmployeeService.get_employee(db, employee_id)

    # ── Onboarding (create-employee function) ───────────────────────

    @staticmethod
    async def create_employee(
        db: AsyncSession,
        data: CreateEmployeeRequest,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> CreateEmployeeResponse:
        """Create the employee, its credential, role and opening balances.

        The records are committed before the welcome mail goes out, so a
        mailed password always belongs to a stored account. A mail failure
        is logged and reported as ``email_sent=False``.
        """
        await _ensure_department(db, data.department_id, "department_id")

        existing = await db.execute(
            select(Employee.employee_code, Employee.email).where(
                or_(
                    Employee.employee_code == data.employee_id,
                    func.lower(Employee.email) == data.email,
                )
            )
        )
        for code, email in existing.all():
            if code == data.employee_id:
                raise ConflictError("employee_id", data.employee_id)
            raise ConflictError("email", email)

        employee = Employee(
            employee_code=data.employee_id,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            department_id=data.department_id,
            employment_type=data.employment_type,
            date_of_joining=data.date_of_joining,
            gender=data.gender,
            work_location=data.work_location,
            state=data.state,
            is_active=True,
        )
        db.add(employee)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("employee_id", data.employee_id)

        temp_password = generate_temp_password()
        db.add(
            UserCredential(
                employee_id=employee.id,
                password_hash=hash_password(temp_password),
                must_change_password=True,
            )
        )
        db.add(
            RoleAssignment(
                employee_id=employee.id,
                role=UserRole.employee,
                assigned_by=actor_id,
            )
        )

        year = data.date_of_joining.year
        leave_types = (
            await db.execute(select(LeaveType).where(LeaveType.is_active.is_(True)))
        ).scalars().all()
        for lt in leave_types:
            db.add(
                LeaveBalance(
                    employee_id=employee.id,
                    leave_type_id=lt.id,
                    year=year,
                    entitled_days=lt.default_days or _ZERO,
                    used_days=_ZERO,
                    carried_forward_days=_ZERO,
                    adjusted_days=_ZERO,
                )
            )
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            table_name="employees",
            record_id=employee.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        logger.info(
            "Created employee %s with %d opening balances for %d",
            employee.employee_code,
            len(leave_types),
            year,
        )

        # Credentials go out only once the account exists
        await db.commit()

        try:
            email_sent = await mailer.send_welcome_email(
                to=employee.email,
                full_name=employee.full_name,
                employee_code=employee.employee_code,
                temp_password=temp_password,
            )
        except UpstreamServiceError as exc:
            logger.warning(
                "Welcome mail for %s failed: %s", employee.employee_code, exc.detail,
            )
            email_sent = False

        return CreateEmployeeResponse(temp_password=temp_password, email_sent=email_sent)


# ═════════════════════════════════════════════════════════════════════
# DepartmentService
# ═════════════════════════════════════════════════════════════════════


class DepartmentService:
    """Async CRUD for departments. ``employee_count`` counts every employee row."""

    @staticmethod
    async def _employee_count(db: AsyncSession, department_id: uuid.UUID) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(Employee)
            .where(Employee.department_id == department_id)
        )
        return result.scalar() or 0

    @staticmethod
    async def list_departments(db: AsyncSession) -> list[DepartmentResponse]:
        """Return all departments with employee counts, by name."""

        result = await db.execute(select(Department).order_by(Department.name))
        departments = result.scalars().all()

        count_result = await db.execute(
            select(Employee.department_id, func.count(Employee.id))
            .where(Employee.department_id.is_not(None))
            .group_by(Employee.department_id)
        )
        counts = {row[0]: row[1] for row in count_result.all()}

        responses: list[DepartmentResponse] = []
        for dept in departments:
            resp = DepartmentResponse.model_validate(dept)
            resp.employee_count = counts.get(dept.id, 0)
            responses.append(resp)
        return responses

    @staticmethod
    async def get_department(
        db: AsyncSession,
        department_id: uuid.UUID,
    ) -> DepartmentResponse:
        dept = await db.get(Department, department_id)
        if dept is None:
            raise NotFoundException("Department", str(department_id))

        resp = DepartmentResponse.model_validate(dept)
        resp.employee_count = await DepartmentService._employee_count(db, department_id)
        return resp

    @staticmethod
    async def create_department(
        db: AsyncSession,
        data: DepartmentCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> DepartmentResponse:
        dept = Department(name=data.name, description=data.description)
        db.add(dept)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("name", data.name)
        await db.refresh(dept)

        await create_audit_entry(
            db,
            action="create",
            table_name="departments",
            record_id=dept.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        return DepartmentResponse.model_validate(dept)

    @staticmethod
    async def update_department(
        db: AsyncSession,
        department_id: uuid.UUID,
        data: DepartmentUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> DepartmentResponse:
        dept = await db.get(Department, department_id)
        if dept is None:
            raise NotFoundException("Department", str(department_id))

        changes = data.model_dump(exclude_unset=True)
        old_values = {field: getattr(dept, field) for field in changes}
        for field, value in changes.items():
            setattr(dept, field, value)
        dept.updated_at = datetime.now(timezone.utc)

        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("name", changes.get("name", ""))

        if changes:
            await create_audit_entry(
                db,
                action="update",
                table_name="departments",
                record_id=dept.id,
                actor_id=actor_id,
                old_values=old_values,
                new_values=changes,
            )
        return await DepartmentService.get_department(db, department_id)

    @staticmethod
    async def delete_department(
        db: AsyncSession,
        department_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> None:
        """Delete an empty department; one with employees is a 422."""
        dept = await db.get(Department, department_id)
        if dept is None:
            raise NotFoundException("Department", str(department_id))

        assigned = await DepartmentService._employee_count(db, department_id)
        if assigned:
            raise ValidationException(
                {"department": [
                    f"Cannot delete department with assigned employees ({assigned})."
                ]}
            )

        await create_audit_entry(
            db,
            action="delete",
            table_name="departments",
            record_id=dept.id,
            actor_id=actor_id,
            old_values={"name": dept.name, "description": dept.description},
        )
        await db.delete(dept)
        await db.flush()
