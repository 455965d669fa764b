"""Core HR router: Employee, Department and create-employee endpoints.

Routes:
    /employees                 List employees
    /employees/{id}            Get, update employee
    /employees/{id}/manager    Assign or clear the reporting manager
    /employees/{id}/role       Replace the employee's role
    /departments               List, create departments
    /departments/{id}          Get, update, delete a department
    /functions/create-employee Onboard an employee (camelCase contract)
"""


import logging
import uuid
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import (
    current_role,
    get_current_user,
    is_privileged,
    require_permission,
)
from leavedesk.common.constants import PERMISSIONS
from leavedesk.common.exceptions import AppException, ForbiddenException
from leavedesk.common.pagination import PaginationParams
from leavedesk.common.rate_limit import limiter
from leavedesk.config import settings
from leavedesk.core_hr.models import Employee
from leavedesk.core_hr.schemas import (
    AssignManagerRequest,
    CreateEmployeeRequest,
    DepartmentCreate,
    DepartmentUpdate,
    EmployeeSummary,
    EmployeeUpdate,
    RoleUpdateRequest,
)
from leavedesk.core_hr.service import DepartmentService, EmployeeService
from leavedesk.database import get_db
from leavedesk.team.service import TeamService

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# Routers
# ═════════════════════════════════════════════════════════════════════

employees_router = APIRouter(prefix="", tags=["employees"])
departments_router = APIRouter(prefix="", tags=["departments"])
functions_router = APIRouter(prefix="", tags=["functions"])


# ═════════════════════════════════════════════════════════════════════
# Employee Endpoints
# ═════════════════════════════════════════════════════════════════════


# ── GET /employees ──────────────────────────────────────────────────

@employees_router.get("")
async def list_employees(
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
    pagination: PaginationParams = Depends(),
    search: Optional[str] = Query(None, description="Search by name, email, or employee code"),
    department_id: Optional[uuid.UUID] = Query(None, description="Filter by department"),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    reporting_manager_id: Optional[uuid.UUID] = Query(None, description="Filter by reporting manager"),
):
    """List employees with pagination, search, and filtering."""
    result = await EmployeeService.list_employees(
        db,
        pagination,
        search=search,
        department_id=department_id,
        is_active=is_active,
        reporting_manager_id=reporting_manager_id,
    )
    return {
        "data": [EmployeeSummary.model_validate(emp).model_dump(mode="json") for emp in result.data],
        "meta": result.meta.model_dump(),
    }


# ── GET /employees/{id} ─────────────────────────────────────────────

@employees_router.get("/{employee_id}")
async def get_employee(
    employee_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Employee detail: self, HR/admin, or the employee's reporting manager."""
    if employee_id != current_user.id and not is_privileged(current_role(request)):
        reports = await TeamService.get_team_member_ids(db, current_user.id)
        if employee_id not in reports:
            raise ForbiddenException("You can only view your own or your team's profiles.")
    return {"data": await EmployeeService.get_employee(db, employee_id)}


# ── PATCH /employees/{id} ───────────────────────────────────────────

@employees_router.patch("/{employee_id}")
async def update_employee(
    employee_id: uuid.UUID,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(require_permission("employee:update")),
):
    detail = await EmployeeService.update_employee(
        db, employee_id, body, actor_id=current_user.id,
    )
    return {"data": detail, "message": "Employee updated"}


# ── PUT /employees/{id}/manager ─────────────────────────────────────

@employees_router.put("/{employee_id}/manager")
async def assign_manager(
    employee_id: uuid.UUID,
    body: AssignManagerRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(require_permission("employee:update")),
):
    detail = await EmployeeService.assign_manager(
        db, employee_id, body.reporting_manager_id, actor_id=current_user.id,
    )
    return {"data": detail, "message": "Reporting manager updated"}


# ── PUT /employees/{id}/role ────────────────────────────────────────

@employees_router.put("/{employee_id}/role")
async def set_role(
    employee_id: uuid.UUID,
    body: RoleUpdateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(require_permission("employee:manage_roles")),
):
    detail = await EmployeeService.set_role(
        db,
        employee_id,
        body.role,
        actor_id=current_user.id,
        actor_role=current_role(request),
    )
    return {"data": detail, "message": f"Role set to {body.role.value}"}


# ═════════════════════════════════════════════════════════════════════
# Department Endpoints
# ═════════════════════════════════════════════════════════════════════


@departments_router.get("")
async def list_departments(
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    departments = await DepartmentService.list_departments(db)
    return {"data": departments, "meta": {"total": len(departments)}}


@departments_router.get("/{department_id}")
async def get_department(
    department_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    return {"data": await DepartmentService.get_department(db, department_id)}


@departments_router.post("", status_code=201)
async def create_department(
    body: DepartmentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(require_permission("department:manage")),
):
    dept = await DepartmentService.create_department(db, body, actor_id=current_user.id)
    return {"data": dept, "message": "Department created"}


@departments_router.patch("/{department_id}")
async def update_department(
    department_id: uuid.UUID,
    body: DepartmentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(require_permission("department:manage")),
):
    dept = await DepartmentService.update_department(
        db, department_id, body, actor_id=current_user.id,
    )
    return {"data": dept, "message": "Department updated"}


@departments_router.delete("/{department_id}")
async def delete_department(
    department_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(require_permission("department:manage")),
):
    await DepartmentService.delete_department(db, department_id, actor_id=current_user.id)
    return {"message": "Department deleted"}


# ═════════════════════════════════════════════════════════════════════
# create-employee function
# ═════════════════════════════════════════════════════════════════════


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@functions_router.post("/create-employee")
@limiter.limit(settings.CREATE_EMPLOYEE_RATE_LIMIT)
async def create_employee(
    request: Request,
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Onboard an employee.

    Body and response use camelCase. Every failure after authentication
    is answered as ``{"error": "..."}`` with the matching status code.
    """
    if "employee:create" not in PERMISSIONS.get(current_role(request), []):
        return _error(403, "Only HR and admins can create employees.")

    try:
        data = CreateEmployeeRequest.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or "body"
        return _error(400, f"{field}: {first.get('msg', 'Invalid value')}")

    try:
        result = await EmployeeService.create_employee(db, data, actor_id=current_user.id)
    except AppException as exc:
        logger.info("create-employee rejected: %s", exc.detail)
        return _error(exc.status_code, exc.detail)

    return result.model_dump(by_alias=True)
