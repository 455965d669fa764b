"""Common module: shared utilities for leavedesk."""

from leavedesk.common.audit import (
    AuditLog,
    AuditMixin,
    create_audit_entry,
    record_audit_best_effort,
)
from leavedesk.common.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MAX_REGIONAL_HOLIDAYS_PER_YEAR,
    PERMISSIONS,
    PRIVILEGED_ROLES,
    ApprovalAction,
    BannerColor,
    EmploymentType,
    GenderType,
    HolidayType,
    LeaveStatus,
    NotificationType,
    UserRole,
)
from leavedesk.common.exceptions import (
    AppException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    UpstreamServiceError,
    ValidationException,
    register_exception_handlers,
)
from leavedesk.common.filters import apply_filters, apply_search
from leavedesk.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Audit
    "AuditLog",
    "AuditMixin",
    "create_audit_entry",
    "record_audit_best_effort",
    # Constants / Enums
    "ApprovalAction",
    "BannerColor",
    "EmploymentType",
    "GenderType",
    "HolidayType",
    "LeaveStatus",
    "NotificationType",
    "UserRole",
    "PERMISSIONS",
    "PRIVILEGED_ROLES",
    "MAX_REGIONAL_HOLIDAYS_PER_YEAR",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Exceptions
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "NotFoundException",
    "UnauthorizedException",
    "UpstreamServiceError",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_search",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
