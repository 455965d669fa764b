"""leavedesk: FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from leavedesk.analytics.router import router as analytics_router
from leavedesk.common.exceptions import register_exception_handlers
from leavedesk.common.rate_limit import limiter
from leavedesk.config import settings
from leavedesk.core_hr.router import (
    departments_router,
    employees_router,
    functions_router,
)
from leavedesk.database import engine
from leavedesk.holidays.router import router as holidays_router
from leavedesk.leave.router import router as leave_router
from leavedesk.notifications.router import router as notifications_router
from leavedesk.organization.router import router as organization_router
from leavedesk.team.router import router as team_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("leavedesk starting (%s)", settings.ENVIRONMENT)
    yield
    await engine.dispose()
    logger.info("leavedesk stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="leavedesk",
        description="Leave management: balances, approvals, teams, holidays and reports",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(employees_router, prefix="/api/v1/employees", tags=["employees"])
    app.include_router(departments_router, prefix="/api/v1/departments", tags=["departments"])
    app.include_router(functions_router, prefix="/api/v1/functions", tags=["functions"])
    app.include_router(leave_router, prefix="/api/v1/leave", tags=["leave"])
    app.include_router(team_router, prefix="/api/v1/team", tags=["team"])
    app.include_router(holidays_router, prefix="/api/v1/holidays", tags=["holidays"])
    app.include_router(notifications_router, prefix="/api/v1/notifications", tags=["notifications"])
    app.include_router(analytics_router, prefix="/api/v1/analytics", tags=["analytics"])
    app.include_router(organization_router, prefix="/api/v1/organization", tags=["organization"])

    return app


app = create_app()
