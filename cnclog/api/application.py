"""FastAPI application factory for the job log runtime.

This module defines API application composition used by the service runtime.
"""

from fastapi import FastAPI

from cnclog.config import AppSettings
from cnclog.dashboard import DashboardReadPort
from cnclog.db import DatabaseHealthPort
from cnclog.jobs import JobLifecycleService

from .routers import api_create_dashboard_router, api_create_health_router, api_create_jobs_router


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    job_service: JobLifecycleService,
    dashboard_service: DashboardReadPort,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        job_service: Job lifecycle service behind the command endpoint.
        dashboard_service: Dashboard read service behind the dashboard endpoints.

    Returns:
        FastAPI: Framework application instance with all routers mounted.

    Raises:
        RuntimeError: Raised if application initialization fails.
    """
    application = FastAPI(title="CNC Job Log")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return a minimal service descriptor for bootstrap verification."""

        return {
            "service": "cnc-job-log",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(db_health_service=db_health_service))
    application.include_router(api_create_jobs_router(job_service=job_service))
    application.include_router(api_create_dashboard_router(dashboard_service=dashboard_service))

    return application
