"""Liveness router reporting whether terminals can reach the job log."""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from cnclog.db import DatabaseHealthPort

logger = logging.getLogger(__name__)


def api_create_health_router(db_health_service: DatabaseHealthPort) -> APIRouter:
    """Create the `/health` router over the job log health check.

    Args:
        db_health_service: Row store or SQL health check.

    Returns:
        APIRouter: Router exposing `/health`.

    Raises:
        ValueError: Raised when db_health_service is invalid.
    """

    if db_health_service is None:
        raise ValueError("db_health_service must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Report 200 while the job log answers and 503 when job commands would fail.

        Returns:
            JSONResponse: `status`, `app`, `database`, `detail` and `target` fields.
        """

        payload = {"status": "ok", "app": "up", "target": db_health_service.db_connection_label()}
        try:
            job_log_health = db_health_service.db_check_health()
        except ConnectionError as error:
            logger.warning("job log health check failed target=%s", payload["target"], exc_info=True)
            payload.update(status="degraded", database="down", detail=str(error))
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

        payload.update(database=job_log_health.status, detail=job_log_health.detail)
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
