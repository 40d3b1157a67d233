"""Dashboard read router composition for active jobs and change polling."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from cnclog.dashboard import ActiveJobGroup, DashboardReadPort, DashboardVersion


def api_create_dashboard_router(dashboard_service: DashboardReadPort) -> APIRouter:
    """Create dashboard router exposing cached read endpoints.

    Args:
        dashboard_service: Dashboard read service.

    Returns:
        APIRouter: Router exposing `/dashboard/*` endpoints.

    Raises:
        ValueError: Raised when dashboard_service is invalid.
    """

    if dashboard_service is None:
        raise ValueError("dashboard_service must not be None")

    router = APIRouter(prefix="/dashboard", tags=["dashboard"])

    @router.get("/active-jobs")
    def api_dashboard_active_jobs() -> JSONResponse:
        """Return active jobs grouped per project and part.

        Returns:
            JSONResponse: Active job envelope; empty data when reads fail.

        Raises:
            RuntimeError: This endpoint does not raise runtime errors.
        """

        snapshot = dashboard_service.dashboard_get_active_jobs()
        payload = {
            "success": True,
            "data": [api_serialize_active_job_group(group) for group in snapshot.groups],
            "count": len(snapshot.groups),
            "timestamp": snapshot.computed_at.isoformat(),
            "cached": snapshot.cached,
            "cacheAge": round(snapshot.cache_age_seconds, 3),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/version")
    def api_dashboard_version() -> JSONResponse:
        """Return the job log change fingerprint.

        Returns:
            JSONResponse: Version envelope.

        Raises:
            RuntimeError: This endpoint does not raise runtime errors.
        """

        version = dashboard_service.dashboard_get_version()
        payload = {
            "success": True,
            "version": api_serialize_dashboard_version(version),
            "cached": version.cached,
            "invalidated": version.invalidated,
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.post("/invalidate")
    def api_dashboard_invalidate() -> JSONResponse:
        """Drop dashboard caches so the next poll recomputes."""

        dashboard_service.dashboard_invalidate()
        return JSONResponse(content={"success": True}, status_code=status.HTTP_200_OK)

    @router.get("/test")
    def api_dashboard_test() -> JSONResponse:
        """Check job log reachability for dashboard clients."""

        reachability = dashboard_service.dashboard_test_connection()
        payload = {"success": reachability.status == "ok", "status": reachability.status, "detail": reachability.detail}
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router


def api_serialize_active_job_group(group: ActiveJobGroup) -> dict[str, object]:
    """Serialize one active job group with comma-joined per-step fields.

    Args:
        group: Active job group.

    Returns:
        dict[str, object]: JSON-serializable group payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {
        "projectNo": group.project_no,
        "partName": group.part_name,
        "customer": group.customer_name,
        "drawingNo": group.drawing_no,
        "quantityOrdered": group.quantity_ordered,
        "projectStart": group.project_start,
        "status": "On Process",
        "machine": ",".join(group.machines),
        "processStatus": ",".join(group.process_statuses),
        "process": ",".join(group.process_names),
        "processNo": ",".join(group.process_nos),
        "stepNo": ",".join(group.step_nos),
        "startTime": ",".join(group.start_times),
        "downtime": ",".join(group.downtimes),
    }


def api_serialize_dashboard_version(version: DashboardVersion) -> dict[str, object]:
    return {
        "rowCount": version.row_count,
        "dataHash": version.data_hash,
        "lastModified": version.last_modified.isoformat(),
        "timestamp": version.computed_at.isoformat(),
    }
