"""Tests for dashboard read endpoints."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi.testclient import TestClient

from cnclog.api.application import create_api_application
from cnclog.config import AppSettings
from cnclog.dashboard import DashboardReadService
from cnclog.db import InMemoryRowStore, RowStorePersistenceError, StoredRow
from cnclog.domain import BusinessCalendar
from cnclog.jobs import JobLifecycleService

_BANGKOK = ZoneInfo("Asia/Bangkok")


class _UnreadableRowStore(InMemoryRowStore):
    """In-memory store whose full reads always fail."""

    def db_row_read_all(self) -> list[StoredRow]:
        raise RowStorePersistenceError("job log row read failed")


def _api_build_dashboard_client(row_store: InMemoryRowStore) -> TestClient:
    """Build an API client whose job writes invalidate the dashboard caches.

    Args:
        row_store: Backing row store.

    Returns:
        TestClient: Client over the assembled application.

    Raises:
        ValueError: Raised when service wiring is invalid.
    """

    calendar = BusinessCalendar()
    dashboard_service = DashboardReadService(
        row_store=row_store,
        calendar=calendar,
        clock=lambda: datetime(2026, 10, 19, 12, 0, tzinfo=_BANGKOK),
    )
    job_service = JobLifecycleService(
        row_store=row_store,
        calendar=calendar,
        clock=lambda: datetime(2026, 10, 19, 9, 0, tzinfo=_BANGKOK),
        sleep=lambda _seconds: None,
        invalidation_listener=dashboard_service.dashboard_invalidate,
    )
    application = create_api_application(
        AppSettings(environment_name="test", row_store_backend="memory"),
        row_store,
        job_service,
        dashboard_service,
    )
    return TestClient(application)


def test_api_dashboard_active_jobs_serializes_groups() -> None:
    """Serialize each job group with comma-joined per-step fields.

    Returns:
        None: Assertions validate the active-jobs envelope.

    Raises:
        AssertionError: Raised when grouping or serialization deviates.
    """

    client = _api_build_dashboard_client(InMemoryRowStore())
    base_payload = {
        "projectNo": "P-100",
        "partName": "Bracket",
        "processName": "Milling",
        "processNo": "10",
        "stepNo": "1",
        "machineNo": "M-01",
        "employeeCode": "E01",
        "customerName": "ACME",
        "drawingNo": "DWG-1",
        "quantityOrdered": "50",
    }
    client.post("/log", json=base_payload)
    client.post("/log", json={**base_payload, "processName": "Turning", "processNo": "20", "stepNo": "2", "machineNo": "L-02"})

    response = client.get("/dashboard/active-jobs")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["count"] == 1
    assert body["cached"] is False
    assert body["data"] == [
        {
            "projectNo": "P-100",
            "partName": "Bracket",
            "customer": "ACME",
            "drawingNo": "DWG-1",
            "quantityOrdered": "50",
            "projectStart": "10/19/2026 9:00:00",
            "status": "On Process",
            "machine": "M-01,L-02",
            "processStatus": "OPEN,OPEN",
            "process": "Milling,Turning",
            "processNo": "10,20",
            "stepNo": "1,2",
            "startTime": "10/19/2026 9:00:00,10/19/2026 9:00:00",
            "downtime": ",",
        }
    ]
    assert client.get("/dashboard/active-jobs").json()["cached"] is True


def test_api_dashboard_version_tracks_writes() -> None:
    """Serve cached versions until a job write invalidates them.

    Returns:
        None: Assertions validate version caching and invalidation.

    Raises:
        AssertionError: Raised when the version misses a write.
    """

    client = _api_build_dashboard_client(InMemoryRowStore())
    payload = {"projectNo": "P-100", "partName": "Bracket", "processName": "Milling", "machineNo": "M-01", "employeeCode": "E01"}

    first_body = client.get("/dashboard/version").json()
    assert first_body["success"] is True
    assert first_body["version"]["rowCount"] == 0
    assert set(first_body["version"]) == {"rowCount", "dataHash", "lastModified", "timestamp"}
    assert client.get("/dashboard/version").json()["cached"] is True

    client.post("/log", json=payload)
    written_body = client.get("/dashboard/version").json()

    assert written_body["cached"] is False
    assert written_body["invalidated"] is True
    assert written_body["version"]["rowCount"] == 1
    assert written_body["version"]["dataHash"] != first_body["version"]["dataHash"]


def test_api_dashboard_invalidate_and_test_endpoints() -> None:
    """Acknowledge manual invalidation and report job log reachability."""

    healthy_client = _api_build_dashboard_client(InMemoryRowStore())
    failing_client = _api_build_dashboard_client(_UnreadableRowStore())

    healthy_client.get("/dashboard/version")
    assert healthy_client.post("/dashboard/invalidate").json() == {"success": True}
    assert healthy_client.get("/dashboard/version").json()["invalidated"] is True

    assert healthy_client.get("/dashboard/test").json()["success"] is True
    failing_body = failing_client.get("/dashboard/test").json()
    assert failing_body["success"] is False
    assert failing_body["status"] == "error"
    assert failing_client.get("/dashboard/active-jobs").json()["data"] == []
