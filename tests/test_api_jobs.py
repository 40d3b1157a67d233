"""Tests for the terminal command endpoint and the open-jobs query."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi.testclient import TestClient

from cnclog.api.application import create_api_application
from cnclog.config import AppSettings
from cnclog.dashboard import DashboardReadService
from cnclog.db import InMemoryRowStore, RowStorePersistenceError, StoredRow
from cnclog.domain import BusinessCalendar
from cnclog.jobs import JobLifecycleService
from cnclog.ledger import JOB_LOG_COLUMN_INDEX

_BANGKOK = ZoneInfo("Asia/Bangkok")
_JOB_PAYLOAD = {
    "projectNo": "P-100",
    "partName": "Bracket",
    "processName": "Milling",
    "processNo": "10",
    "stepNo": "1",
    "machineNo": "M-01",
    "employeeCode": "E01",
}


class _FailingAppendRowStore(InMemoryRowStore):
    """In-memory store whose appends always fail."""

    def db_row_append(self, values: Sequence[str]) -> int:
        raise RowStorePersistenceError("job log row append failed")


class _UnreadableRowStore(InMemoryRowStore):
    """In-memory store whose full reads always fail."""

    def db_row_read_all(self) -> list[StoredRow]:
        raise RowStorePersistenceError("job log row read failed")


def _api_build_client(row_store: InMemoryRowStore | None = None) -> tuple[TestClient, InMemoryRowStore]:
    """Build an API client over an in-memory store with a Monday 09:00 clock.

    Args:
        row_store: Optional pre-built store.

    Returns:
        tuple[TestClient, InMemoryRowStore]: Client and the backing store.

    Raises:
        ValueError: Raised when service wiring is invalid.
    """

    row_store = row_store if row_store is not None else InMemoryRowStore()
    calendar = BusinessCalendar()
    job_service = JobLifecycleService(
        row_store=row_store,
        calendar=calendar,
        clock=lambda: datetime(2026, 10, 19, 9, 0, tzinfo=_BANGKOK),
        sleep=lambda _seconds: None,
    )
    application = create_api_application(
        AppSettings(environment_name="test", row_store_backend="memory"),
        row_store,
        job_service,
        DashboardReadService(row_store=row_store, calendar=calendar),
    )
    return TestClient(application), row_store


def test_api_log_accepts_create_and_pause_commands() -> None:
    """Return the OK envelope with command, row id and resulting status.

    Returns:
        None: Assertions validate envelopes and persisted status.

    Raises:
        AssertionError: Raised when accepted commands are misreported.
    """

    client, row_store = _api_build_client()

    create_response = client.post("/log", json=_JOB_PAYLOAD)
    pause_response = client.post("/log", json={**_JOB_PAYLOAD, "action": "PAUSE", "pauseType": "DOWNTIME"})

    assert create_response.status_code == 200
    assert create_response.json() == {"status": "OK", "command": "CREATE", "rowId": 1, "jobStatus": "OPEN"}
    assert pause_response.json() == {"status": "OK", "command": "PAUSE", "rowId": 1, "jobStatus": "PAUSE"}
    assert row_store.db_row_read_all()[0].values[JOB_LOG_COLUMN_INDEX["status"]] == "PAUSE"


def test_api_log_reports_rejections_in_error_envelope() -> None:
    """Report rejected commands with HTTP 200, a localized message and the code.

    Returns:
        None: Assertions validate rejection envelopes.

    Raises:
        AssertionError: Raised when rejections surface as transport errors.
    """

    client, _row_store = _api_build_client()
    client.post("/log", json=_JOB_PAYLOAD)

    duplicate_response = client.post("/log", json=_JOB_PAYLOAD)
    missing_response = client.post("/log", json={**_JOB_PAYLOAD, "employeeCode": ""})

    assert duplicate_response.status_code == 200
    assert duplicate_response.json() == {
        "status": "ERROR",
        "message": (
            "พบงานที่เปิดอยู่แล้วในระบบ:\n"
            "Project: P-100\n"
            "Part: Bracket\n"
            "Process: Milling (10)\n"
            "Step: 1\n"
            "Machine: M-01\n\n"
            "กรุณาปิดงานเดิมก่อนเริ่มงานใหม่"
        ),
        "code": "DUPLICATE_OPEN_JOB",
    }
    assert missing_response.json()["code"] == "MISSING_FIELD"
    assert missing_response.json()["message"] == "กรุณากรอกข้อมูลให้ครบถ้วน (employeeCode)"


def test_api_log_rejects_malformed_json() -> None:
    """Answer unparseable and non-object bodies with the invalid JSON message."""

    client, _row_store = _api_build_client()

    broken_response = client.post("/log", content=b"{not json", headers={"Content-Type": "application/json"})
    list_response = client.post("/log", json=["P-100"])

    assert broken_response.json() == {"status": "ERROR", "message": "Invalid JSON format"}
    assert list_response.json() == {"status": "ERROR", "message": "Invalid JSON format"}


def test_api_log_reports_persistence_failures() -> None:
    """Wrap row store failures in the write-error envelope."""

    client, _row_store = _api_build_client(_FailingAppendRowStore())

    response = client.post("/log", json=_JOB_PAYLOAD)

    assert response.status_code == 200
    assert response.json()["status"] == "ERROR"
    assert response.json()["code"] == "PERSISTENCE_FAILED"
    assert response.json()["message"] == "เกิดข้อผิดพลาดในการเขียนข้อมูล: job log row append failed"


def test_api_open_jobs_lists_active_steps() -> None:
    """List active steps of one job and return nothing for blank or unknown jobs.

    Returns:
        None: Assertions validate listing and blank-parameter behavior.

    Raises:
        AssertionError: Raised when listing deviates.
    """

    client, _row_store = _api_build_client()
    client.post("/log", json=_JOB_PAYLOAD)
    client.post("/log", json={**_JOB_PAYLOAD, "processName": "Turning", "processNo": "20", "machineNo": "L-02"})
    client.post("/log", json={**_JOB_PAYLOAD, "processName": "Turning", "processNo": "20", "machineNo": "L-02", "action": "PAUSE"})

    response = client.get("/open-jobs", params={"projectNo": "p-100", "partName": "bracket"})

    assert response.status_code == 200
    assert response.json() == [
        {"processName": "Milling", "processNo": "10", "stepNo": "1", "machineNo": "M-01", "status": "OPEN"},
        {"processName": "Turning", "processNo": "20", "stepNo": "1", "machineNo": "L-02", "status": "PAUSE"},
    ]
    assert client.get("/open-jobs", params={"projectNo": " ", "partName": "Bracket"}).json() == []
    assert client.get("/open-jobs", params={"projectNo": "P-999", "partName": "Bracket"}).json() == []


def test_api_open_jobs_degrades_to_empty_list_on_read_failure() -> None:
    """Return an empty list when the job log cannot be read."""

    client, _row_store = _api_build_client(_UnreadableRowStore())

    response = client.get("/open-jobs", params={"projectNo": "P-100", "partName": "Bracket"})

    assert response.status_code == 200
    assert response.json() == []
