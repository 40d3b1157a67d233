"""Tests for API health endpoint behavior.

These tests validate deterministic response behavior for healthy and
database-unavailable states.
"""

from fastapi.testclient import TestClient

from cnclog.api.application import create_api_application
from cnclog.config import AppSettings
from cnclog.dashboard import DashboardReadService
from cnclog.db import InMemoryRowStore
from cnclog.domain import BusinessCalendar, HealthStatus
from cnclog.jobs import JobLifecycleService


class _FailingDatabaseService:
    """Test double that simulates a database connectivity failure."""

    def db_connection_label(self) -> str:
        """Return deterministic target label.

        Returns:
            str: Health target label.

        Raises:
            RuntimeError: Never raised by this test double.
        """

        return "postgresql://test"

    def db_check_health(self) -> HealthStatus:
        """Raise deterministic connection error.

        Returns:
            HealthStatus: This method does not return.

        Raises:
            ConnectionError: Always raised by this test double.
        """

        raise ConnectionError("database connectivity check failed")


def _build_settings() -> AppSettings:
    """Create test settings object.

    Returns:
        AppSettings: Deterministic test settings for API creation.

    Raises:
        ValueError: Raised by AppSettings when values are invalid.
    """

    return AppSettings(environment_name="test", row_store_backend="memory")


def _build_client(db_health_service) -> TestClient:
    row_store = InMemoryRowStore()
    calendar = BusinessCalendar()
    application = create_api_application(
        _build_settings(),
        db_health_service,
        JobLifecycleService(row_store=row_store, calendar=calendar),
        DashboardReadService(row_store=row_store, calendar=calendar),
    )
    return TestClient(application)


def test_api_health_returns_success_when_database_is_available() -> None:
    """Return HTTP 200 and healthy payload when DB service reports success.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    client = _build_client(InMemoryRowStore())

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["app"] == "up"
    assert response.json()["database"] == "ok"
    assert response.json()["target"] == "memory://job_log_row"
    assert response.json()["detail"] == "in-memory row store holds 0 rows"


def test_api_health_returns_service_unavailable_when_database_is_down() -> None:
    """Return HTTP 503 and degraded payload when DB service reports failure.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    client = _build_client(_FailingDatabaseService())

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["app"] == "up"
    assert response.json()["database"] == "down"
    assert response.json()["detail"] == "database connectivity check failed"
    assert response.json()["target"] == "postgresql://test"


def test_api_index_reports_environment() -> None:
    """Expose service name and environment on the root descriptor."""

    response = _build_client(InMemoryRowStore()).get("/")

    assert response.json() == {"service": "cnc-job-log", "status": "ready", "environment": "test"}
