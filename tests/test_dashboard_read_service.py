"""Tests for dashboard active-job grouping, version fingerprints and caching."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from cnclog.db import InMemoryRowStore, RowStorePersistenceError, StoredRow
from cnclog.domain import BusinessCalendar
from cnclog.dashboard import DashboardReadService, dashboard_compute_fingerprint
from cnclog.jobs import JobLifecycleService, job_parse_command_payload
from cnclog.ledger import JOB_LOG_COLUMN_INDEX

_BANGKOK = ZoneInfo("Asia/Bangkok")
_CALENDAR = BusinessCalendar()


class _FakeMonotonic:
    """Settable monotonic time source."""

    def __init__(self) -> None:
        self.value = 100.0

    def __call__(self) -> float:
        return self.value


class _UnreadableRowStore(InMemoryRowStore):
    """In-memory store whose full reads always fail."""

    def db_row_read_all(self) -> list[StoredRow]:
        raise RowStorePersistenceError("job log row read failed")


def _dashboard_seed(row_store: InMemoryRowStore) -> None:
    """Seed two active steps of one job, one of another job and one closed step.

    Args:
        row_store: Target store.

    Raises:
        JobCommandError: Raised when seeding commands are rejected.
    """

    moments = iter(
        datetime(2026, 10, 19, hour, minute, tzinfo=_BANGKOK)
        for hour, minute in ((9, 0), (8, 45), (9, 30), (10, 0), (10, 30), (11, 0))
    )
    service = JobLifecycleService(row_store=row_store, calendar=_CALENDAR, clock=lambda: next(moments), sleep=lambda _s: None)

    def send(**fields: str) -> None:
        payload = {
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
            **fields,
        }
        service.job_dispatch(job_parse_command_payload(payload))

    send()
    send(projectNo="0P-100", processName="Turning", processNo="20", stepNo="2", machineNo="L-02")
    send(partName="Shaft", machineNo="M-03")
    send(partName="Spacer", machineNo="M-04")
    send(processName="Turning", processNo="20", stepNo="2", machineNo="L-02", action="PAUSE", pauseReason="tool, broken")
    send(partName="Spacer", machineNo="M-04", action="CLOSE")


def _dashboard_service(row_store: InMemoryRowStore, monotonic: _FakeMonotonic) -> DashboardReadService:
    return DashboardReadService(
        row_store=row_store,
        calendar=_CALENDAR,
        monotonic=monotonic,
        clock=lambda: datetime(2026, 10, 19, 12, 0, tzinfo=_BANGKOK),
    )


def test_fingerprint_is_stable_and_sensitive_to_status_and_machine() -> None:
    """Change the fingerprint on any status or machine edit and never otherwise.

    Returns:
        None: Assertions validate fingerprint stability and sensitivity.

    Raises:
        AssertionError: Raised when the fingerprint misses an edit.
    """

    pairs = [("OPEN", "M-01"), ("PAUSE", "M-02"), ("OT", "M-03")]
    baseline = dashboard_compute_fingerprint(12, pairs)

    assert dashboard_compute_fingerprint(12, list(pairs)) == baseline
    assert dashboard_compute_fingerprint(13, pairs) != baseline
    assert dashboard_compute_fingerprint(12, [("OPEN", "M-01"), ("OPEN", "M-02"), ("OT", "M-03")]) != baseline
    assert dashboard_compute_fingerprint(12, [("OPEN", "M-01"), ("PAUSE", "M-2"), ("OT", "M-03")]) != baseline
    assert dashboard_compute_fingerprint(12, [("OPENP", "AUSE"), ("", "M-02"), ("OT", "M-03")]) != baseline
    assert dashboard_compute_fingerprint(12, list(reversed(pairs))) != baseline
    assert 0 <= baseline < (1 << 61) - 1


def test_active_jobs_group_per_project_and_part() -> None:
    """Group active steps per job in first-seen order with aligned step fields.

    Returns:
        None: Assertions validate grouping, alignment and reason cleanup.

    Raises:
        AssertionError: Raised when grouping deviates.
    """

    row_store = InMemoryRowStore()
    _dashboard_seed(row_store)
    service = _dashboard_service(row_store, _FakeMonotonic())

    snapshot = service.dashboard_get_active_jobs()

    assert snapshot.cached is False
    assert [(group.project_no, group.part_name) for group in snapshot.groups] == [("P-100", "Bracket"), ("P-100", "Shaft")]
    bracket = snapshot.groups[0]
    assert bracket.customer_name == "ACME"
    assert bracket.machines == ("M-01", "L-02")
    assert bracket.process_statuses == ("OPEN", "PAUSE")
    assert bracket.process_names == ("Milling", "Turning")
    assert bracket.step_nos == ("1", "2")
    assert bracket.start_times == ("10/19/2026 9:00:00", "10/19/2026 8:45:00")
    assert bracket.project_start == "10/19/2026 8:45:00"
    assert bracket.downtimes == ("", "tool  broken")


def test_active_jobs_cache_expires_after_ttl() -> None:
    """Serve cached groups inside the lifetime and recompute after it."""

    row_store = InMemoryRowStore()
    _dashboard_seed(row_store)
    monotonic = _FakeMonotonic()
    service = _dashboard_service(row_store, monotonic)

    service.dashboard_get_active_jobs()
    monotonic.value += 2.0
    cached_snapshot = service.dashboard_get_active_jobs()
    monotonic.value += 4.0
    fresh_snapshot = service.dashboard_get_active_jobs()

    assert cached_snapshot.cached is True
    assert cached_snapshot.cache_age_seconds == 2.0
    assert fresh_snapshot.cached is False


def test_version_cache_is_bypassed_after_invalidation() -> None:
    """Observe a write on the next version poll once the write path invalidates.

    Returns:
        None: Assertions validate caching, invalidation and last-modified tracking.

    Raises:
        AssertionError: Raised when a stale fingerprint is served after invalidation.
    """

    row_store = InMemoryRowStore()
    _dashboard_seed(row_store)
    service = _dashboard_service(row_store, _FakeMonotonic())

    first_version = service.dashboard_get_version()
    repeated_version = service.dashboard_get_version()

    assert first_version.cached is False
    assert repeated_version.cached is True
    assert repeated_version.data_hash == first_version.data_hash

    row_store.db_row_write_range(1, JOB_LOG_COLUMN_INDEX["machine_no"], ["M-09"])
    assert service.dashboard_get_version().data_hash == first_version.data_hash

    service.dashboard_invalidate()
    invalidated_version = service.dashboard_get_version()

    assert invalidated_version.cached is False
    assert invalidated_version.invalidated is True
    assert invalidated_version.row_count == 4
    assert invalidated_version.data_hash != first_version.data_hash
    assert service.dashboard_get_version().invalidated is False


def test_version_fingerprint_ignores_rows_past_the_limit() -> None:
    """Fold only the leading table rows into the fingerprint."""

    row_store = InMemoryRowStore()
    _dashboard_seed(row_store)
    service = DashboardReadService(row_store=row_store, calendar=_CALENDAR, version_hash_row_limit=1, version_ttl_seconds=0)

    baseline = service.dashboard_get_version().data_hash
    row_store.db_row_write_range(3, JOB_LOG_COLUMN_INDEX["machine_no"], ["M-99"])

    assert service.dashboard_get_version().data_hash == baseline


def test_version_fingerprint_covers_closed_rows_in_the_leading_window() -> None:
    """Change the fingerprint when a closed row near the top moves to another machine.

    Returns:
        None: Assertions validate that closed rows count toward the fingerprint.

    Raises:
        AssertionError: Raised when edits to closed rows go unnoticed.
    """

    row_store = InMemoryRowStore()
    moments = iter(datetime(2026, 10, 19, 9, minute, tzinfo=_BANGKOK) for minute in range(0, 60, 5))
    job_service = JobLifecycleService(row_store=row_store, calendar=_CALENDAR, clock=lambda: next(moments), sleep=lambda _s: None)
    for part_name in ("Bracket", "Shaft", "Spacer"):
        for action_fields in ({}, {"action": "CLOSE"}):
            job_service.job_dispatch(
                job_parse_command_payload(
                    {
                        "projectNo": "P-100",
                        "partName": part_name,
                        "processName": "Milling",
                        "machineNo": "M-01",
                        "employeeCode": "E01",
                        **action_fields,
                    }
                )
            )
    service = DashboardReadService(row_store=row_store, calendar=_CALENDAR, version_ttl_seconds=0)

    baseline = service.dashboard_get_version()
    row_store.db_row_write_range(1, JOB_LOG_COLUMN_INDEX["machine_no"], ["M-02"])
    edited = service.dashboard_get_version()

    assert baseline.row_count == edited.row_count == 3
    assert service.dashboard_get_active_jobs().groups == ()
    assert edited.data_hash != baseline.data_hash


def test_dashboard_reads_fail_soft_when_store_is_unreadable() -> None:
    """Return empty results instead of errors when the job log cannot be read."""

    service = _dashboard_service(_UnreadableRowStore(), _FakeMonotonic())

    assert service.dashboard_get_active_jobs().groups == ()
    version = service.dashboard_get_version()
    assert (version.row_count, version.data_hash) == (0, 0)
    assert service.dashboard_test_connection().status == "error"
