"""Cached dashboard reads over the job log with write-side invalidation.

Clients poll the version fingerprint and refetch active jobs only when it
changes. Both reads are cached briefly; a successful write invalidates the
caches so the next version poll observes it immediately.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Final

from cnclog.db.interfaces import RowStorePersistenceError, RowStorePort, StoredRow
from cnclog.domain import (
    ACTIVE_JOB_STATUSES,
    BusinessCalendar,
    HealthStatus,
    JobStatus,
    domain_format_local_timestamp,
    domain_normalize_project_no,
    domain_normalize_text,
)
from cnclog.ledger import (
    JOB_LOG_COLUMN_INDEX,
    CorruptSessionLogError,
    ledger_decode_pause_sessions,
    ledger_parse_timestamp,
    ledger_row_identity,
    ledger_row_status,
)

from .interfaces import ActiveJobGroup, ActiveJobsSnapshot, DashboardReadPort, DashboardVersion

logger = logging.getLogger(__name__)

_DASHBOARD_HASH_BASE: Final[int] = 131
_DASHBOARD_HASH_MODULUS: Final[int] = (1 << 61) - 1
_DASHBOARD_FIELD_SEPARATOR: Final[str] = "\x1f"
_DASHBOARD_ROW_SEPARATOR: Final[str] = "\x1e"


def dashboard_compute_fingerprint(row_count: int, status_machine_pairs: Sequence[tuple[str, str]]) -> int:
    """Compute the rolling change hash of the job log.

    The hash is a polynomial rolling hash modulo a Mersenne prime, seeded with
    the row count, so a single changed character in any pair always changes
    the result.

    Args:
        row_count: Total rows in the job log.
        status_machine_pairs: Leading (status, machine) pairs of the table rows.

    Returns:
        int: Deterministic fingerprint.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    fingerprint = (row_count * 31) % _DASHBOARD_HASH_MODULUS
    for status, machine in status_machine_pairs:
        for character in f"{status}{_DASHBOARD_FIELD_SEPARATOR}{machine}{_DASHBOARD_ROW_SEPARATOR}":
            fingerprint = (fingerprint * _DASHBOARD_HASH_BASE + ord(character)) % _DASHBOARD_HASH_MODULUS
    return fingerprint


class DashboardReadService(DashboardReadPort):
    """Dashboard read service with short-lived caches."""

    def __init__(
        self,
        row_store: RowStorePort,
        calendar: BusinessCalendar,
        active_jobs_ttl_seconds: float = 5.0,
        version_ttl_seconds: float = 5.0,
        version_hash_row_limit: int = 10,
        monotonic: Callable[[], float] = time.monotonic,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize dashboard read service.

        Args:
            row_store: Row store holding the job log.
            calendar: Business calendar used to render timestamps.
            active_jobs_ttl_seconds: Active jobs cache lifetime.
            version_ttl_seconds: Version fingerprint cache lifetime.
            version_hash_row_limit: Leading table rows covered by the fingerprint.
            monotonic: Monotonic time source for cache ages.
            clock: Wall-clock provider for response timestamps.

        Raises:
            ValueError: Raised when dependencies or limits are invalid.
        """

        if row_store is None:
            raise ValueError("row_store must not be None")
        if active_jobs_ttl_seconds < 0 or version_ttl_seconds < 0:
            raise ValueError("cache lifetimes must not be negative")
        if version_hash_row_limit < 1:
            raise ValueError("version_hash_row_limit must be at least 1")

        self._row_store = row_store
        self._calendar = calendar
        self._active_jobs_ttl_seconds = active_jobs_ttl_seconds
        self._version_ttl_seconds = version_ttl_seconds
        self._version_hash_row_limit = version_hash_row_limit
        self._monotonic = monotonic
        self._clock = clock
        self._lock = threading.Lock()
        self._active_jobs_cache: tuple[float, ActiveJobsSnapshot] | None = None
        self._version_cache: tuple[float, DashboardVersion] | None = None
        self._invalidated = False
        self._last_fingerprint: int | None = None
        self._last_modified: datetime | None = None

    def dashboard_get_active_jobs(self) -> ActiveJobsSnapshot:
        """Return active job groups, from cache when fresh.

        Returns:
            ActiveJobsSnapshot: Active job groups, empty when the row store cannot be read.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        with self._lock:
            cached_entry = self._active_jobs_cache
        if cached_entry is not None:
            cache_age = self._monotonic() - cached_entry[0]
            if cache_age < self._active_jobs_ttl_seconds:
                snapshot = cached_entry[1]
                return ActiveJobsSnapshot(
                    groups=snapshot.groups,
                    computed_at=snapshot.computed_at,
                    cached=True,
                    cache_age_seconds=cache_age,
                )

        try:
            rows = self._row_store.db_row_read_all()
        except RowStorePersistenceError:
            logger.warning("active jobs read degraded to empty result", exc_info=True)
            return ActiveJobsSnapshot(groups=(), computed_at=self._dashboard_now(), cached=False, cache_age_seconds=0.0)

        snapshot = ActiveJobsSnapshot(
            groups=self._dashboard_group_active_rows(rows),
            computed_at=self._dashboard_now(),
            cached=False,
            cache_age_seconds=0.0,
        )
        with self._lock:
            self._active_jobs_cache = (self._monotonic(), snapshot)
        return snapshot

    def dashboard_get_version(self) -> DashboardVersion:
        """Return the change fingerprint, bypassing the cache after an invalidation.

        Returns:
            DashboardVersion: Current fingerprint, zeroed when the row store cannot be read.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        with self._lock:
            invalidated = self._invalidated
            self._invalidated = False
            cached_entry = self._version_cache
        if not invalidated and cached_entry is not None:
            if self._monotonic() - cached_entry[0] < self._version_ttl_seconds:
                version = cached_entry[1]
                return DashboardVersion(
                    row_count=version.row_count,
                    data_hash=version.data_hash,
                    last_modified=version.last_modified,
                    computed_at=version.computed_at,
                    cached=True,
                    invalidated=False,
                )

        now = self._dashboard_now()
        try:
            rows = self._row_store.db_row_read_all()
        except RowStorePersistenceError:
            logger.warning("version read degraded to empty fingerprint", exc_info=True)
            return DashboardVersion(
                row_count=0,
                data_hash=0,
                last_modified=now,
                computed_at=now,
                cached=False,
                invalidated=invalidated,
            )

        fingerprint = dashboard_compute_fingerprint(
            len(rows),
            [
                (ledger_row_status(row), ledger_row_identity(row).machine_no)
                for row in rows[: self._version_hash_row_limit]
            ],
        )
        with self._lock:
            if fingerprint != self._last_fingerprint or self._last_modified is None:
                self._last_fingerprint = fingerprint
                self._last_modified = now
            version = DashboardVersion(
                row_count=len(rows),
                data_hash=fingerprint,
                last_modified=self._last_modified,
                computed_at=now,
                cached=False,
                invalidated=invalidated,
            )
            self._version_cache = (self._monotonic(), version)
        return version

    def dashboard_invalidate(self) -> None:
        with self._lock:
            self._invalidated = True
            self._active_jobs_cache = None
            self._version_cache = None
        logger.debug("dashboard caches invalidated")

    def dashboard_test_connection(self) -> HealthStatus:
        try:
            rows = self._row_store.db_row_read_all()
        except RowStorePersistenceError as error:
            logger.warning("dashboard connection test failed", exc_info=True)
            return HealthStatus(status="error", detail=str(error))
        return HealthStatus(status="ok", detail=f"job log reachable with {len(rows)} rows")

    def _dashboard_now(self) -> datetime:
        if self._clock is None:
            return datetime.now(tz=self._calendar.tzinfo)
        return self._clock()

    def _dashboard_group_active_rows(self, rows: list[StoredRow]) -> tuple[ActiveJobGroup, ...]:
        grouped_rows: dict[tuple[str, str], list[StoredRow]] = {}
        for row in rows:
            if ledger_row_status(row) not in ACTIVE_JOB_STATUSES:
                continue
            identity = ledger_row_identity(row)
            group_key = (domain_normalize_project_no(identity.project_no), domain_normalize_text(identity.part_name))
            grouped_rows.setdefault(group_key, []).append(row)
        return tuple(self._dashboard_build_group(group_rows) for group_rows in grouped_rows.values())

    def _dashboard_build_group(self, rows: list[StoredRow]) -> ActiveJobGroup:
        first_row = rows[0]
        first_identity = ledger_row_identity(first_row)
        start_times = [ledger_parse_timestamp(self._calendar, row.row_value(JOB_LOG_COLUMN_INDEX["start_time"])) for row in rows]
        known_start_times = [start_time for start_time in start_times if start_time is not None]
        project_start = (
            domain_format_local_timestamp(self._calendar, min(known_start_times)) if known_start_times else ""
        )

        identities = [ledger_row_identity(row) for row in rows]
        return ActiveJobGroup(
            project_no=first_identity.project_no,
            part_name=first_identity.part_name,
            customer_name=first_row.row_value(JOB_LOG_COLUMN_INDEX["customer_name"]),
            drawing_no=first_row.row_value(JOB_LOG_COLUMN_INDEX["drawing_no"]),
            quantity_ordered=first_row.row_value(JOB_LOG_COLUMN_INDEX["quantity_ordered"]),
            project_start=project_start,
            machines=tuple(_dashboard_list_cell(identity.machine_no) for identity in identities),
            process_statuses=tuple(ledger_row_status(row) for row in rows),
            process_names=tuple(_dashboard_list_cell(identity.process_name) for identity in identities),
            process_nos=tuple(_dashboard_list_cell(identity.process_no) for identity in identities),
            step_nos=tuple(_dashboard_list_cell(identity.step_no) for identity in identities),
            start_times=tuple(
                domain_format_local_timestamp(self._calendar, start_time) if start_time is not None else ""
                for start_time in start_times
            ),
            downtimes=tuple(self._dashboard_latest_pause_reason(row) for row in rows),
        )

    def _dashboard_latest_pause_reason(self, row: StoredRow) -> str:
        if ledger_row_status(row) != JobStatus.PAUSE.value:
            return ""
        try:
            pause_sessions = ledger_decode_pause_sessions(row.row_value(JOB_LOG_COLUMN_INDEX["pause_sessions"]))
        except CorruptSessionLogError:
            logger.warning("dashboard skipped unreadable pause log on row %s", row.row_id)
            return ""
        for session in reversed(pause_sessions):
            if session.reason:
                return _dashboard_list_cell(session.reason)
        return ""


def _dashboard_list_cell(value: str) -> str:
    return value.replace(",", " ").strip()


__all__ = ["DashboardReadService", "dashboard_compute_fingerprint"]
