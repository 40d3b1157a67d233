"""Scheduled sweep closing overtime sessions left open past the daily cutoff."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime

from cnclog.db.interfaces import RowStorePersistenceError, RowStorePort
from cnclog.domain import BusinessCalendar, JobStatus, domain_calendar_to_local
from cnclog.ledger import (
    COLUMN_STATUS,
    CorruptSessionLogError,
    ledger_auto_stop_open_sessions,
    ledger_build_derived_fields,
    ledger_build_status_range_values,
    ledger_decode_job_record,
)

from .interfaces import JobExecutionResult, JobOrchestratorPort
from .row_styling import job_apply_status_style

logger = logging.getLogger(__name__)


class OvertimeSweepOrchestrator(JobOrchestratorPort):
    """Close stale open overtime sessions across the whole job log.

    Rows whose stale sessions are closed are rewritten with recomputed derived
    columns; an OT row drops back to OPEN. Running the sweep again with nothing
    stale changes nothing.
    """

    _OVERTIME_SWEEP_JOB_NAME = "ot_sweep"

    def __init__(
        self,
        row_store: RowStorePort,
        calendar: BusinessCalendar,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        invalidation_listener: Callable[[], None] | None = None,
    ):
        """Initialize sweep dependencies.

        Args:
            row_store: Row store holding the job log.
            calendar: Business calendar.
            clock: Current-time provider, wall clock in the calendar timezone when omitted.
            sleep: Sleep function used by the styling read-back.
            invalidation_listener: Callback invoked once when any row changed.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if row_store is None:
            raise ValueError("row_store must not be None")
        if calendar is None:
            raise ValueError("calendar must not be None")

        self._row_store = row_store
        self._calendar = calendar
        self._clock = clock
        self._sleep = sleep
        self._invalidation_listener = invalidation_listener

    def job_supported_names(self) -> tuple[str, ...]:
        """Return supported job names.

        Returns:
            tuple[str, ...]: Supported job names.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return (self._OVERTIME_SWEEP_JOB_NAME,)

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Run the overtime sweep once.

        Args:
            job_name: Name of job to execute.

        Returns:
            JobExecutionResult: Sweep status and row counters.

        Raises:
            ValueError: Raised when job name is unsupported.
            RowStorePersistenceError: Raised when the table snapshot cannot be read.
        """

        normalized_job_name = job_name.strip()
        if normalized_job_name != self._OVERTIME_SWEEP_JOB_NAME:
            raise ValueError(f"unsupported job_name={normalized_job_name}")

        now = self._job_now()
        rows = self._row_store.db_row_read_all()
        changed_row_count = 0
        failed_row_count = 0
        for row in rows:
            try:
                record = ledger_decode_job_record(self._calendar, row)
            except CorruptSessionLogError:
                logger.warning("overtime sweep skipped row %s with unreadable session log", row.row_id, exc_info=True)
                failed_row_count += 1
                continue

            ot_sessions, changed = ledger_auto_stop_open_sessions(self._calendar, record.ot_sessions, now)
            if not changed:
                continue

            next_status = JobStatus.OPEN.value if record.status == JobStatus.OT.value else record.status
            derived_fields = ledger_build_derived_fields(self._calendar, record.pause_sessions, ot_sessions)
            try:
                self._row_store.db_row_write_range(
                    row.row_id,
                    COLUMN_STATUS,
                    ledger_build_status_range_values(next_status, derived_fields),
                )
            except RowStorePersistenceError:
                logger.exception("overtime sweep write failed for row %s", row.row_id)
                failed_row_count += 1
                continue

            changed_row_count += 1
            logger.info("overtime sweep auto-stopped overtime on row %s", row.row_id)
            job_apply_status_style(self._row_store, row.row_id, attempts=1, backoff_seconds=0.0, sleep=self._sleep)

        if changed_row_count and self._invalidation_listener is not None:
            self._invalidation_listener()

        logger.info(
            "overtime sweep finished: scanned=%s changed=%s failed=%s",
            len(rows),
            changed_row_count,
            failed_row_count,
        )
        return JobExecutionResult(
            job_name=self._OVERTIME_SWEEP_JOB_NAME,
            status="success" if failed_row_count == 0 else "failed",
            scanned_row_count=len(rows),
            changed_row_count=changed_row_count,
            failed_row_count=failed_row_count,
        )

    def _job_now(self) -> datetime:
        if self._clock is None:
            return datetime.now(tz=self._calendar.tzinfo)
        return domain_calendar_to_local(self._calendar, self._clock())


__all__ = ["OvertimeSweepOrchestrator"]
