"""Job lifecycle service enforcing the job state machine over the row store.

Every command reads a fresh full table snapshot, selects its target row from
that snapshot, recomputes every derived column from the updated session lists
and persists the result with one contiguous range write. Validation happens
before any write, so rejected commands never mutate the store.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from cnclog.db.interfaces import RowStorePersistenceError, RowStorePort, StoredRow
from cnclog.domain import (
    ACTIVE_JOB_STATUSES,
    BusinessCalendar,
    JobIdentity,
    JobRecord,
    JobStatus,
    OvertimeSession,
    PauseSession,
    domain_calendar_in_overtime_window,
    domain_calendar_overtime_cutoff,
    domain_calendar_overtime_start,
    domain_calendar_to_local,
    domain_calendar_working_time_ms,
    domain_format_duration,
    domain_format_local_timestamp,
    domain_normalize_text,
)
from cnclog.ledger import (
    COLUMN_END_EMPLOYEE_CODE,
    COLUMN_STATUS,
    NewJobRowRequest,
    ledger_auto_stop_open_sessions,
    ledger_build_close_range_values,
    ledger_build_derived_fields,
    ledger_build_new_row_values,
    ledger_build_status_range_values,
    ledger_close_all_open_overtime,
    ledger_close_latest_open_overtime,
    ledger_decode_job_record,
    ledger_resume_latest_open_pause,
    ledger_row_identity,
    ledger_row_log_no,
    ledger_row_status,
)

from .commands import JobCommandRequest
from .error_codes import JobErrorCode
from .errors import DuplicateOpenJobError, InvalidJobStateError, JobValidationError, OvertimeWindowError
from .row_styling import job_apply_status_style
from .transitions import JobCommand, job_transition_select_row

logger = logging.getLogger(__name__)

QC_PROCESS_NAME = "QC"
NOT_APPLICABLE_CELL = "-"


@dataclass(frozen=True)
class JobLifecycleConfig:
    """Runtime policy for job lifecycle commands.

    Attributes:
        extended_shift_process_names: Process names whose last working window ends at the overtime cutoff.
        unquantified_process_names: Process names closed with `-` quantities.
        status_read_attempts: Status read-back attempts of the styling pass.
        status_read_backoff_seconds: Sleep between status read-back attempts.
    """

    extended_shift_process_names: tuple[str, ...] = ("Machine Setting",)
    unquantified_process_names: tuple[str, ...] = ("Machine Setting",)
    status_read_attempts: int = 3
    status_read_backoff_seconds: float = 0.1


@dataclass(frozen=True)
class JobCommandResult:
    """Outcome of one accepted job command.

    Attributes:
        command: Executed command.
        row_id: Written row identifier.
        status: Status written to the row.
    """

    command: JobCommand
    row_id: int
    status: str


@dataclass(frozen=True)
class OpenJobStep:
    """One active step of a job returned by the open-jobs query."""

    process_name: str
    process_no: str
    step_no: str
    machine_no: str
    status: str


class JobLifecycleService:
    """State machine over the job log row store."""

    def __init__(
        self,
        row_store: RowStorePort,
        calendar: BusinessCalendar,
        config: JobLifecycleConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        invalidation_listener: Callable[[], None] | None = None,
    ):
        """Initialize lifecycle service dependencies.

        Args:
            row_store: Row store holding the job log.
            calendar: Business calendar.
            config: Lifecycle policy, defaults when omitted.
            clock: Current-time provider, wall clock in the calendar timezone when omitted.
            sleep: Sleep function used between status read-back attempts.
            invalidation_listener: Callback invoked after every successful write.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if row_store is None:
            raise ValueError("row_store must not be None")
        if calendar is None:
            raise ValueError("calendar must not be None")
        resolved_config = config or JobLifecycleConfig()
        if resolved_config.status_read_attempts < 1:
            raise ValueError("config.status_read_attempts must be at least 1")
        if resolved_config.status_read_backoff_seconds < 0:
            raise ValueError("config.status_read_backoff_seconds must not be negative")

        self._row_store = row_store
        self._calendar = calendar
        self._config = resolved_config
        self._clock = clock
        self._sleep = sleep
        self._invalidation_listener = invalidation_listener

    def job_dispatch(self, request: JobCommandRequest) -> JobCommandResult:
        """Execute one parsed terminal command.

        Args:
            request: Parsed command request.

        Returns:
            JobCommandResult: Outcome of the accepted command.

        Raises:
            JobCommandError: Raised when the command is rejected.
            CorruptSessionLogError: Raised when the target row holds an unreadable session log.
            RowStorePersistenceError: Raised when the row store fails.
        """

        if request.command is JobCommand.CREATE:
            return self.job_create(request)
        if request.command is JobCommand.PAUSE:
            return self.job_pause(request.identity, request.pause_type, request.pause_reason)
        if request.command is JobCommand.CONTINUE:
            return self.job_continue(request.identity)
        if request.command is JobCommand.START_OT:
            return self.job_start_overtime(request.identity)
        if request.command is JobCommand.STOP_OT:
            return self.job_stop_overtime(request.identity)
        if request.command is JobCommand.CLOSE:
            return self.job_close(
                request.identity,
                employee_code=request.employee_code,
                quantities=(request.fg, request.ng, request.rework),
                remark=request.remark,
            )
        if request.command is JobCommand.QC_REPORT:
            return self.job_submit_qc_report(request)
        raise ValueError(f"unsupported command {request.command!r}")

    def job_create(self, request: JobCommandRequest) -> JobCommandResult:
        """Append a new OPEN row for one job step.

        Args:
            request: Create request with identity and creation fields.

        Returns:
            JobCommandResult: Appended row outcome.

        Raises:
            DuplicateOpenJobError: Raised when an OPEN row with the same identity exists.
            RowStorePersistenceError: Raised when the append fails.
        """

        rows = self._row_store.db_row_read_all()
        _job_reject_other_open_row(rows, request.identity)

        now = self._job_now()
        values = ledger_build_new_row_values(
            NewJobRowRequest(
                log_no=_job_next_log_no(rows),
                identity=request.identity,
                customer_name=request.customer_name,
                drawing_no=request.drawing_no,
                quantity_ordered=request.quantity_ordered,
                start_employee_code=request.employee_code,
                start_time=now,
                remark=request.remark or "",
            ),
            ledger_build_derived_fields(self._calendar, [], []),
        )
        row_id = self._job_append(JobCommand.CREATE, values)
        return self._job_after_write(JobCommand.CREATE, row_id, JobStatus.OPEN.value)

    def job_pause(self, identity: JobIdentity, pause_type: str, pause_reason: str = "") -> JobCommandResult:
        """Pause an OPEN or OT job step.

        Args:
            identity: Job step identity.
            pause_type: `PAUSE` or `DOWNTIME`.
            pause_reason: Optional reason.

        Returns:
            JobCommandResult: Written row outcome.

        Raises:
            JobNotFoundError: Raised when no active row matches.
            InvalidJobStateError: Raised when the match is not OPEN or OT, or already holds an open pause.
            RowStorePersistenceError: Raised when the write fails.
        """

        _, record = self._job_load_target(identity, JobCommand.PAUSE)
        if any(session.is_open for session in record.pause_sessions):
            raise InvalidJobStateError.from_code(JobErrorCode.PAUSE_ALREADY_OPEN)

        now = self._job_now()
        ot_sessions, _ = ledger_auto_stop_open_sessions(self._calendar, record.ot_sessions, now)
        pause_sessions = [
            *record.pause_sessions,
            PauseSession(
                pause_type=pause_type,
                reason=pause_reason.strip(),
                pause_at=now,
                pause_at_local=domain_format_local_timestamp(self._calendar, now),
                was_in_ot=record.status == JobStatus.OT.value,
            ),
        ]
        return self._job_write_status_range(JobCommand.PAUSE, record, JobStatus.PAUSE.value, pause_sessions, ot_sessions)

    def job_continue(self, identity: JobIdentity) -> JobCommandResult:
        """Resume a paused job step.

        The job returns to OT when an overtime session is still open and the
        current time is inside the overtime window, otherwise to OPEN.

        Args:
            identity: Job step identity.

        Returns:
            JobCommandResult: Written row outcome.

        Raises:
            JobNotFoundError: Raised when no active row matches.
            InvalidJobStateError: Raised when the match is not paused or has no open pause session.
            DuplicateOpenJobError: Raised when returning to OPEN would duplicate another OPEN row.
            RowStorePersistenceError: Raised when the write fails.
        """

        rows, record = self._job_load_target(identity, JobCommand.CONTINUE)
        now = self._job_now()
        pause_sessions, resumed = ledger_resume_latest_open_pause(self._calendar, record.pause_sessions, now)
        if not resumed:
            raise InvalidJobStateError.from_code(JobErrorCode.CONTINUE_NO_OPEN_PAUSE)

        ot_sessions, _ = ledger_auto_stop_open_sessions(self._calendar, record.ot_sessions, now)
        has_open_overtime = any(session.is_open for session in ot_sessions)
        if has_open_overtime and domain_calendar_in_overtime_window(self._calendar, now):
            next_status = JobStatus.OT.value
        else:
            next_status = JobStatus.OPEN.value
            _job_reject_other_open_row(rows, record.identity, row_id=record.row_id)
        return self._job_write_status_range(JobCommand.CONTINUE, record, next_status, pause_sessions, ot_sessions)

    def job_start_overtime(self, identity: JobIdentity) -> JobCommandResult:
        """Start an overtime session on an OPEN or OT job step.

        Args:
            identity: Job step identity.

        Returns:
            JobCommandResult: Written row outcome.

        Raises:
            OvertimeWindowError: Raised on non-working days, before the overtime start or at or after the cutoff.
            JobNotFoundError: Raised when no active row matches.
            InvalidJobStateError: Raised when the match is paused or an overtime session is still open.
            RowStorePersistenceError: Raised when the write fails.
        """

        now = self._job_now()
        if now.weekday() not in self._calendar.working_weekdays:
            raise OvertimeWindowError.from_code(JobErrorCode.OT_NON_WORKING_DAY)
        if now >= domain_calendar_overtime_cutoff(self._calendar, now):
            raise OvertimeWindowError.from_code(
                JobErrorCode.OT_AFTER_CUTOFF,
                overtime_end=self._calendar.overtime_end.strftime("%H:%M"),
            )
        if now < domain_calendar_overtime_start(self._calendar, now):
            raise OvertimeWindowError.from_code(
                JobErrorCode.OT_BEFORE_WINDOW,
                overtime_start=self._calendar.overtime_start.strftime("%H:%M"),
            )

        _, record = self._job_load_target(identity, JobCommand.START_OT)
        ot_sessions, _ = ledger_auto_stop_open_sessions(self._calendar, record.ot_sessions, now)
        if any(session.is_open for session in ot_sessions):
            raise InvalidJobStateError.from_code(JobErrorCode.OT_ALREADY_OPEN)

        ot_sessions.append(
            OvertimeSession(start=now, start_local=domain_format_local_timestamp(self._calendar, now))
        )
        return self._job_write_status_range(
            JobCommand.START_OT,
            record,
            JobStatus.OT.value,
            record.pause_sessions,
            ot_sessions,
        )

    def job_stop_overtime(self, identity: JobIdentity) -> JobCommandResult:
        """Stop the running overtime session of an OT or PAUSE job step.

        Args:
            identity: Job step identity.

        Returns:
            JobCommandResult: Written row outcome.

        Raises:
            JobNotFoundError: Raised when no active row matches.
            InvalidJobStateError: Raised when the match is OPEN or has no open overtime session.
            DuplicateOpenJobError: Raised when returning to OPEN would duplicate another OPEN row.
            RowStorePersistenceError: Raised when the write fails.
        """

        rows, record = self._job_load_target(identity, JobCommand.STOP_OT)
        now = self._job_now()
        ot_sessions, auto_stopped = ledger_auto_stop_open_sessions(self._calendar, record.ot_sessions, now)
        ot_sessions, stopped = ledger_close_latest_open_overtime(self._calendar, ot_sessions, now)
        if not stopped and not auto_stopped:
            raise InvalidJobStateError.from_code(JobErrorCode.OT_STOP_NO_OPEN_SESSION)

        if record.status == JobStatus.PAUSE.value:
            next_status = JobStatus.PAUSE.value
        else:
            next_status = JobStatus.OPEN.value
            _job_reject_other_open_row(rows, record.identity, row_id=record.row_id)
        return self._job_write_status_range(JobCommand.STOP_OT, record, next_status, record.pause_sessions, ot_sessions)

    def job_close(
        self,
        identity: JobIdentity,
        employee_code: str,
        quantities: tuple[str | None, str | None, str | None] = (None, None, None),
        remark: str | None = None,
    ) -> JobCommandResult:
        """Close an OPEN or OT job step and compute its process time.

        Process time is working time from start to close plus closed overtime
        minus counted pauses, floored at zero.

        Args:
            identity: Job step identity.
            employee_code: Closing employee code.
            quantities: Good, rejected and rework quantities, None for default zero.
            remark: Remark text, None to keep the stored remark.

        Returns:
            JobCommandResult: Written row outcome.

        Raises:
            JobNotFoundError: Raised when no active row matches.
            InvalidJobStateError: Raised when the latest match is paused.
            JobValidationError: Raised when the stored start time is unreadable.
            RowStorePersistenceError: Raised when the write fails.
        """

        _, record = self._job_load_target(identity, JobCommand.CLOSE)
        if record.start_time is None:
            raise JobValidationError.from_code(JobErrorCode.START_TIME_INVALID)

        now = self._job_now()
        ot_sessions, _ = ledger_auto_stop_open_sessions(self._calendar, record.ot_sessions, now)
        ot_sessions = ledger_close_all_open_overtime(self._calendar, ot_sessions, now)
        derived_fields = ledger_build_derived_fields(self._calendar, record.pause_sessions, ot_sessions)

        process_name = domain_normalize_text(record.identity.process_name)
        custom_work_end = None
        if process_name in {domain_normalize_text(name) for name in self._config.extended_shift_process_names}:
            custom_work_end = self._calendar.overtime_end
        working_ms = domain_calendar_working_time_ms(self._calendar, record.start_time, now, custom_work_end)
        process_ms = max(0, working_ms + derived_fields.total_overtime_ms - derived_fields.total_pause_ms)

        if process_name in {domain_normalize_text(name) for name in self._config.unquantified_process_names}:
            quantity_cells = (NOT_APPLICABLE_CELL, NOT_APPLICABLE_CELL, NOT_APPLICABLE_CELL)
        else:
            fg, ng, rework = quantities
            quantity_cells = (fg or "0", ng or "0", rework or "0")

        values = ledger_build_close_range_values(
            end_employee_code=employee_code,
            end_time=now,
            process_time=domain_format_duration(process_ms, placeholder="0:00:00"),
            quantities=quantity_cells,
            derived_fields=derived_fields,
            remark=record.remark if remark is None else remark,
        )
        self._job_write_range(JobCommand.CLOSE, record.row_id, COLUMN_END_EMPLOYEE_CODE, values)
        return self._job_after_write(JobCommand.CLOSE, record.row_id, JobStatus.CLOSE.value)

    def job_submit_qc_report(self, request: JobCommandRequest) -> JobCommandResult:
        """Append an already closed QC inspection row.

        Args:
            request: QC request with project, part, employee and quantities.

        Returns:
            JobCommandResult: Appended row outcome.

        Raises:
            RowStorePersistenceError: Raised when the append fails.
        """

        rows = self._row_store.db_row_read_all()
        now = self._job_now()
        values = ledger_build_new_row_values(
            NewJobRowRequest(
                log_no=_job_next_log_no(rows),
                identity=JobIdentity(
                    project_no=request.identity.project_no,
                    part_name=request.identity.part_name,
                    process_name=QC_PROCESS_NAME,
                    process_no=NOT_APPLICABLE_CELL,
                    step_no=NOT_APPLICABLE_CELL,
                    machine_no=NOT_APPLICABLE_CELL,
                ),
                customer_name=request.customer_name,
                drawing_no=request.drawing_no,
                quantity_ordered=request.quantity_ordered,
                start_employee_code=request.employee_code,
                start_time=now,
                status=JobStatus.CLOSE.value,
                end_employee_code=request.employee_code,
                end_time=now,
                process_time=NOT_APPLICABLE_CELL,
                fg=request.fg or "0",
                ng=request.ng or "0",
                rework=request.rework or "0",
                remark=request.remark or "",
            ),
            ledger_build_derived_fields(self._calendar, [], []),
        )
        row_id = self._job_append(JobCommand.QC_REPORT, values)
        return self._job_after_write(JobCommand.QC_REPORT, row_id, JobStatus.CLOSE.value)

    def job_list_open_steps(self, project_no: str, part_name: str) -> list[OpenJobStep]:
        """List active steps of one job, failing soft on read errors.

        Args:
            project_no: Project number.
            part_name: Part name.

        Returns:
            list[OpenJobStep]: OPEN, PAUSE and OT steps in table order, empty on read errors.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        lookup = JobIdentity(project_no=project_no, part_name=part_name, process_name="", process_no="", step_no="", machine_no="")
        project_key, part_key = lookup.identity_key()[:2]
        try:
            rows = self._row_store.db_row_read_all()
        except RowStorePersistenceError:
            logger.warning("open job query degraded to empty result", exc_info=True)
            return []

        steps: list[OpenJobStep] = []
        for row in rows:
            status = ledger_row_status(row)
            if status not in ACTIVE_JOB_STATUSES:
                continue
            row_identity = ledger_row_identity(row)
            if row_identity.identity_key()[:2] != (project_key, part_key):
                continue
            steps.append(
                OpenJobStep(
                    process_name=row_identity.process_name,
                    process_no=row_identity.process_no,
                    step_no=row_identity.step_no,
                    machine_no=row_identity.machine_no,
                    status=status,
                )
            )
        return steps

    def _job_now(self) -> datetime:
        if self._clock is None:
            return datetime.now(tz=self._calendar.tzinfo)
        return domain_calendar_to_local(self._calendar, self._clock())

    def _job_load_target(self, identity: JobIdentity, command: JobCommand) -> tuple[list[StoredRow], JobRecord]:
        rows = self._row_store.db_row_read_all()
        row = job_transition_select_row(rows, identity, command)
        return rows, ledger_decode_job_record(self._calendar, row)

    def _job_write_status_range(
        self,
        command: JobCommand,
        record: JobRecord,
        next_status: str,
        pause_sessions: list[PauseSession],
        ot_sessions: list[OvertimeSession],
    ) -> JobCommandResult:
        derived_fields = ledger_build_derived_fields(self._calendar, pause_sessions, ot_sessions)
        values = ledger_build_status_range_values(next_status, derived_fields)
        self._job_write_range(command, record.row_id, COLUMN_STATUS, values)
        return self._job_after_write(command, record.row_id, next_status)

    def _job_write_range(self, command: JobCommand, row_id: int, column_start: int, values: Sequence[str]) -> None:
        try:
            self._row_store.db_row_write_range(row_id, column_start, values)
        except RowStorePersistenceError:
            logger.exception("%s write failed for row %s", command.value, row_id)
            raise

    def _job_append(self, command: JobCommand, values: Sequence[str]) -> int:
        try:
            return self._row_store.db_row_append(values)
        except RowStorePersistenceError:
            logger.exception("%s append failed", command.value)
            raise

    def _job_after_write(self, command: JobCommand, row_id: int, status: str) -> JobCommandResult:
        logger.info("%s accepted for row %s, status %s", command.value, row_id, status)
        job_apply_status_style(
            self._row_store,
            row_id,
            attempts=self._config.status_read_attempts,
            backoff_seconds=self._config.status_read_backoff_seconds,
            sleep=self._sleep,
        )
        if self._invalidation_listener is not None:
            self._invalidation_listener()
        return JobCommandResult(command=command, row_id=row_id, status=status)


def _job_next_log_no(rows: list[StoredRow]) -> int:
    log_numbers = [log_no for log_no in (ledger_row_log_no(row) for row in rows) if log_no is not None]
    return max(log_numbers, default=0) + 1


def _job_reject_other_open_row(rows: list[StoredRow], identity: JobIdentity, row_id: int | None = None) -> None:
    """Reject a write that would leave two OPEN rows with one identity key.

    Args:
        rows: Fresh table snapshot.
        identity: Identity about to be written as OPEN.
        row_id: Row being written, excluded from the scan; None for appends.

    Raises:
        DuplicateOpenJobError: Raised when another OPEN row shares the identity key.
    """

    identity_key = identity.identity_key()
    for row in reversed(rows):
        if row.row_id == row_id or ledger_row_status(row) != JobStatus.OPEN.value:
            continue
        open_identity = ledger_row_identity(row)
        if open_identity.identity_key() == identity_key:
            raise DuplicateOpenJobError.from_code(
                JobErrorCode.DUPLICATE_OPEN_JOB,
                project_no=open_identity.project_no,
                part_name=open_identity.part_name,
                process_name=open_identity.process_name,
                process_no=open_identity.process_no,
                step_no=open_identity.step_no,
                machine_no=open_identity.machine_no,
            )


__all__ = ["JobCommandResult", "JobLifecycleConfig", "JobLifecycleService", "OpenJobStep"]
