"""Conversion between positional job log rows and typed job records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Final

from cnclog.db.interfaces import JOB_LOG_COLUMN_COUNT, JOB_LOG_COLUMNS, StoredRow
from cnclog.domain import (
    BusinessCalendar,
    JobIdentity,
    JobRecord,
    JobStatus,
    domain_calendar_to_local,
)

from .derived_fields import LedgerDerivedFields
from .session_codec import ledger_decode_overtime_sessions, ledger_decode_pause_sessions

JOB_LOG_COLUMN_INDEX: Final[dict[str, int]] = {column_name: index for index, column_name in enumerate(JOB_LOG_COLUMNS)}

COLUMN_LOG_NO: Final[int] = JOB_LOG_COLUMN_INDEX["log_no"]
COLUMN_PROJECT_NO: Final[int] = JOB_LOG_COLUMN_INDEX["project_no"]
COLUMN_PART_NAME: Final[int] = JOB_LOG_COLUMN_INDEX["part_name"]
COLUMN_PROCESS_NAME: Final[int] = JOB_LOG_COLUMN_INDEX["process_name"]
COLUMN_MACHINE_NO: Final[int] = JOB_LOG_COLUMN_INDEX["machine_no"]
COLUMN_START_TIME: Final[int] = JOB_LOG_COLUMN_INDEX["start_time"]
COLUMN_END_EMPLOYEE_CODE: Final[int] = JOB_LOG_COLUMN_INDEX["end_employee_code"]
COLUMN_STATUS: Final[int] = JOB_LOG_COLUMN_INDEX["status"]
COLUMN_PAUSE_SESSIONS: Final[int] = JOB_LOG_COLUMN_INDEX["pause_sessions"]
COLUMN_OT_SESSIONS: Final[int] = JOB_LOG_COLUMN_INDEX["ot_sessions"]
COLUMN_OT_DURATION: Final[int] = JOB_LOG_COLUMN_INDEX["ot_duration"]
COLUMN_REMARK: Final[int] = JOB_LOG_COLUMN_INDEX["remark"]


@dataclass(frozen=True)
class NewJobRowRequest:
    """Cell values of one appended job log row.

    Attributes:
        log_no: Assigned log number.
        identity: Raw identity fields.
        customer_name: Customer name.
        drawing_no: Drawing number.
        quantity_ordered: Ordered quantity text.
        start_employee_code: Opening employee code.
        start_time: Creation timestamp.
        status: Initial status.
        end_employee_code: Closing employee code for rows appended closed.
        end_time: Close timestamp for rows appended closed.
        process_time: Rendered process time for rows appended closed.
        fg: Good quantity text.
        ng: Rejected quantity text.
        rework: Rework quantity text.
        remark: Free-text remark.
    """

    log_no: int
    identity: JobIdentity
    customer_name: str
    drawing_no: str
    quantity_ordered: str
    start_employee_code: str
    start_time: datetime
    status: str = JobStatus.OPEN.value
    end_employee_code: str = ""
    end_time: datetime | None = None
    process_time: str = ""
    fg: str = ""
    ng: str = ""
    rework: str = ""
    remark: str = ""


def ledger_row_status(row: StoredRow) -> str:
    """Return the trimmed, upper-cased status cell of one row."""

    return row.row_value(COLUMN_STATUS).strip().upper()


def ledger_row_identity(row: StoredRow) -> JobIdentity:
    """Return the raw identity fields of one row."""

    return JobIdentity(
        project_no=row.row_value(JOB_LOG_COLUMN_INDEX["project_no"]),
        part_name=row.row_value(JOB_LOG_COLUMN_INDEX["part_name"]),
        process_name=row.row_value(JOB_LOG_COLUMN_INDEX["process_name"]),
        process_no=row.row_value(JOB_LOG_COLUMN_INDEX["process_no"]),
        step_no=row.row_value(JOB_LOG_COLUMN_INDEX["step_no"]),
        machine_no=row.row_value(JOB_LOG_COLUMN_INDEX["machine_no"]),
    )


def ledger_row_log_no(row: StoredRow) -> int | None:
    """Return the integer log number of one row, None when not numeric."""

    try:
        return int(row.row_value(COLUMN_LOG_NO).strip())
    except ValueError:
        return None


def ledger_parse_timestamp(calendar: BusinessCalendar, value: str) -> datetime | None:
    """Parse one stored ISO-8601 timestamp cell.

    Args:
        calendar: Business calendar used for naive values.
        value: Cell text.

    Returns:
        datetime | None: Offset-aware timestamp, None for blank or unparsable cells.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if not value.strip():
        return None
    try:
        return domain_calendar_to_local(calendar, datetime.fromisoformat(value.strip()))
    except ValueError:
        return None


def ledger_format_timestamp(moment: datetime | None) -> str:
    return "" if moment is None else moment.isoformat()


def ledger_decode_job_record(calendar: BusinessCalendar, row: StoredRow) -> JobRecord:
    """Decode one stored row into a typed job record.

    Args:
        calendar: Business calendar used for naive timestamps.
        row: Stored row.

    Returns:
        JobRecord: Decoded record with both session logs.

    Raises:
        CorruptSessionLogError: Raised when a session column cannot be decoded.
    """

    return JobRecord(
        row_id=row.row_id,
        log_no=ledger_row_log_no(row),
        identity=ledger_row_identity(row),
        customer_name=row.row_value(JOB_LOG_COLUMN_INDEX["customer_name"]),
        drawing_no=row.row_value(JOB_LOG_COLUMN_INDEX["drawing_no"]),
        quantity_ordered=row.row_value(JOB_LOG_COLUMN_INDEX["quantity_ordered"]),
        start_employee_code=row.row_value(JOB_LOG_COLUMN_INDEX["start_employee_code"]),
        start_time=ledger_parse_timestamp(calendar, row.row_value(COLUMN_START_TIME)),
        end_employee_code=row.row_value(COLUMN_END_EMPLOYEE_CODE),
        end_time=ledger_parse_timestamp(calendar, row.row_value(JOB_LOG_COLUMN_INDEX["end_time"])),
        status=ledger_row_status(row),
        pause_sessions=ledger_decode_pause_sessions(row.row_value(COLUMN_PAUSE_SESSIONS)),
        ot_sessions=ledger_decode_overtime_sessions(row.row_value(COLUMN_OT_SESSIONS)),
        remark=row.row_value(COLUMN_REMARK),
    )


def ledger_build_status_range_values(status: str, derived_fields: LedgerDerivedFields) -> list[str]:
    """Return cell texts for columns `status` through `ot_duration`."""

    return [status, *derived_fields.derived_column_values()]


def ledger_build_close_range_values(
    end_employee_code: str,
    end_time: datetime,
    process_time: str,
    quantities: tuple[str, str, str],
    derived_fields: LedgerDerivedFields,
    remark: str,
) -> list[str]:
    """Return cell texts for columns `end_employee_code` through `remark`.

    Args:
        end_employee_code: Closing employee code.
        end_time: Close timestamp.
        process_time: Rendered process time.
        quantities: Good, rejected and rework quantity texts.
        derived_fields: Recomputed derived columns.
        remark: Remark text.

    Returns:
        list[str]: Contiguous cell values starting at `end_employee_code`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    fg, ng, rework = quantities
    return [
        end_employee_code,
        ledger_format_timestamp(end_time),
        process_time,
        fg,
        ng,
        rework,
        *ledger_build_status_range_values(JobStatus.CLOSE.value, derived_fields),
        remark,
    ]


def ledger_build_new_row_values(request: NewJobRowRequest, derived_fields: LedgerDerivedFields) -> list[str]:
    """Return full-width cell texts of one appended row.

    Args:
        request: New row values.
        derived_fields: Derived columns of the initial session lists.

    Returns:
        list[str]: Cell values in column order.

    Raises:
        RuntimeError: Raised when the assembled row does not match the column layout.
    """

    identity = request.identity
    values = [
        str(request.log_no),
        identity.project_no,
        request.customer_name,
        identity.part_name,
        request.drawing_no,
        request.quantity_ordered,
        identity.process_name,
        identity.process_no,
        identity.step_no,
        identity.machine_no,
        request.start_employee_code,
        ledger_format_timestamp(request.start_time),
        request.end_employee_code,
        ledger_format_timestamp(request.end_time),
        request.process_time,
        request.fg,
        request.ng,
        request.rework,
        *ledger_build_status_range_values(request.status, derived_fields),
        request.remark,
    ]
    if len(values) != JOB_LOG_COLUMN_COUNT:
        raise RuntimeError("new job log row does not match column layout")
    return values


__all__ = [
    "COLUMN_END_EMPLOYEE_CODE",
    "COLUMN_LOG_NO",
    "COLUMN_MACHINE_NO",
    "COLUMN_OT_DURATION",
    "COLUMN_OT_SESSIONS",
    "COLUMN_PART_NAME",
    "COLUMN_PAUSE_SESSIONS",
    "COLUMN_PROCESS_NAME",
    "COLUMN_PROJECT_NO",
    "COLUMN_REMARK",
    "COLUMN_START_TIME",
    "COLUMN_STATUS",
    "JOB_LOG_COLUMN_INDEX",
    "NewJobRowRequest",
    "ledger_build_close_range_values",
    "ledger_build_new_row_values",
    "ledger_build_status_range_values",
    "ledger_decode_job_record",
    "ledger_format_timestamp",
    "ledger_parse_timestamp",
    "ledger_row_identity",
    "ledger_row_log_no",
    "ledger_row_status",
]
