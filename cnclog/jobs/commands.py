"""Parsing of terminal command payloads into typed job command requests."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from cnclog.domain import JobIdentity, JobStatus, PauseType

from .error_codes import JobErrorCode
from .errors import JobValidationError
from .transitions import JobCommand

_JOB_ACTION_COMMANDS: Final[dict[str, JobCommand]] = {
    JobCommand.PAUSE.value: JobCommand.PAUSE,
    JobCommand.CONTINUE.value: JobCommand.CONTINUE,
    JobCommand.START_OT.value: JobCommand.START_OT,
    JobCommand.STOP_OT.value: JobCommand.STOP_OT,
    JobCommand.CLOSE.value: JobCommand.CLOSE,
    JobCommand.QC_REPORT.value: JobCommand.QC_REPORT,
}

_JOB_STATUS_COMMANDS: Final[dict[str, JobCommand]] = {
    JobStatus.OPEN.value: JobCommand.CREATE,
    JobStatus.PAUSE.value: JobCommand.PAUSE,
    JobStatus.CLOSE.value: JobCommand.CLOSE,
}

_JOB_REQUIRED_FIELDS: Final[dict[JobCommand, tuple[str, ...]]] = {
    JobCommand.CREATE: ("projectNo", "partName", "processName", "machineNo", "employeeCode"),
    JobCommand.QC_REPORT: ("projectNo", "partName", "employeeCode"),
}
_JOB_DEFAULT_REQUIRED_FIELDS: Final[tuple[str, ...]] = ("projectNo", "processName", "machineNo")


@dataclass(frozen=True)
class JobCommandRequest:
    """Typed job command decoded from one terminal payload.

    Attributes:
        command: Resolved command.
        identity: Raw identity fields.
        employee_code: Acting employee code.
        pause_type: `PAUSE` or `DOWNTIME` for pause commands.
        pause_reason: Optional pause reason.
        fg: Good quantity text, None when not given.
        ng: Rejected quantity text, None when not given.
        rework: Rework quantity text, None when not given.
        remark: Remark text, None when not given.
        customer_name: Customer name for created rows.
        drawing_no: Drawing number for created rows.
        quantity_ordered: Ordered quantity for created rows.
    """

    command: JobCommand
    identity: JobIdentity
    employee_code: str = ""
    pause_type: str = PauseType.PAUSE.value
    pause_reason: str = ""
    fg: str | None = None
    ng: str | None = None
    rework: str | None = None
    remark: str | None = None
    customer_name: str = ""
    drawing_no: str = ""
    quantity_ordered: str = ""


def job_parse_command_payload(payload: Mapping[str, Any]) -> JobCommandRequest:
    """Decode one command payload.

    `action` selects the command when present. Otherwise `status` does, and a
    payload with neither creates a job.

    Args:
        payload: Decoded JSON object.

    Returns:
        JobCommandRequest: Typed command request.

    Raises:
        JobValidationError: Raised for unknown commands, missing fields, invalid quantities or pause types.
    """

    command = _job_resolve_command(payload)
    for field_name in _JOB_REQUIRED_FIELDS.get(command, _JOB_DEFAULT_REQUIRED_FIELDS):
        if not _job_payload_text(payload, field_name):
            raise JobValidationError.from_code(JobErrorCode.MISSING_FIELD, field_name=field_name)

    pause_type = _job_payload_text(payload, "pauseType").upper() or PauseType.PAUSE.value
    if pause_type not in {item.value for item in PauseType}:
        raise JobValidationError.from_code(JobErrorCode.INVALID_PAUSE_TYPE)

    remark = payload.get("remark")
    return JobCommandRequest(
        command=command,
        identity=JobIdentity(
            project_no=_job_payload_text(payload, "projectNo"),
            part_name=_job_payload_text(payload, "partName"),
            process_name=_job_payload_text(payload, "processName"),
            process_no=_job_payload_text(payload, "processNo"),
            step_no=_job_payload_text(payload, "stepNo"),
            machine_no=_job_payload_text(payload, "machineNo"),
        ),
        employee_code=_job_payload_text(payload, "employeeCode"),
        pause_type=pause_type,
        pause_reason=_job_payload_text(payload, "pauseReason"),
        fg=_job_payload_quantity(payload, "fg"),
        ng=_job_payload_quantity(payload, "ng"),
        rework=_job_payload_quantity(payload, "rework"),
        remark=None if remark is None else _job_payload_text(payload, "remark"),
        customer_name=_job_payload_text(payload, "customerName"),
        drawing_no=_job_payload_text(payload, "drawingNo"),
        quantity_ordered=_job_payload_text(payload, "quantityOrdered"),
    )


def _job_resolve_command(payload: Mapping[str, Any]) -> JobCommand:
    action = _job_payload_text(payload, "action").upper()
    if action:
        command = _JOB_ACTION_COMMANDS.get(action)
        if command is None:
            raise JobValidationError.from_code(JobErrorCode.INVALID_COMMAND)
        return command

    status = _job_payload_text(payload, "status").upper()
    if not status:
        return JobCommand.CREATE
    command = _JOB_STATUS_COMMANDS.get(status)
    if command is None:
        raise JobValidationError.from_code(JobErrorCode.INVALID_COMMAND)
    return command


def _job_payload_text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _job_payload_quantity(payload: Mapping[str, Any], key: str) -> str | None:
    text_value = _job_payload_text(payload, key)
    if not text_value:
        return None
    try:
        quantity = int(text_value)
    except ValueError as error:
        raise JobValidationError.from_code(JobErrorCode.INVALID_QUANTITY) from error
    if quantity < 0:
        raise JobValidationError.from_code(JobErrorCode.INVALID_QUANTITY)
    return str(quantity)


__all__ = ["JobCommandRequest", "job_parse_command_payload"]
