"""Tests for the central transition table and terminal payload parsing."""

from __future__ import annotations

import pytest

from cnclog.db import JOB_LOG_COLUMN_COUNT, StoredRow
from cnclog.domain import JobIdentity
from cnclog.jobs import (
    InvalidJobStateError,
    JobCommand,
    JobNotFoundError,
    JobValidationError,
    job_parse_command_payload,
    job_transition_select_row,
)
from cnclog.jobs.transitions import job_transition_for
from cnclog.ledger import JOB_LOG_COLUMN_INDEX

_IDENTITY = JobIdentity("P-100", "Bracket", "Milling", "10", "1", "M-01")


def _stored_row(row_id: int, status: str, machine_no: str = "M-01") -> StoredRow:
    values = [""] * JOB_LOG_COLUMN_COUNT
    values[JOB_LOG_COLUMN_INDEX["project_no"]] = "P-100"
    values[JOB_LOG_COLUMN_INDEX["part_name"]] = "Bracket"
    values[JOB_LOG_COLUMN_INDEX["process_name"]] = "Milling"
    values[JOB_LOG_COLUMN_INDEX["process_no"]] = "10"
    values[JOB_LOG_COLUMN_INDEX["step_no"]] = "1"
    values[JOB_LOG_COLUMN_INDEX["machine_no"]] = machine_no
    values[JOB_LOG_COLUMN_INDEX["status"]] = status
    return StoredRow(row_id=row_id, values=tuple(values))


def test_transition_selects_latest_match_in_source_state() -> None:
    """Pick the most recent identity match in an accepted state.

    Returns:
        None: Assertions validate last-to-first selection.

    Raises:
        AssertionError: Raised when an older or foreign row is selected.
    """

    rows = [
        _stored_row(1, "CLOSE"),
        _stored_row(2, "OT"),
        _stored_row(3, "OPEN", machine_no="M-02"),
        _stored_row(4, " open "),
    ]

    assert job_transition_select_row(rows, _IDENTITY, JobCommand.PAUSE).row_id == 4
    assert job_transition_select_row(rows[:3], _IDENTITY, JobCommand.PAUSE).row_id == 2


def test_transition_close_is_blocked_by_paused_match() -> None:
    """Stop the close scan at a paused match with the continue-first rejection."""

    rows = [_stored_row(1, "OPEN"), _stored_row(2, "PAUSE")]

    with pytest.raises(InvalidJobStateError) as error_info:
        job_transition_select_row(rows, _IDENTITY, JobCommand.CLOSE)

    assert error_info.value.error_code == "CLOSE_WHILE_PAUSED"


def test_transition_distinguishes_wrong_state_from_missing_row() -> None:
    """Report wrong-state matches separately from identities with no active row.

    Returns:
        None: Assertions validate rejection types and codes.

    Raises:
        AssertionError: Raised when rejection kinds are conflated.
    """

    with pytest.raises(InvalidJobStateError) as wrong_state_info:
        job_transition_select_row([_stored_row(1, "OPEN")], _IDENTITY, JobCommand.CONTINUE)
    with pytest.raises(JobNotFoundError) as closed_only_info:
        job_transition_select_row([_stored_row(1, "CLOSE")], _IDENTITY, JobCommand.STOP_OT)

    assert wrong_state_info.value.error_code == "CONTINUE_NOT_FOUND"
    assert closed_only_info.value.error_code == "OT_STOP_NOT_FOUND"


def test_transition_table_has_no_entry_for_appending_commands() -> None:
    """Reject table lookups for commands that append rows."""

    with pytest.raises(ValueError):
        job_transition_for(JobCommand.CREATE)
    assert job_transition_for(JobCommand.STOP_OT).source_statuses == frozenset({"OT", "PAUSE"})


@pytest.mark.parametrize(
    ("payload_command", "expected_command"),
    [
        ({}, JobCommand.CREATE),
        ({"status": "OPEN"}, JobCommand.CREATE),
        ({"status": "pause"}, JobCommand.PAUSE),
        ({"status": "CLOSE"}, JobCommand.CLOSE),
        ({"action": "start_ot"}, JobCommand.START_OT),
        ({"action": "STOP_OT", "status": "OPEN"}, JobCommand.STOP_OT),
        ({"action": "CONTINUE"}, JobCommand.CONTINUE),
    ],
)
def test_command_payload_resolves_action_before_status(
    payload_command: dict[str, str],
    expected_command: JobCommand,
) -> None:
    """Resolve `action` first, then `status`, then default to create.

    Args:
        payload_command: Command selector fields.
        expected_command: Expected resolved command.

    Returns:
        None: Assertions validate command resolution.

    Raises:
        AssertionError: Raised when resolution order deviates.
    """

    payload = {
        "projectNo": "P-100",
        "partName": "Bracket",
        "processName": "Milling",
        "machineNo": "M-01",
        "employeeCode": "E01",
        **payload_command,
    }

    assert job_parse_command_payload(payload).command is expected_command


def test_command_payload_decodes_fields() -> None:
    """Decode identity, pause and close fields into the typed request."""

    request = job_parse_command_payload(
        {
            "action": "PAUSE",
            "projectNo": " P-100 ",
            "partName": "Bracket",
            "processName": "Milling",
            "processNo": 10,
            "stepNo": 1.0,
            "machineNo": "M-01",
            "pauseType": "downtime",
            "pauseReason": " spindle alarm ",
            "fg": "4",
        }
    )

    assert request.identity == JobIdentity("P-100", "Bracket", "Milling", "10", "1", "M-01")
    assert request.pause_type == "DOWNTIME"
    assert request.pause_reason == "spindle alarm"
    assert request.fg == "4"
    assert request.ng is None
    assert request.remark is None


@pytest.mark.parametrize(
    ("payload", "expected_code"),
    [
        ({"action": "DANCE"}, "INVALID_COMMAND"),
        ({"status": "OT"}, "INVALID_COMMAND"),
        ({"action": "CLOSE", "machineNo": ""}, "MISSING_FIELD"),
        ({"action": "CLOSE", "fg": "-1"}, "INVALID_QUANTITY"),
        ({"action": "CLOSE", "ng": "many"}, "INVALID_QUANTITY"),
        ({"action": "PAUSE", "pauseType": "LUNCH"}, "INVALID_PAUSE_TYPE"),
    ],
)
def test_command_payload_rejects_invalid_requests(payload: dict[str, str], expected_code: str) -> None:
    """Reject malformed payloads before any row store access.

    Args:
        payload: Payload overrides.
        expected_code: Expected rejection code.

    Returns:
        None: Assertions validate rejection codes.

    Raises:
        AssertionError: Raised when malformed payloads pass.
    """

    base_payload = {"projectNo": "P-100", "partName": "Bracket", "processName": "Milling", "machineNo": "M-01"}

    with pytest.raises(JobValidationError) as error_info:
        job_parse_command_payload({**base_payload, **payload})

    assert error_info.value.error_code == expected_code


def test_command_payload_names_missing_field() -> None:
    """Name the missing field in the localized message."""

    with pytest.raises(JobValidationError) as error_info:
        job_parse_command_payload({"projectNo": "P-100", "partName": "Bracket", "processName": "Milling", "machineNo": "M-01"})

    assert str(error_info.value) == "กรุณากรอกข้อมูลให้ครบถ้วน (employeeCode)"


def test_qc_report_requires_only_job_and_employee() -> None:
    """Accept a QC report without process or machine fields."""

    request = job_parse_command_payload({"action": "QC_REPORT", "projectNo": "P-100", "partName": "Bracket", "employeeCode": "Q01"})

    assert request.command is JobCommand.QC_REPORT
    assert request.identity.machine_no == ""
