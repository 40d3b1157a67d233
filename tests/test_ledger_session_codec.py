"""Tests for the versioned session log documents and job log row codec."""

from __future__ import annotations

import json
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from cnclog.db import JOB_LOG_COLUMN_COUNT, StoredRow
from cnclog.domain import BusinessCalendar, JobIdentity, OvertimeSession, PauseSession
from cnclog.ledger import (
    CorruptSessionLogError,
    NewJobRowRequest,
    ledger_build_derived_fields,
    ledger_build_new_row_values,
    ledger_decode_job_record,
    ledger_decode_overtime_sessions,
    ledger_decode_pause_sessions,
    ledger_encode_overtime_sessions,
    ledger_encode_pause_sessions,
    ledger_parse_timestamp,
)
from cnclog.ledger.row_codec import COLUMN_PAUSE_SESSIONS, COLUMN_START_TIME, COLUMN_STATUS

_BANGKOK = ZoneInfo("Asia/Bangkok")
_CALENDAR = BusinessCalendar()


def test_session_documents_survive_encode_and_decode() -> None:
    """Decode exactly the sessions that were encoded, open and closed alike.

    Returns:
        None: Assertions validate document fidelity.

    Raises:
        AssertionError: Raised when a field is lost in the document.
    """

    pause_sessions = [
        PauseSession(
            pause_type="DOWNTIME",
            reason="coolant leak",
            pause_at=datetime(2026, 10, 19, 9, 0, tzinfo=_BANGKOK),
            pause_at_local="10/19/2026 9:00:00",
            resume_at=datetime(2026, 10, 19, 9, 45, tzinfo=_BANGKOK),
            resume_at_local="10/19/2026 9:45:00",
        ),
        PauseSession(
            pause_type="PAUSE",
            reason="",
            pause_at=datetime(2026, 10, 19, 18, 0, tzinfo=_BANGKOK),
            pause_at_local="10/19/2026 18:00:00",
            was_in_ot=True,
        ),
    ]
    overtime_sessions = [
        OvertimeSession(
            start=datetime(2026, 10, 19, 17, 30, tzinfo=_BANGKOK),
            start_local="10/19/2026 17:30:00",
            end=datetime(2026, 10, 19, 22, 30, tzinfo=_BANGKOK),
            end_local="10/19/2026 22:30:00",
            auto_stopped=True,
            note="OT stopped automatically at 22:30",
        )
    ]

    pause_document = ledger_encode_pause_sessions(pause_sessions)
    overtime_document = ledger_encode_overtime_sessions(overtime_sessions)

    assert json.loads(pause_document)["kind"] == "pause"
    assert "coolant leak" in pause_document
    assert ledger_decode_pause_sessions(pause_document) == pause_sessions
    assert ledger_decode_overtime_sessions(overtime_document) == overtime_sessions


def test_blank_session_cells_decode_to_empty_logs() -> None:
    """Treat blank and whitespace-only cells as empty logs."""

    assert ledger_decode_pause_sessions("") == []
    assert ledger_decode_pause_sessions(None) == []
    assert ledger_decode_overtime_sessions("   ") == []


@pytest.mark.parametrize(
    "raw_value",
    [
        "not json",
        "[]",
        '{"version": 2, "kind": "pause", "sessions": []}',
        '{"version": 1, "kind": "overtime", "sessions": []}',
        '{"version": 1, "kind": "pause", "sessions": [{"kind": "pause", "type": "LUNCH", "pause_at": "2026-10-19T09:00:00+07:00"}]}',
        '{"version": 1, "kind": "pause", "sessions": [{"kind": "pause", "type": "PAUSE", "pause_at": "2026-10-19T09:00:00"}]}',
        '{"version": 1, "kind": "pause", "sessions": [{"kind": "pause", "type": "PAUSE"}]}',
    ],
)
def test_unreadable_pause_documents_raise_corruption(raw_value: str) -> None:
    """Reject unreadable documents instead of silently emptying the log.

    Args:
        raw_value: Corrupt cell text.

    Returns:
        None: Assertions validate corruption reporting.

    Raises:
        AssertionError: Raised when a corrupt document decodes.
    """

    with pytest.raises(CorruptSessionLogError) as error_info:
        ledger_decode_pause_sessions(raw_value)

    assert error_info.value.kind == "pause"
    assert error_info.value.error_code == "CORRUPT_SESSION_LOG"


def test_new_row_values_follow_column_layout() -> None:
    """Build a full-width OPEN row that decodes back to the same job.

    Returns:
        None: Assertions validate column placement and decoding.

    Raises:
        AssertionError: Raised when the row layout deviates.
    """

    start_time = datetime(2026, 10, 19, 8, 30, tzinfo=_BANGKOK)
    identity = JobIdentity("P-100", "Bracket", "Milling", "10", "1", "M-01")
    values = ledger_build_new_row_values(
        NewJobRowRequest(
            log_no=7,
            identity=identity,
            customer_name="ACME",
            drawing_no="DWG-1",
            quantity_ordered="50",
            start_employee_code="E01",
            start_time=start_time,
        ),
        ledger_build_derived_fields(_CALENDAR, [], []),
    )

    assert len(values) == JOB_LOG_COLUMN_COUNT
    assert values[0] == "7"
    assert values[COLUMN_STATUS] == "OPEN"
    assert values[COLUMN_START_TIME] == "2026-10-19T08:30:00+07:00"

    record = ledger_decode_job_record(_CALENDAR, StoredRow(row_id=3, values=tuple(values)))
    assert record.row_id == 3
    assert record.log_no == 7
    assert record.identity == identity
    assert record.start_time == start_time
    assert record.end_time is None
    assert record.pause_sessions == []
    assert record.ot_sessions == []


def test_decode_job_record_reports_corrupt_session_column() -> None:
    """Surface a corrupt pause column while decoding a row."""

    values = [""] * JOB_LOG_COLUMN_COUNT
    values[COLUMN_STATUS] = "PAUSE"
    values[COLUMN_PAUSE_SESSIONS] = "{broken"

    with pytest.raises(CorruptSessionLogError):
        ledger_decode_job_record(_CALENDAR, StoredRow(row_id=1, values=tuple(values)))


def test_parse_timestamp_handles_blank_naive_and_garbage_cells() -> None:
    """Parse stored timestamps leniently for display and strictly for offsets."""

    assert ledger_parse_timestamp(_CALENDAR, "") is None
    assert ledger_parse_timestamp(_CALENDAR, "yesterday") is None
    assert ledger_parse_timestamp(_CALENDAR, "2026-10-19T08:30:00") == datetime(2026, 10, 19, 8, 30, tzinfo=_BANGKOK)
