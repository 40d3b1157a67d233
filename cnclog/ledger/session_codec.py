"""Versioned JSON codec for pause and overtime session logs.

Each session column holds one document of the form
`{"version": 1, "kind": "pause" | "overtime", "sessions": [...]}`. A blank cell
is an empty log. Any other unreadable content is reported as corruption so a
mutation never overwrites it with a silently emptied log.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Final

from cnclog.domain import OvertimeSession, PauseSession, PauseType

SESSION_DOCUMENT_VERSION: Final[int] = 1
SESSION_KIND_PAUSE: Final[str] = "pause"
SESSION_KIND_OVERTIME: Final[str] = "overtime"


class CorruptSessionLogError(ValueError):
    """Raised when a persisted session column cannot be decoded."""

    error_code = "CORRUPT_SESSION_LOG"

    def __init__(self, message: str, kind: str):
        """Initialize corruption error.

        Args:
            message: Human-readable decode failure.
            kind: Session log kind that failed to decode.
        """

        super().__init__(message)
        self.kind = kind


def ledger_encode_pause_sessions(sessions: list[PauseSession]) -> str:
    """Encode pause sessions as a versioned JSON document.

    Args:
        sessions: Pause sessions in chronological order.

    Returns:
        str: JSON document text.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return _ledger_dump_document(
        SESSION_KIND_PAUSE,
        [
            {
                "kind": SESSION_KIND_PAUSE,
                "type": session.pause_type,
                "reason": session.reason,
                "pause_at": session.pause_at.isoformat(),
                "pause_at_local": session.pause_at_local,
                "resume_at": session.resume_at.isoformat() if session.resume_at is not None else None,
                "resume_at_local": session.resume_at_local,
                "was_in_ot": session.was_in_ot,
            }
            for session in sessions
        ],
    )


def ledger_encode_overtime_sessions(sessions: list[OvertimeSession]) -> str:
    """Encode overtime sessions as a versioned JSON document.

    Args:
        sessions: Overtime sessions in chronological order.

    Returns:
        str: JSON document text.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return _ledger_dump_document(
        SESSION_KIND_OVERTIME,
        [
            {
                "kind": SESSION_KIND_OVERTIME,
                "start": session.start.isoformat(),
                "start_local": session.start_local,
                "end": session.end.isoformat() if session.end is not None else None,
                "end_local": session.end_local,
                "auto_stopped": session.auto_stopped,
                "note": session.note,
            }
            for session in sessions
        ],
    )


def ledger_decode_pause_sessions(raw_value: str | None) -> list[PauseSession]:
    """Decode one pause session column.

    Args:
        raw_value: Persisted cell text.

    Returns:
        list[PauseSession]: Decoded sessions, empty for a blank cell.

    Raises:
        CorruptSessionLogError: Raised when the cell holds anything but a valid document.
    """

    entries = _ledger_load_document(raw_value, SESSION_KIND_PAUSE)
    sessions: list[PauseSession] = []
    for position, entry in enumerate(entries):
        pause_type = _ledger_required_text(entry, "type", SESSION_KIND_PAUSE, position)
        if pause_type not in {item.value for item in PauseType}:
            raise CorruptSessionLogError(f"pause session {position} has unknown type {pause_type!r}", SESSION_KIND_PAUSE)
        sessions.append(
            PauseSession(
                pause_type=pause_type,
                reason=_ledger_optional_text(entry, "reason", SESSION_KIND_PAUSE, position) or "",
                pause_at=_ledger_required_timestamp(entry, "pause_at", SESSION_KIND_PAUSE, position),
                pause_at_local=_ledger_optional_text(entry, "pause_at_local", SESSION_KIND_PAUSE, position) or "",
                resume_at=_ledger_optional_timestamp(entry, "resume_at", SESSION_KIND_PAUSE, position),
                resume_at_local=_ledger_optional_text(entry, "resume_at_local", SESSION_KIND_PAUSE, position),
                was_in_ot=bool(entry.get("was_in_ot", False)),
            )
        )
    return sessions


def ledger_decode_overtime_sessions(raw_value: str | None) -> list[OvertimeSession]:
    """Decode one overtime session column.

    Args:
        raw_value: Persisted cell text.

    Returns:
        list[OvertimeSession]: Decoded sessions, empty for a blank cell.

    Raises:
        CorruptSessionLogError: Raised when the cell holds anything but a valid document.
    """

    entries = _ledger_load_document(raw_value, SESSION_KIND_OVERTIME)
    return [
        OvertimeSession(
            start=_ledger_required_timestamp(entry, "start", SESSION_KIND_OVERTIME, position),
            start_local=_ledger_optional_text(entry, "start_local", SESSION_KIND_OVERTIME, position) or "",
            end=_ledger_optional_timestamp(entry, "end", SESSION_KIND_OVERTIME, position),
            end_local=_ledger_optional_text(entry, "end_local", SESSION_KIND_OVERTIME, position),
            auto_stopped=bool(entry.get("auto_stopped", False)),
            note=_ledger_optional_text(entry, "note", SESSION_KIND_OVERTIME, position),
        )
        for position, entry in enumerate(entries)
    ]


def _ledger_dump_document(kind: str, entries: list[dict[str, Any]]) -> str:
    return json.dumps(
        {"version": SESSION_DOCUMENT_VERSION, "kind": kind, "sessions": entries},
        ensure_ascii=False,
        separators=(",", ":"),
    )


def _ledger_load_document(raw_value: str | None, kind: str) -> list[dict[str, Any]]:
    if raw_value is None or not raw_value.strip():
        return []

    try:
        document = json.loads(raw_value)
    except json.JSONDecodeError as error:
        raise CorruptSessionLogError(f"{kind} session log is not valid JSON", kind) from error

    if not isinstance(document, dict):
        raise CorruptSessionLogError(f"{kind} session log must be a JSON object", kind)
    if document.get("version") != SESSION_DOCUMENT_VERSION:
        raise CorruptSessionLogError(f"{kind} session log has unsupported version {document.get('version')!r}", kind)
    if document.get("kind") != kind:
        raise CorruptSessionLogError(f"{kind} session log has mismatched kind {document.get('kind')!r}", kind)

    entries = document.get("sessions")
    if not isinstance(entries, list):
        raise CorruptSessionLogError(f"{kind} session log must carry a sessions list", kind)
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict) or entry.get("kind") != kind:
            raise CorruptSessionLogError(f"{kind} session {position} is not a {kind} entry", kind)
    return entries


def _ledger_required_text(entry: dict[str, Any], key: str, kind: str, position: int) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value:
        raise CorruptSessionLogError(f"{kind} session {position} is missing {key}", kind)
    return value


def _ledger_optional_text(entry: dict[str, Any], key: str, kind: str, position: int) -> str | None:
    value = entry.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise CorruptSessionLogError(f"{kind} session {position} has non-text {key}", kind)
    return value


def _ledger_required_timestamp(entry: dict[str, Any], key: str, kind: str, position: int) -> datetime:
    timestamp = _ledger_optional_timestamp(entry, key, kind, position)
    if timestamp is None:
        raise CorruptSessionLogError(f"{kind} session {position} is missing {key}", kind)
    return timestamp


def _ledger_optional_timestamp(entry: dict[str, Any], key: str, kind: str, position: int) -> datetime | None:
    value = _ledger_optional_text(entry, key, kind, position)
    if value is None:
        return None
    try:
        timestamp = datetime.fromisoformat(value)
    except ValueError as error:
        raise CorruptSessionLogError(f"{kind} session {position} has invalid {key}", kind) from error
    if timestamp.tzinfo is None:
        raise CorruptSessionLogError(f"{kind} session {position} has {key} without UTC offset", kind)
    return timestamp


__all__ = [
    "CorruptSessionLogError",
    "SESSION_DOCUMENT_VERSION",
    "ledger_decode_overtime_sessions",
    "ledger_decode_pause_sessions",
    "ledger_encode_overtime_sessions",
    "ledger_encode_pause_sessions",
]
