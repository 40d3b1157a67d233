"""Session ledger arithmetic for pause and overtime logs.

Sessions are immutable. Every mutating helper returns a new list together
with a flag telling whether anything changed, so callers decide when a write
is needed.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Final

from cnclog.domain import (
    BusinessCalendar,
    OvertimeSession,
    PauseSession,
    PauseType,
    domain_calendar_overtime_cutoff,
    domain_calendar_overtime_time_ms,
    domain_calendar_to_local,
    domain_calendar_working_time_ms,
    domain_format_local_timestamp,
)

AUTO_STOP_NOTE_TEMPLATE: Final[str] = "OT stopped automatically at {cutoff}"


def ledger_pause_duration_ms(
    calendar: BusinessCalendar,
    session: PauseSession,
    ot_sessions: list[OvertimeSession],
) -> int:
    """Compute the counted duration of one pause session.

    The duration is the working-window overlap of the pause plus the
    overtime-window overlap restricted to closed overtime sessions the pause
    intersects. An open pause counts as zero.

    Args:
        calendar: Business calendar.
        session: Pause session.
        ot_sessions: Overtime sessions of the same job step.

    Returns:
        int: Counted pause milliseconds.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if session.resume_at is None:
        return 0

    duration_ms = domain_calendar_working_time_ms(calendar, session.pause_at, session.resume_at)
    for ot_session in ot_sessions:
        if ot_session.end is None:
            continue
        overlap_start = max(session.pause_at, ot_session.start)
        overlap_end = min(session.resume_at, ot_session.end)
        if overlap_end > overlap_start:
            duration_ms += domain_calendar_overtime_time_ms(calendar, overlap_start, overlap_end)
    return duration_ms


def ledger_total_pause_ms(
    calendar: BusinessCalendar,
    pause_sessions: list[PauseSession],
    ot_sessions: list[OvertimeSession],
    pause_type: str | None = None,
) -> int:
    """Sum counted durations of pause sessions, optionally of one type.

    Args:
        calendar: Business calendar.
        pause_sessions: Pause sessions.
        ot_sessions: Overtime sessions of the same job step.
        pause_type: Optional type filter, `PAUSE` or `DOWNTIME`.

    Returns:
        int: Total counted milliseconds.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return sum(
        ledger_pause_duration_ms(calendar, session, ot_sessions)
        for session in pause_sessions
        if pause_type is None or session.pause_type == pause_type
    )


def ledger_total_downtime_ms(
    calendar: BusinessCalendar,
    pause_sessions: list[PauseSession],
    ot_sessions: list[OvertimeSession],
) -> int:
    return ledger_total_pause_ms(calendar, pause_sessions, ot_sessions, PauseType.DOWNTIME.value)


def ledger_total_normal_pause_ms(
    calendar: BusinessCalendar,
    pause_sessions: list[PauseSession],
    ot_sessions: list[OvertimeSession],
) -> int:
    return ledger_total_pause_ms(calendar, pause_sessions, ot_sessions, PauseType.PAUSE.value)


def ledger_total_overtime_ms(calendar: BusinessCalendar, ot_sessions: list[OvertimeSession]) -> int:
    """Sum overtime-window overlap of all closed overtime sessions."""

    return sum(
        domain_calendar_overtime_time_ms(calendar, session.start, session.end)
        for session in ot_sessions
        if session.end is not None
    )


def ledger_auto_stop_open_sessions(
    calendar: BusinessCalendar,
    ot_sessions: list[OvertimeSession],
    now: datetime,
) -> tuple[list[OvertimeSession], bool]:
    """Force-close stale open overtime sessions at their daily cutoff.

    A session is stale when `now` is past the cutoff on the session's start
    day, or on a later local calendar day. Closed sessions are returned
    unchanged.

    Args:
        calendar: Business calendar.
        ot_sessions: Overtime sessions.
        now: Current timestamp.

    Returns:
        tuple[list[OvertimeSession], bool]: Updated sessions and whether any session changed.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    local_now = domain_calendar_to_local(calendar, now)
    updated_sessions: list[OvertimeSession] = []
    changed = False
    for session in ot_sessions:
        if session.end is not None:
            updated_sessions.append(session)
            continue
        local_start = domain_calendar_to_local(calendar, session.start)
        cutoff = domain_calendar_overtime_cutoff(calendar, local_start)
        if local_now > cutoff or local_now.date() != local_start.date():
            updated_sessions.append(
                replace(
                    session,
                    end=cutoff,
                    end_local=domain_format_local_timestamp(calendar, cutoff),
                    auto_stopped=True,
                    note=AUTO_STOP_NOTE_TEMPLATE.format(cutoff=calendar.overtime_end.strftime("%H:%M")),
                )
            )
            changed = True
            continue
        updated_sessions.append(session)
    return updated_sessions, changed


def ledger_close_latest_open_overtime(
    calendar: BusinessCalendar,
    ot_sessions: list[OvertimeSession],
    end: datetime,
) -> tuple[list[OvertimeSession], bool]:
    """Close the most recent open overtime session at `end`.

    Args:
        calendar: Business calendar.
        ot_sessions: Overtime sessions.
        end: Stop timestamp.

    Returns:
        tuple[list[OvertimeSession], bool]: Updated sessions and whether a session was closed.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    for position in range(len(ot_sessions) - 1, -1, -1):
        if ot_sessions[position].is_open:
            updated_sessions = list(ot_sessions)
            updated_sessions[position] = replace(
                ot_sessions[position],
                end=end,
                end_local=domain_format_local_timestamp(calendar, end),
            )
            return updated_sessions, True
    return list(ot_sessions), False


def ledger_close_all_open_overtime(
    calendar: BusinessCalendar,
    ot_sessions: list[OvertimeSession],
    end: datetime,
) -> list[OvertimeSession]:
    """Close every open overtime session at `end`."""

    end_local = domain_format_local_timestamp(calendar, end)
    return [
        replace(session, end=end, end_local=end_local) if session.is_open else session
        for session in ot_sessions
    ]


def ledger_resume_latest_open_pause(
    calendar: BusinessCalendar,
    pause_sessions: list[PauseSession],
    resume_at: datetime,
) -> tuple[list[PauseSession], bool]:
    """Resume the most recent open pause session at `resume_at`.

    Args:
        calendar: Business calendar.
        pause_sessions: Pause sessions.
        resume_at: Resume timestamp.

    Returns:
        tuple[list[PauseSession], bool]: Updated sessions and whether a session was resumed.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    for position in range(len(pause_sessions) - 1, -1, -1):
        if pause_sessions[position].is_open:
            updated_sessions = list(pause_sessions)
            updated_sessions[position] = replace(
                pause_sessions[position],
                resume_at=resume_at,
                resume_at_local=domain_format_local_timestamp(calendar, resume_at),
            )
            return updated_sessions, True
    return list(pause_sessions), False


__all__ = [
    "AUTO_STOP_NOTE_TEMPLATE",
    "ledger_auto_stop_open_sessions",
    "ledger_close_all_open_overtime",
    "ledger_close_latest_open_overtime",
    "ledger_pause_duration_ms",
    "ledger_resume_latest_open_pause",
    "ledger_total_downtime_ms",
    "ledger_total_normal_pause_ms",
    "ledger_total_overtime_ms",
    "ledger_total_pause_ms",
]
