"""Human-readable summaries of session logs for the report columns."""

from __future__ import annotations

from typing import Final

from cnclog.domain import (
    BusinessCalendar,
    OvertimeSession,
    PauseSession,
    PauseType,
    domain_calendar_overtime_time_ms,
    domain_format_duration,
)

from .sessions import ledger_pause_duration_ms

SUMMARY_SEPARATOR: Final[str] = " | "
PAUSE_OPEN_END_TOKEN: Final[str] = "[กำลังหยุด]"
OVERTIME_OPEN_END_TOKEN: Final[str] = "[กำลังทำ OT]"
AUTO_STOPPED_SUFFIX: Final[str] = " (Auto-stopped)"

_LEDGER_PAUSE_TYPE_LABELS: Final[dict[str, str]] = {
    PauseType.DOWNTIME.value: "Downtime",
    PauseType.PAUSE.value: "Normal Pause",
}


def ledger_pause_type_label(pause_type: str) -> str:
    """Return the report label of one pause type."""

    return _LEDGER_PAUSE_TYPE_LABELS.get(pause_type, _LEDGER_PAUSE_TYPE_LABELS[PauseType.PAUSE.value])


def ledger_render_pause_summary(
    calendar: BusinessCalendar,
    pause_sessions: list[PauseSession],
    ot_sessions: list[OvertimeSession],
) -> str:
    """Render one numbered entry per pause session.

    Entries read `{n}. {label}: {start} ถึง {end} ({duration})` followed by
    ` - {reason}` when a reason exists. An open session renders its end as
    `[กำลังหยุด]` and carries no duration.

    Args:
        calendar: Business calendar.
        pause_sessions: Pause sessions in chronological order.
        ot_sessions: Overtime sessions used for overlap accounting.

    Returns:
        str: Pipe-delimited summary, empty when there are no sessions.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    entries: list[str] = []
    for position, session in enumerate(pause_sessions, start=1):
        entry = f"{position}. {ledger_pause_type_label(session.pause_type)}: {session.pause_at_local} ถึง "
        if session.is_open:
            entry += PAUSE_OPEN_END_TOKEN
        else:
            duration_text = domain_format_duration(ledger_pause_duration_ms(calendar, session, ot_sessions))
            entry += f"{session.resume_at_local} ({duration_text})"
        if session.reason:
            entry += f" - {session.reason}"
        entries.append(entry)
    return SUMMARY_SEPARATOR.join(entries)


def ledger_render_reason_summary(pause_sessions: list[PauseSession]) -> str:
    """Render `{n}. {label}: {reason}` for each session that carries a reason."""

    reasoned_sessions = [session for session in pause_sessions if session.reason.strip()]
    return SUMMARY_SEPARATOR.join(
        f"{position}. {ledger_pause_type_label(session.pause_type)}: {session.reason.strip()}"
        for position, session in enumerate(reasoned_sessions, start=1)
    )


def ledger_render_overtime_summary(calendar: BusinessCalendar, ot_sessions: list[OvertimeSession]) -> str:
    """Render one numbered entry per overtime session.

    Args:
        calendar: Business calendar.
        ot_sessions: Overtime sessions in chronological order.

    Returns:
        str: Pipe-delimited summary, empty when there are no sessions.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    entries: list[str] = []
    for position, session in enumerate(ot_sessions, start=1):
        if session.end is None:
            entries.append(f"{position}. {session.start_local} to {OVERTIME_OPEN_END_TOKEN}")
            continue
        duration_text = domain_format_duration(domain_calendar_overtime_time_ms(calendar, session.start, session.end))
        entry = f"{position}. {session.start_local} to {session.end_local} ({duration_text})"
        if session.auto_stopped:
            entry += AUTO_STOPPED_SUFFIX
        entries.append(entry)
    return SUMMARY_SEPARATOR.join(entries)


__all__ = [
    "AUTO_STOPPED_SUFFIX",
    "OVERTIME_OPEN_END_TOKEN",
    "PAUSE_OPEN_END_TOKEN",
    "SUMMARY_SEPARATOR",
    "ledger_pause_type_label",
    "ledger_render_overtime_summary",
    "ledger_render_pause_summary",
    "ledger_render_reason_summary",
]
