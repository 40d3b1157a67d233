"""Full recomputation of the derived report columns of one job step."""

from __future__ import annotations

from dataclasses import dataclass

from cnclog.domain import BusinessCalendar, OvertimeSession, PauseSession, domain_format_duration

from .session_codec import ledger_encode_overtime_sessions, ledger_encode_pause_sessions
from .sessions import (
    ledger_total_downtime_ms,
    ledger_total_normal_pause_ms,
    ledger_total_overtime_ms,
    ledger_total_pause_ms,
)
from .summaries import ledger_render_overtime_summary, ledger_render_pause_summary, ledger_render_reason_summary


@dataclass(frozen=True)
class LedgerDerivedFields:
    """Derived column values computed from one pair of session lists.

    Attributes:
        pause_summary: Pause summary text.
        total_downtime: Rendered downtime total.
        total_normal_pause: Rendered normal pause total.
        total_pause_time: Rendered total of all pauses.
        pause_sessions_document: Encoded pause session log.
        reason_summary: Reason summary text.
        ot_sessions_document: Encoded overtime session log.
        ot_summary: Overtime summary text.
        ot_duration: Rendered overtime total.
        total_pause_ms: Total counted pause milliseconds.
        total_overtime_ms: Total overtime milliseconds.
    """

    pause_summary: str
    total_downtime: str
    total_normal_pause: str
    total_pause_time: str
    pause_sessions_document: str
    reason_summary: str
    ot_sessions_document: str
    ot_summary: str
    ot_duration: str
    total_pause_ms: int
    total_overtime_ms: int

    def derived_column_values(self) -> list[str]:
        """Return cell texts for columns `pause_summary` through `ot_duration`."""

        return [
            self.pause_summary,
            self.total_downtime,
            self.total_normal_pause,
            self.total_pause_time,
            self.pause_sessions_document,
            self.reason_summary,
            self.ot_sessions_document,
            self.ot_summary,
            self.ot_duration,
        ]


def ledger_build_derived_fields(
    calendar: BusinessCalendar,
    pause_sessions: list[PauseSession],
    ot_sessions: list[OvertimeSession],
) -> LedgerDerivedFields:
    """Recompute every derived column from the current session lists.

    Args:
        calendar: Business calendar.
        pause_sessions: Pause sessions in chronological order.
        ot_sessions: Overtime sessions in chronological order.

    Returns:
        LedgerDerivedFields: Complete derived column set.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    total_pause_ms = ledger_total_pause_ms(calendar, pause_sessions, ot_sessions)
    total_overtime_ms = ledger_total_overtime_ms(calendar, ot_sessions)
    return LedgerDerivedFields(
        pause_summary=ledger_render_pause_summary(calendar, pause_sessions, ot_sessions),
        total_downtime=domain_format_duration(ledger_total_downtime_ms(calendar, pause_sessions, ot_sessions)),
        total_normal_pause=domain_format_duration(ledger_total_normal_pause_ms(calendar, pause_sessions, ot_sessions)),
        total_pause_time=domain_format_duration(total_pause_ms),
        pause_sessions_document=ledger_encode_pause_sessions(pause_sessions),
        reason_summary=ledger_render_reason_summary(pause_sessions),
        ot_sessions_document=ledger_encode_overtime_sessions(ot_sessions),
        ot_summary=ledger_render_overtime_summary(calendar, ot_sessions),
        ot_duration=domain_format_duration(total_overtime_ms),
        total_pause_ms=total_pause_ms,
        total_overtime_ms=total_overtime_ms,
    )


__all__ = ["LedgerDerivedFields", "ledger_build_derived_fields"]
