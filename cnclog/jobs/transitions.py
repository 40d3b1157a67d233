"""Central job state transition table and matching-row selection.

Every mutating command on an existing row resolves its target through
`job_transition_select_row`, so the accepted source states and the rejection
for each command live in one table.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

from cnclog.db.interfaces import StoredRow
from cnclog.domain import ACTIVE_JOB_STATUSES, JobIdentity, JobStatus
from cnclog.ledger import ledger_row_identity, ledger_row_status

from .error_codes import JobErrorCode
from .errors import InvalidJobStateError, JobNotFoundError


class JobCommand(str, Enum):
    """Commands accepted by the job lifecycle service."""

    CREATE = "CREATE"
    PAUSE = "PAUSE"
    CONTINUE = "CONTINUE"
    START_OT = "START_OT"
    STOP_OT = "STOP_OT"
    CLOSE = "CLOSE"
    QC_REPORT = "QC_REPORT"


@dataclass(frozen=True)
class JobTransition:
    """Accepted source states and rejections of one row-targeting command.

    Attributes:
        command: Command name.
        source_statuses: Statuses a matching row must have.
        not_found_code: Rejection when no active row matches the identity.
        wrong_state_code: Rejection when only rows in other active states match.
        blocking_statuses: Statuses that stop the last-to-first scan with `blocked_code`.
        blocked_code: Rejection raised on a blocking status.
    """

    command: JobCommand
    source_statuses: frozenset[str]
    not_found_code: JobErrorCode
    wrong_state_code: JobErrorCode
    blocking_statuses: frozenset[str] = frozenset()
    blocked_code: JobErrorCode | None = None


JOB_TRANSITIONS: Final[dict[JobCommand, JobTransition]] = {
    JobCommand.PAUSE: JobTransition(
        command=JobCommand.PAUSE,
        source_statuses=frozenset({JobStatus.OPEN.value, JobStatus.OT.value}),
        not_found_code=JobErrorCode.PAUSE_NOT_FOUND,
        wrong_state_code=JobErrorCode.PAUSE_NOT_FOUND,
    ),
    JobCommand.CONTINUE: JobTransition(
        command=JobCommand.CONTINUE,
        source_statuses=frozenset({JobStatus.PAUSE.value}),
        not_found_code=JobErrorCode.CONTINUE_NOT_FOUND,
        wrong_state_code=JobErrorCode.CONTINUE_NOT_FOUND,
    ),
    JobCommand.START_OT: JobTransition(
        command=JobCommand.START_OT,
        source_statuses=frozenset({JobStatus.OPEN.value, JobStatus.OT.value}),
        not_found_code=JobErrorCode.OT_NOT_FOUND,
        wrong_state_code=JobErrorCode.OT_NOT_FOUND,
    ),
    JobCommand.STOP_OT: JobTransition(
        command=JobCommand.STOP_OT,
        source_statuses=frozenset({JobStatus.OT.value, JobStatus.PAUSE.value}),
        not_found_code=JobErrorCode.OT_STOP_NOT_FOUND,
        wrong_state_code=JobErrorCode.OT_STOP_NOT_FOUND,
    ),
    JobCommand.CLOSE: JobTransition(
        command=JobCommand.CLOSE,
        source_statuses=frozenset({JobStatus.OPEN.value, JobStatus.OT.value}),
        not_found_code=JobErrorCode.CLOSE_NOT_FOUND,
        wrong_state_code=JobErrorCode.CLOSE_NOT_FOUND,
        blocking_statuses=frozenset({JobStatus.PAUSE.value}),
        blocked_code=JobErrorCode.CLOSE_WHILE_PAUSED,
    ),
}


def job_transition_for(command: JobCommand) -> JobTransition:
    """Return the transition entry of one row-targeting command.

    Args:
        command: Command name.

    Returns:
        JobTransition: Table entry.

    Raises:
        ValueError: Raised for commands that append rows instead of targeting one.
    """

    transition = JOB_TRANSITIONS.get(command)
    if transition is None:
        raise ValueError(f"command {command.value} does not target an existing row")
    return transition


def job_transition_select_row(rows: list[StoredRow], identity: JobIdentity, command: JobCommand) -> StoredRow:
    """Select the row a command applies to, scanning last to first.

    The most recent identity match in an accepted source state wins. A match in
    a blocking state stops the scan first. CLOSE rows are terminal and never
    selected.

    Args:
        rows: Full table snapshot in append order.
        identity: Command identity.
        command: Row-targeting command.

    Returns:
        StoredRow: Selected row.

    Raises:
        InvalidJobStateError: Raised when a blocking or wrong-state match exists.
        JobNotFoundError: Raised when no active row matches the identity.
    """

    transition = job_transition_for(command)
    identity_key = identity.identity_key()
    saw_active_match = False
    for row in reversed(rows):
        if ledger_row_identity(row).identity_key() != identity_key:
            continue
        status = ledger_row_status(row)
        if status in transition.blocking_statuses and transition.blocked_code is not None:
            raise InvalidJobStateError.from_code(transition.blocked_code)
        if status in transition.source_statuses:
            return row
        if status in ACTIVE_JOB_STATUSES:
            saw_active_match = True

    if saw_active_match:
        raise InvalidJobStateError.from_code(transition.wrong_state_code)
    raise JobNotFoundError.from_code(transition.not_found_code)


__all__ = [
    "JOB_TRANSITIONS",
    "JobCommand",
    "JobTransition",
    "job_transition_for",
    "job_transition_select_row",
]
