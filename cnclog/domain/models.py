"""Typed domain models shared across runtime layers.

This module provides the job-step, session and health contracts exchanged
between the row codec, the session ledger, the state machine and the API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .normalization import domain_normalize_project_no, domain_normalize_text


class JobStatus(str, Enum):
    """Lifecycle states persisted in the status column."""

    OPEN = "OPEN"
    PAUSE = "PAUSE"
    OT = "OT"
    CLOSE = "CLOSE"


class PauseType(str, Enum):
    """Pause session subtypes reported as separate duration totals."""

    PAUSE = "PAUSE"
    DOWNTIME = "DOWNTIME"


ACTIVE_JOB_STATUSES: frozenset[str] = frozenset({JobStatus.OPEN.value, JobStatus.PAUSE.value, JobStatus.OT.value})


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class JobIdentity:
    """Raw identity fields of one job step as entered on a floor terminal.

    Attributes:
        project_no: Project number.
        part_name: Part name.
        process_name: Process name.
        process_no: Process number.
        step_no: Step number.
        machine_no: Machine number.
    """

    project_no: str
    part_name: str
    process_name: str
    process_no: str
    step_no: str
    machine_no: str

    def identity_key(self) -> tuple[str, str, str, str, str, str]:
        """Return the normalized identity tuple used for matching and duplicate checks.

        Returns:
            tuple[str, str, str, str, str, str]: Normalized identity key.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return (
            domain_normalize_project_no(self.project_no),
            domain_normalize_text(self.part_name),
            domain_normalize_text(self.process_name),
            domain_normalize_text(self.process_no),
            domain_normalize_text(self.step_no),
            domain_normalize_text(self.machine_no),
        )


@dataclass(frozen=True)
class PauseSession:
    """One pause or downtime interval on a job step.

    Attributes:
        pause_type: `PAUSE` or `DOWNTIME`.
        reason: Optional free-text reason.
        pause_at: Pause timestamp.
        pause_at_local: Pause timestamp rendered for the facility timezone.
        resume_at: Resume timestamp, None while the job is still paused.
        resume_at_local: Resume timestamp rendered for the facility timezone.
        was_in_ot: Whether the job was in overtime when paused.
    """

    pause_type: str
    reason: str
    pause_at: datetime
    pause_at_local: str
    resume_at: datetime | None = None
    resume_at_local: str | None = None
    was_in_ot: bool = False

    @property
    def is_open(self) -> bool:
        """Whether the session has not been resumed yet."""

        return self.resume_at is None


@dataclass(frozen=True)
class OvertimeSession:
    """One overtime interval on a job step.

    Attributes:
        start: Overtime start timestamp.
        start_local: Start timestamp rendered for the facility timezone.
        end: Overtime end timestamp, None while overtime is running.
        end_local: End timestamp rendered for the facility timezone.
        auto_stopped: Whether the end was forced at the daily cutoff.
        note: Optional note attached when the session was auto-stopped.
    """

    start: datetime
    start_local: str
    end: datetime | None = None
    end_local: str | None = None
    auto_stopped: bool = False
    note: str | None = None

    @property
    def is_open(self) -> bool:
        """Whether the session has not been stopped yet."""

        return self.end is None


@dataclass(frozen=True)
class JobRecord:
    """Decoded job log row.

    Attributes:
        row_id: Row store identifier of the persisted row.
        log_no: Monotonic log number.
        identity: Raw identity fields.
        customer_name: Customer name.
        drawing_no: Drawing number.
        quantity_ordered: Ordered quantity as entered.
        start_employee_code: Employee who opened the job.
        start_time: Creation timestamp, None when the cell cannot be parsed.
        end_employee_code: Employee who closed the job.
        end_time: Close timestamp.
        status: Raw status text, upper-cased and trimmed.
        pause_sessions: Decoded pause session log.
        ot_sessions: Decoded overtime session log.
        remark: Free-text remark.
    """

    row_id: int
    log_no: int | None
    identity: JobIdentity
    customer_name: str
    drawing_no: str
    quantity_ordered: str
    start_employee_code: str
    start_time: datetime | None
    end_employee_code: str
    end_time: datetime | None
    status: str
    pause_sessions: list[PauseSession] = field(default_factory=list)
    ot_sessions: list[OvertimeSession] = field(default_factory=list)
    remark: str = ""
