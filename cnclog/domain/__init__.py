"""Domain models and pure helpers used across application layer boundaries."""

from .calendar import (
    BusinessCalendar,
    domain_calendar_in_overtime_window,
    domain_calendar_overtime_cutoff,
    domain_calendar_overtime_start,
    domain_calendar_overtime_time_ms,
    domain_calendar_to_local,
    domain_calendar_working_time_ms,
    domain_format_duration,
    domain_format_local_timestamp,
)
from .models import (
    ACTIVE_JOB_STATUSES,
    HealthStatus,
    JobIdentity,
    JobRecord,
    JobStatus,
    OvertimeSession,
    PauseSession,
    PauseType,
)
from .normalization import domain_normalize_project_no, domain_normalize_text

__all__ = [
    "ACTIVE_JOB_STATUSES",
    "BusinessCalendar",
    "HealthStatus",
    "JobIdentity",
    "JobRecord",
    "JobStatus",
    "OvertimeSession",
    "PauseSession",
    "PauseType",
    "domain_calendar_in_overtime_window",
    "domain_calendar_overtime_cutoff",
    "domain_calendar_overtime_start",
    "domain_calendar_overtime_time_ms",
    "domain_calendar_to_local",
    "domain_calendar_working_time_ms",
    "domain_format_duration",
    "domain_format_local_timestamp",
    "domain_normalize_project_no",
    "domain_normalize_text",
]
