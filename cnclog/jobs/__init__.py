"""Job layer package for the job state machine and scheduled maintenance jobs."""

from .commands import JobCommandRequest, job_parse_command_payload
from .error_codes import (
	CORRUPT_SESSION_LOG_MESSAGE_TEMPLATE,
	INVALID_JSON_MESSAGE,
	PERSISTENCE_ERROR_MESSAGE_TEMPLATE,
	JobErrorCode,
)
from .errors import (
	DuplicateOpenJobError,
	InvalidJobStateError,
	JobCommandError,
	JobNotFoundError,
	JobValidationError,
	OvertimeWindowError,
)
from .interfaces import JobExecutionResult, JobOrchestratorPort
from .lifecycle import JobCommandResult, JobLifecycleConfig, JobLifecycleService, OpenJobStep
from .overtime_sweep import OvertimeSweepOrchestrator
from .row_styling import DEFAULT_ROW_STYLE, STATUS_ROW_STYLES, job_apply_status_style, job_style_for_status
from .transitions import JOB_TRANSITIONS, JobCommand, JobTransition, job_transition_select_row

__all__ = [
	"CORRUPT_SESSION_LOG_MESSAGE_TEMPLATE",
	"DEFAULT_ROW_STYLE",
	"DuplicateOpenJobError",
	"INVALID_JSON_MESSAGE",
	"InvalidJobStateError",
	"JOB_TRANSITIONS",
	"JobCommand",
	"JobCommandError",
	"JobCommandRequest",
	"JobCommandResult",
	"JobErrorCode",
	"JobExecutionResult",
	"JobLifecycleConfig",
	"JobLifecycleService",
	"JobNotFoundError",
	"JobOrchestratorPort",
	"JobTransition",
	"JobValidationError",
	"OpenJobStep",
	"OvertimeSweepOrchestrator",
	"OvertimeWindowError",
	"PERSISTENCE_ERROR_MESSAGE_TEMPLATE",
	"STATUS_ROW_STYLES",
	"job_apply_status_style",
	"job_parse_command_payload",
	"job_style_for_status",
	"job_transition_select_row",
]
