"""Ledger layer package for session logs, derived columns and row codec."""

from .derived_fields import LedgerDerivedFields, ledger_build_derived_fields
from .row_codec import (
	COLUMN_END_EMPLOYEE_CODE,
	COLUMN_STATUS,
	JOB_LOG_COLUMN_INDEX,
	NewJobRowRequest,
	ledger_build_close_range_values,
	ledger_build_new_row_values,
	ledger_build_status_range_values,
	ledger_decode_job_record,
	ledger_format_timestamp,
	ledger_parse_timestamp,
	ledger_row_identity,
	ledger_row_log_no,
	ledger_row_status,
)
from .session_codec import (
	CorruptSessionLogError,
	ledger_decode_overtime_sessions,
	ledger_decode_pause_sessions,
	ledger_encode_overtime_sessions,
	ledger_encode_pause_sessions,
)
from .sessions import (
	ledger_auto_stop_open_sessions,
	ledger_close_all_open_overtime,
	ledger_close_latest_open_overtime,
	ledger_pause_duration_ms,
	ledger_resume_latest_open_pause,
	ledger_total_downtime_ms,
	ledger_total_normal_pause_ms,
	ledger_total_overtime_ms,
	ledger_total_pause_ms,
)
from .summaries import ledger_render_overtime_summary, ledger_render_pause_summary, ledger_render_reason_summary

__all__ = [
	"COLUMN_END_EMPLOYEE_CODE",
	"COLUMN_STATUS",
	"CorruptSessionLogError",
	"JOB_LOG_COLUMN_INDEX",
	"LedgerDerivedFields",
	"NewJobRowRequest",
	"ledger_auto_stop_open_sessions",
	"ledger_build_close_range_values",
	"ledger_build_derived_fields",
	"ledger_build_new_row_values",
	"ledger_build_status_range_values",
	"ledger_close_all_open_overtime",
	"ledger_close_latest_open_overtime",
	"ledger_decode_job_record",
	"ledger_decode_overtime_sessions",
	"ledger_decode_pause_sessions",
	"ledger_encode_overtime_sessions",
	"ledger_encode_pause_sessions",
	"ledger_format_timestamp",
	"ledger_pause_duration_ms",
	"ledger_parse_timestamp",
	"ledger_render_overtime_summary",
	"ledger_render_pause_summary",
	"ledger_render_reason_summary",
	"ledger_resume_latest_open_pause",
	"ledger_row_identity",
	"ledger_row_log_no",
	"ledger_row_status",
	"ledger_total_downtime_ms",
	"ledger_total_normal_pause_ms",
	"ledger_total_overtime_ms",
	"ledger_total_pause_ms",
]
