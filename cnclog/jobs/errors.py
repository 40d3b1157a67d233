"""Project-native typed exceptions for job command rejections."""

from __future__ import annotations

from .error_codes import JobErrorCode, job_error_message


class JobCommandError(Exception):
    """Base exception for rejected job commands.

    Attributes:
        error_code: Rejection code.
    """

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code

    @classmethod
    def from_code(cls, error_code: JobErrorCode, **values: str) -> JobCommandError:
        """Build an error carrying the operator-facing message of one code."""

        return cls(job_error_message(error_code, **values), error_code=error_code.value)


class JobValidationError(JobCommandError, ValueError):
    """Request or state validation failure detected before any mutation."""


class DuplicateOpenJobError(JobValidationError):
    """Create rejected because an OPEN row with the same identity exists."""


class InvalidJobStateError(JobValidationError):
    """Command rejected because the matching row is in the wrong state."""


class OvertimeWindowError(JobValidationError):
    """Start-overtime rejected outside the overtime window."""


class JobNotFoundError(JobCommandError, LookupError):
    """No row matches the command identity in any accepted state."""


__all__ = [
    "DuplicateOpenJobError",
    "InvalidJobStateError",
    "JobCommandError",
    "JobNotFoundError",
    "JobValidationError",
    "OvertimeWindowError",
]
