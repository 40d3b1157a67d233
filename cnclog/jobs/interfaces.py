"""Typed interfaces for job-layer orchestration responsibilities."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class JobExecutionResult:
    """Result contract for scheduled job execution.

    Attributes:
        job_name: Job identifier.
        status: Final execution state, `success` or `failed`.
        scanned_row_count: Rows inspected by the job.
        changed_row_count: Rows rewritten by the job.
        failed_row_count: Rows skipped because they could not be decoded or written.
    """

    job_name: str
    status: str
    scanned_row_count: int = 0
    changed_row_count: int = 0
    failed_row_count: int = 0


class JobOrchestratorPort(Protocol):
    """Port definition for orchestrating scheduled maintenance jobs."""

    def job_supported_names(self) -> tuple[str, ...]:
        """Return the set of workflow names this orchestrator can execute.

        Returns:
            tuple[str, ...]: Deterministic list of supported job names.

        Raises:
            RuntimeError: Raised when supported job metadata is unavailable.
        """

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Execute one named workflow in the job layer.

        Args:
            job_name: Workflow name.

        Returns:
            JobExecutionResult: Final execution status payload.

        Raises:
            ValueError: Raised when the job name is unsupported.
            RuntimeError: Raised when job execution fails.
        """
