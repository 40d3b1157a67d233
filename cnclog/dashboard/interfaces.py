"""Typed interfaces for dashboard read aggregations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from cnclog.domain import HealthStatus


@dataclass(frozen=True)
class ActiveJobGroup:
    """Active steps of one (project, part) job, aligned positionally.

    Attributes:
        project_no: Project number of the first active row.
        part_name: Part name of the first active row.
        customer_name: Customer name of the first active row.
        drawing_no: Drawing number of the first active row.
        quantity_ordered: Ordered quantity of the first active row.
        project_start: Earliest rendered start time of the group.
        machines: Machine numbers, one per active step.
        process_statuses: Statuses, one per active step.
        process_names: Process names, one per active step.
        process_nos: Process numbers, one per active step.
        step_nos: Step numbers, one per active step.
        start_times: Rendered start times, one per active step.
        downtimes: Latest pause reason of paused steps, empty for others.
    """

    project_no: str
    part_name: str
    customer_name: str
    drawing_no: str
    quantity_ordered: str
    project_start: str
    machines: tuple[str, ...]
    process_statuses: tuple[str, ...]
    process_names: tuple[str, ...]
    process_nos: tuple[str, ...]
    step_nos: tuple[str, ...]
    start_times: tuple[str, ...]
    downtimes: tuple[str, ...]


@dataclass(frozen=True)
class ActiveJobsSnapshot:
    """Active job groups together with cache metadata.

    Attributes:
        groups: Active job groups in first-seen table order.
        computed_at: When the groups were computed.
        cached: Whether the groups came from cache.
        cache_age_seconds: Age of the cached groups.
    """

    groups: tuple[ActiveJobGroup, ...]
    computed_at: datetime
    cached: bool
    cache_age_seconds: float


@dataclass(frozen=True)
class DashboardVersion:
    """Change fingerprint of the job log.

    Attributes:
        row_count: Total rows in the job log.
        data_hash: Rolling hash over the row count and leading table rows.
        last_modified: When the fingerprint was last seen changing.
        computed_at: When the fingerprint was computed.
        cached: Whether the fingerprint came from cache.
        invalidated: Whether a write invalidation forced this computation.
    """

    row_count: int
    data_hash: int
    last_modified: datetime
    computed_at: datetime
    cached: bool
    invalidated: bool


class DashboardReadPort(Protocol):
    """Port definition for dashboard reads and write-side invalidation."""

    def dashboard_get_active_jobs(self) -> ActiveJobsSnapshot:
        """Return active job groups, failing soft to an empty snapshot.

        Returns:
            ActiveJobsSnapshot: Active job groups.

        Raises:
            RuntimeError: Implementations do not raise on read failures.
        """

    def dashboard_get_version(self) -> DashboardVersion:
        """Return the change fingerprint, failing soft to an empty fingerprint.

        Returns:
            DashboardVersion: Current fingerprint.

        Raises:
            RuntimeError: Implementations do not raise on read failures.
        """

    def dashboard_invalidate(self) -> None:
        """Drop cached reads so the next version check recomputes."""

    def dashboard_test_connection(self) -> HealthStatus:
        """Check row store reachability.

        Returns:
            HealthStatus: Check outcome.

        Raises:
            RuntimeError: Implementations do not raise on read failures.
        """
