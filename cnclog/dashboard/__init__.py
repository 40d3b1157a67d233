"""Dashboard layer package for cached read aggregations over the job log."""

from .interfaces import ActiveJobGroup, ActiveJobsSnapshot, DashboardReadPort, DashboardVersion
from .read_service import DashboardReadService, dashboard_compute_fingerprint

__all__ = [
	"ActiveJobGroup",
	"ActiveJobsSnapshot",
	"DashboardReadPort",
	"DashboardReadService",
	"DashboardVersion",
	"dashboard_compute_fingerprint",
]
