"""Application bootstrap wiring for startup validation and dependency assembly."""

from datetime import time

from fastapi import FastAPI

from cnclog.api import create_api_application
from cnclog.config import AppSettings, config_load_settings, config_parse_clock_time
from cnclog.dashboard import DashboardReadService
from cnclog.db import (
    DatabaseHealthPort,
    InMemoryRowStore,
    RowStorePort,
    SQLAlchemyDatabaseHealthService,
    SQLAlchemyRowStore,
    db_create_engine,
)
from cnclog.domain import BusinessCalendar
from cnclog.jobs import JobLifecycleConfig, JobLifecycleService, OvertimeSweepOrchestrator


def bootstrap_create_application() -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    calendar = bootstrap_create_calendar(settings)
    row_store, db_health_service = bootstrap_create_row_store(settings)
    dashboard_service = DashboardReadService(
        row_store=row_store,
        calendar=calendar,
        active_jobs_ttl_seconds=settings.active_jobs_cache_ttl_seconds,
        version_ttl_seconds=settings.version_cache_ttl_seconds,
        version_hash_row_limit=settings.version_hash_row_limit,
    )
    job_service = JobLifecycleService(
        row_store=row_store,
        calendar=calendar,
        config=bootstrap_create_lifecycle_config(settings),
        invalidation_listener=dashboard_service.dashboard_invalidate,
    )
    return create_api_application(
        settings=settings,
        db_health_service=db_health_service,
        job_service=job_service,
        dashboard_service=dashboard_service,
    )


def bootstrap_create_overtime_sweep_orchestrator() -> OvertimeSweepOrchestrator:
    """Build the overtime sweep for non-HTTP trigger surfaces.

    Returns:
        OvertimeSweepOrchestrator: Fully wired sweep instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    row_store, _ = bootstrap_create_row_store(settings)
    return OvertimeSweepOrchestrator(row_store=row_store, calendar=bootstrap_create_calendar(settings))


def bootstrap_create_calendar(settings: AppSettings) -> BusinessCalendar:
    """Build the business calendar from validated settings.

    Args:
        settings: Validated application settings.

    Returns:
        BusinessCalendar: Facility calendar.

    Raises:
        ValueError: Raised when a clock setting cannot be parsed.
    """

    def clock(value: str) -> time:
        hour, minute = config_parse_clock_time(value)
        return time(hour, minute)

    return BusinessCalendar(
        timezone_name=settings.business_timezone,
        work_start=clock(settings.work_start),
        lunch_start=clock(settings.lunch_start),
        lunch_end=clock(settings.lunch_end),
        break_start=clock(settings.break_start),
        break_end=clock(settings.break_end),
        work_end=clock(settings.work_end),
        overtime_start=clock(settings.overtime_start),
        overtime_end=clock(settings.overtime_end),
    )


def bootstrap_create_row_store(settings: AppSettings) -> tuple[RowStorePort, DatabaseHealthPort]:
    """Build the configured row store and its health check.

    Args:
        settings: Validated application settings.

    Returns:
        tuple[RowStorePort, DatabaseHealthPort]: Row store and matching health service.

    Raises:
        ValueError: Raised when the database URL is blank for the SQL backend.
    """

    if settings.row_store_backend == "memory":
        memory_row_store = InMemoryRowStore()
        return memory_row_store, memory_row_store

    engine = db_create_engine(database_url=settings.database_url)
    return SQLAlchemyRowStore(engine=engine), SQLAlchemyDatabaseHealthService(engine=engine)


def bootstrap_create_lifecycle_config(settings: AppSettings) -> JobLifecycleConfig:
    return JobLifecycleConfig(
        extended_shift_process_names=tuple(settings.extended_shift_process_names),
        unquantified_process_names=tuple(settings.unquantified_process_names),
        status_read_attempts=settings.status_read_attempts,
        status_read_backoff_seconds=settings.status_read_backoff_seconds,
    )
