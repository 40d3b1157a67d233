"""Database layer package for all SQL and persistence boundaries."""

from .health import SQLAlchemyDatabaseHealthService
from .interfaces import (
	JOB_LOG_COLUMN_COUNT,
	JOB_LOG_COLUMNS,
	DatabaseHealthPort,
	RowStorePersistenceError,
	RowStorePort,
	RowStyle,
	StoredRow,
)
from .memory_row_store import InMemoryRowStore
from .row_store import SQLAlchemyRowStore
from .session import db_create_engine

__all__ = [
	"DatabaseHealthPort",
	"InMemoryRowStore",
	"JOB_LOG_COLUMNS",
	"JOB_LOG_COLUMN_COUNT",
	"RowStorePersistenceError",
	"RowStorePort",
	"RowStyle",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyRowStore",
	"StoredRow",
	"db_create_engine",
]
