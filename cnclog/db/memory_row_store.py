"""Process-local row store for development runs and tests."""

from __future__ import annotations

import threading
from collections.abc import Sequence

from cnclog.db.interfaces import (
    JOB_LOG_COLUMN_COUNT,
    DatabaseHealthPort,
    RowStorePersistenceError,
    RowStorePort,
    RowStyle,
    StoredRow,
    db_validate_row_range,
)
from cnclog.domain import HealthStatus


class InMemoryRowStore(RowStorePort, DatabaseHealthPort):
    """Row store keeping job log rows in process memory.

    Every operation holds one lock, so a range write is never observed
    half-applied by a concurrent reader.
    """

    def __init__(self, rows: Sequence[Sequence[str]] | None = None):
        """Initialize store, optionally seeded with rows in append order.

        Args:
            rows: Optional initial rows.

        Raises:
            ValueError: Raised when a seed row exceeds the row width.
        """

        self._lock = threading.Lock()
        self._rows: dict[int, list[str]] = {}
        self._styles: dict[int, RowStyle] = {}
        self._next_row_id = 1
        for values in rows or ():
            self.db_row_append(values)

    def db_row_read_all(self) -> list[StoredRow]:
        with self._lock:
            return [StoredRow(row_id=row_id, values=tuple(values)) for row_id, values in self._rows.items()]

    def db_row_read_cell(self, row_id: int, column_index: int) -> str:
        if not 0 <= column_index < JOB_LOG_COLUMN_COUNT:
            raise ValueError("column_index is out of range")
        with self._lock:
            values = self._rows.get(row_id)
            return "" if values is None else values[column_index]

    def db_row_write_range(self, row_id: int, column_start: int, values: Sequence[str]) -> None:
        db_validate_row_range(column_start, len(values))
        with self._lock:
            stored_values = self._rows.get(row_id)
            if stored_values is None:
                raise RowStorePersistenceError(f"job log row {row_id} does not exist")
            stored_values[column_start : column_start + len(values)] = ["" if value is None else str(value) for value in values]

    def db_row_append(self, values: Sequence[str]) -> int:
        if len(values) > JOB_LOG_COLUMN_COUNT:
            raise ValueError("values exceed job log row width")
        padded_values = ["" if value is None else str(value) for value in values]
        padded_values.extend([""] * (JOB_LOG_COLUMN_COUNT - len(padded_values)))
        with self._lock:
            row_id = self._next_row_id
            self._next_row_id += 1
            self._rows[row_id] = padded_values
            return row_id

    def db_row_apply_style(self, row_id: int, style: RowStyle) -> None:
        with self._lock:
            if row_id not in self._rows:
                raise RowStorePersistenceError(f"job log row {row_id} does not exist")
            self._styles[row_id] = style

    def db_row_style(self, row_id: int) -> RowStyle | None:
        """Return the last style applied to one row, if any."""

        with self._lock:
            return self._styles.get(row_id)

    def db_connection_label(self) -> str:
        return "memory://job_log_row"

    def db_check_health(self) -> HealthStatus:
        with self._lock:
            row_count = len(self._rows)
        return HealthStatus(status="ok", detail=f"in-memory row store holds {row_count} rows")
