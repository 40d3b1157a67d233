"""Typed interfaces for database-layer services.

All SQL access must remain in the db package and its submodules. Upper layers
see the job log as an ordered sequence of positional text rows, the way a
floor spreadsheet exposes it.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final, Protocol

from cnclog.domain import HealthStatus

JOB_LOG_COLUMNS: Final[tuple[str, ...]] = (
    "log_no",
    "project_no",
    "customer_name",
    "part_name",
    "drawing_no",
    "quantity_ordered",
    "process_name",
    "process_no",
    "step_no",
    "machine_no",
    "start_employee_code",
    "start_time",
    "end_employee_code",
    "end_time",
    "process_time",
    "fg",
    "ng",
    "rework",
    "status",
    "pause_summary",
    "total_downtime",
    "total_normal_pause",
    "total_pause_time",
    "pause_sessions",
    "reason_summary",
    "ot_sessions",
    "ot_summary",
    "ot_duration",
    "remark",
)
JOB_LOG_COLUMN_COUNT: Final[int] = len(JOB_LOG_COLUMNS)


class RowStorePersistenceError(RuntimeError):
    """Raised when the row store rejects or fails a read or write."""


@dataclass(frozen=True)
class StoredRow:
    """One persisted job log row.

    Attributes:
        row_id: Stable row identifier assigned on append.
        values: Cell texts in `JOB_LOG_COLUMNS` order, padded to full width.
    """

    row_id: int
    values: tuple[str, ...]

    def row_value(self, column_index: int) -> str:
        """Return one cell text, or an empty string past the stored width."""

        if 0 <= column_index < len(self.values):
            return self.values[column_index]
        return ""


@dataclass(frozen=True)
class RowStyle:
    """Cosmetic row formatting applied after writes.

    Attributes:
        background: Background color, None for the store default.
        font_color: Font color.
        font_weight: Font weight, `bold` or `normal`.
    """

    background: str | None
    font_color: str
    font_weight: str


class RowStorePort(Protocol):
    """Port definition for the positional job log row store."""

    def db_row_read_all(self) -> list[StoredRow]:
        """Read every row in append order.

        Returns:
            list[StoredRow]: All rows, oldest first.

        Raises:
            RowStorePersistenceError: Raised when the read fails.
        """

    def db_row_read_cell(self, row_id: int, column_index: int) -> str:
        """Read one cell of one row.

        Args:
            row_id: Row identifier.
            column_index: Zero-based column index.

        Returns:
            str: Cell text, empty when the row or cell is absent.

        Raises:
            RowStorePersistenceError: Raised when the read fails.
        """

    def db_row_write_range(self, row_id: int, column_start: int, values: Sequence[str]) -> None:
        """Write a contiguous column range of one row atomically.

        Args:
            row_id: Row identifier.
            column_start: Zero-based index of the first written column.
            values: Cell texts for consecutive columns.

        Raises:
            ValueError: Raised when the range falls outside the row width.
            RowStorePersistenceError: Raised when the write fails or the row is absent.
        """

    def db_row_append(self, values: Sequence[str]) -> int:
        """Append one full-width row.

        Args:
            values: Cell texts in column order.

        Returns:
            int: Identifier of the appended row.

        Raises:
            ValueError: Raised when more values than columns are given.
            RowStorePersistenceError: Raised when the append fails.
        """

    def db_row_apply_style(self, row_id: int, style: RowStyle) -> None:
        """Apply cosmetic formatting to one row.

        Args:
            row_id: Row identifier.
            style: Formatting to apply.

        Raises:
            RowStorePersistenceError: Raised when the formatting write fails.
        """


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


def db_validate_row_range(column_start: int, value_count: int) -> None:
    """Validate that a positional write fits inside the row width.

    Args:
        column_start: Zero-based index of the first written column.
        value_count: Number of consecutive values.

    Raises:
        ValueError: Raised when the range is empty or exceeds the row width.
    """

    if column_start < 0:
        raise ValueError("column_start must not be negative")
    if value_count <= 0:
        raise ValueError("values must not be empty")
    if column_start + value_count > JOB_LOG_COLUMN_COUNT:
        raise ValueError("write range exceeds job log row width")
