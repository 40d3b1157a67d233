"""SQLAlchemy row store persisting the job log as positional text rows."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from sqlalchemy import Engine, RowMapping, text
from sqlalchemy.exc import SQLAlchemyError

from cnclog.db.interfaces import (
    JOB_LOG_COLUMN_COUNT,
    JOB_LOG_COLUMNS,
    RowStorePersistenceError,
    RowStorePort,
    RowStyle,
    StoredRow,
    db_validate_row_range,
)

_DB_ROW_SELECT_COLUMNS: Final[str] = ", ".join(JOB_LOG_COLUMNS)


class SQLAlchemyRowStore(RowStorePort):
    """SQLAlchemy implementation of the job log row store.

    Column names in generated SQL always come from `JOB_LOG_COLUMNS`; only cell
    values are bound as parameters.
    """

    def __init__(self, engine: Engine):
        """Initialize row store.

        Args:
            engine: SQLAlchemy engine used for all row operations.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_row_read_all(self) -> list[StoredRow]:
        """Read every job log row ordered by row id.

        Returns:
            list[StoredRow]: All rows, oldest first.

        Raises:
            RowStorePersistenceError: Raised when the read fails.
        """

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(
                    text(f"SELECT row_id, {_DB_ROW_SELECT_COLUMNS} FROM job_log_row ORDER BY row_id ASC")
                ).mappings().all()
        except SQLAlchemyError as error:
            raise RowStorePersistenceError("job log row read failed") from error

        return [self._db_row_from_mapping(row) for row in rows]

    def db_row_read_cell(self, row_id: int, column_index: int) -> str:
        """Read one cell of one row.

        Args:
            row_id: Row identifier.
            column_index: Zero-based column index.

        Returns:
            str: Cell text, empty when the row or value is absent.

        Raises:
            ValueError: Raised when the column index is out of range.
            RowStorePersistenceError: Raised when the read fails.
        """

        if not 0 <= column_index < JOB_LOG_COLUMN_COUNT:
            raise ValueError("column_index is out of range")
        column_name = JOB_LOG_COLUMNS[column_index]

        try:
            with self._engine.connect() as connection:
                value = connection.execute(
                    text(f"SELECT {column_name} FROM job_log_row WHERE row_id = :row_id"),
                    {"row_id": row_id},
                ).scalar_one_or_none()
        except SQLAlchemyError as error:
            raise RowStorePersistenceError("job log cell read failed") from error

        return "" if value is None else str(value)

    def db_row_write_range(self, row_id: int, column_start: int, values: Sequence[str]) -> None:
        """Write a contiguous column range in one UPDATE statement.

        Args:
            row_id: Row identifier.
            column_start: Zero-based index of the first written column.
            values: Cell texts for consecutive columns.

        Raises:
            ValueError: Raised when the range falls outside the row width.
            RowStorePersistenceError: Raised when the update fails or matches no row.
        """

        db_validate_row_range(column_start, len(values))
        column_names = JOB_LOG_COLUMNS[column_start : column_start + len(values)]
        assignments = ", ".join(f"{column_name} = :{column_name}" for column_name in column_names)
        parameters: dict[str, object] = {
            column_name: "" if value is None else str(value) for column_name, value in zip(column_names, values)
        }
        parameters["row_id"] = row_id

        try:
            with self._engine.begin() as connection:
                result = connection.execute(
                    text(
                        f"UPDATE job_log_row SET {assignments}, updated_at_utc = CURRENT_TIMESTAMP "
                        "WHERE row_id = :row_id"
                    ),
                    parameters,
                )
        except SQLAlchemyError as error:
            raise RowStorePersistenceError("job log range write failed") from error

        if result.rowcount == 0:
            raise RowStorePersistenceError(f"job log row {row_id} does not exist")

    def db_row_append(self, values: Sequence[str]) -> int:
        """Append one row padded to the full column width.

        Args:
            values: Cell texts in column order.

        Returns:
            int: Identifier of the appended row.

        Raises:
            ValueError: Raised when more values than columns are given.
            RowStorePersistenceError: Raised when the insert fails.
        """

        if len(values) > JOB_LOG_COLUMN_COUNT:
            raise ValueError("values exceed job log row width")
        padded_values = [("" if value is None else str(value)) for value in values]
        padded_values.extend([""] * (JOB_LOG_COLUMN_COUNT - len(padded_values)))
        parameters = dict(zip(JOB_LOG_COLUMNS, padded_values))
        placeholders = ", ".join(f":{column_name}" for column_name in JOB_LOG_COLUMNS)

        try:
            with self._engine.begin() as connection:
                row_id = connection.execute(
                    text(
                        f"INSERT INTO job_log_row ({_DB_ROW_SELECT_COLUMNS}) VALUES ({placeholders}) "
                        "RETURNING row_id"
                    ),
                    parameters,
                ).scalar_one()
        except SQLAlchemyError as error:
            raise RowStorePersistenceError("job log row append failed") from error

        return int(row_id)

    def db_row_apply_style(self, row_id: int, style: RowStyle) -> None:
        """Persist row formatting columns.

        Args:
            row_id: Row identifier.
            style: Formatting to apply.

        Raises:
            RowStorePersistenceError: Raised when the update fails.
        """

        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(
                        "UPDATE job_log_row SET style_background = :background, "
                        "style_font_color = :font_color, style_font_weight = :font_weight "
                        "WHERE row_id = :row_id"
                    ),
                    {
                        "row_id": row_id,
                        "background": style.background,
                        "font_color": style.font_color,
                        "font_weight": style.font_weight,
                    },
                )
        except SQLAlchemyError as error:
            raise RowStorePersistenceError("job log row style write failed") from error

    def _db_row_from_mapping(self, row: RowMapping) -> StoredRow:
        return StoredRow(
            row_id=int(row["row_id"]),
            values=tuple("" if row[column_name] is None else str(row[column_name]) for column_name in JOB_LOG_COLUMNS),
        )
