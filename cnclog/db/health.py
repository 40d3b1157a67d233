"""Job log table reachability check for the SQL row store."""

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from cnclog.domain import HealthStatus

from .interfaces import DatabaseHealthPort


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Report whether the migrated job log table answers queries.

    A bare connection is not enough: terminals write into `job_log_row`, so an
    unmigrated database is reported as down.
    """

    def __init__(self, engine: Engine):
        """Initialize the job log health check.

        Args:
            engine: SQLAlchemy engine of the job log database.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        """Return the job log table location with the password masked.

        Returns:
            str: Engine URL followed by `#job_log_row`.

        Raises:
            RuntimeError: Raised if URL rendering fails.
        """

        return f"{self._engine.url.render_as_string(hide_password=True)}#job_log_row"

    def db_check_health(self) -> HealthStatus:
        """Count job log rows to prove the table exists and is readable.

        Returns:
            HealthStatus: `ok` with the current row count.

        Raises:
            ConnectionError: Raised when the database or the job log table is unreachable.
        """

        try:
            with self._engine.connect() as connection:
                row_count = connection.execute(text("SELECT COUNT(*) FROM job_log_row")).scalar_one()
        except SQLAlchemyError as error:
            raise ConnectionError("job log table is unreachable; run `alembic upgrade head`") from error
        return HealthStatus(status="ok", detail=f"job log table reachable with {row_count} rows")
