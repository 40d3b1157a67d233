"""Best-effort status colouring of job log rows after writes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Final

from cnclog.db.interfaces import RowStorePort, RowStyle
from cnclog.domain import JobStatus
from cnclog.ledger import COLUMN_STATUS

logger = logging.getLogger(__name__)

STATUS_ROW_STYLES: Final[dict[str, RowStyle]] = {
    JobStatus.OPEN.value: RowStyle(background="#FFF59D", font_color="#222", font_weight="bold"),
    JobStatus.CLOSE.value: RowStyle(background="#00C853", font_color="#fff", font_weight="bold"),
    JobStatus.PAUSE.value: RowStyle(background="#90caf9", font_color="#222", font_weight="bold"),
    JobStatus.OT.value: RowStyle(background="#90caf9", font_color="#222", font_weight="bold"),
}
DEFAULT_ROW_STYLE: Final[RowStyle] = RowStyle(background=None, font_color="#000000", font_weight="normal")


def job_style_for_status(status: str) -> RowStyle:
    """Return the row style of one status, the default style when unknown."""

    return STATUS_ROW_STYLES.get(status.strip().upper(), DEFAULT_ROW_STYLE)


def job_apply_status_style(
    row_store: RowStorePort,
    row_id: int,
    attempts: int,
    backoff_seconds: float,
    sleep: Callable[[float], None],
) -> RowStyle | None:
    """Read back the status cell and colour the row accordingly.

    The status read is retried up to `attempts` times because a freshly
    written cell may not be visible immediately. Failures are logged and
    swallowed; formatting never undoes a committed write.

    Args:
        row_store: Row store.
        row_id: Written row identifier.
        attempts: Maximum status read attempts.
        backoff_seconds: Sleep between read attempts.
        sleep: Sleep function.

    Returns:
        RowStyle | None: Applied style, None when styling failed.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    status = ""
    for attempt in range(1, max(attempts, 1) + 1):
        try:
            status = row_store.db_row_read_cell(row_id, COLUMN_STATUS).strip()
        except Exception:
            logger.warning("status read-back failed for row %s on attempt %s", row_id, attempt, exc_info=True)
        if status:
            break
        if attempt < attempts:
            sleep(backoff_seconds)

    style = job_style_for_status(status)
    try:
        row_store.db_row_apply_style(row_id, style)
    except Exception:
        logger.warning("row styling failed for row %s", row_id, exc_info=True)
        return None
    return style


__all__ = ["DEFAULT_ROW_STYLE", "STATUS_ROW_STYLES", "job_apply_status_style", "job_style_for_status"]
