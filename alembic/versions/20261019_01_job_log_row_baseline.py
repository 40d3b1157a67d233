"""Job log row baseline

Revision ID: 20261019_01
Revises: None
Create Date: 2026-10-19
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from cnclog.db.interfaces import JOB_LOG_COLUMNS


# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "job_log_row",
        sa.Column("row_id", sa.Integer(), primary_key=True, autoincrement=True),
        *[
            sa.Column(column_name, sa.Text(), nullable=False, server_default=sa.text("''"))
            for column_name in JOB_LOG_COLUMNS
        ],
        sa.Column("style_background", sa.Text(), nullable=True),
        sa.Column("style_font_color", sa.Text(), nullable=True),
        sa.Column("style_font_weight", sa.Text(), nullable=True),
        sa.Column(
            "updated_at_utc",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index("ix_job_log_row_status", "job_log_row", ["status"])
    op.create_index("ix_job_log_row_project_part", "job_log_row", ["project_no", "part_name"])


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("ix_job_log_row_project_part", table_name="job_log_row")
    op.drop_index("ix_job_log_row_status", table_name="job_log_row")
    op.drop_table("job_log_row")
