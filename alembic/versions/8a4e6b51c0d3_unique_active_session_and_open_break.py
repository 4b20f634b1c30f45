"""unique active session and open break

Revision ID: 8a4e6b51c0d3
Revises: 3c1f0a9d2b7e
Create Date: 2026-10-19 09:40:02.118530

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8a4e6b51c0d3'
down_revision: Union[str, Sequence[str], None] = '3c1f0a9d2b7e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE = "status IN ('ONGOING', 'PAUSED')"
OPEN = "end_time IS NULL"


def upgrade() -> None:
    """Upgrade schema."""
    op.create_index(
        "uq_work_sessions_active",
        "work_sessions",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text(ACTIVE),
        sqlite_where=sa.text(ACTIVE),
    )
    op.create_index(
        "uq_breaks_open",
        "breaks",
        ["work_session_id"],
        unique=True,
        postgresql_where=sa.text(OPEN),
        sqlite_where=sa.text(OPEN),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("uq_breaks_open", table_name="breaks")
    op.drop_index("uq_work_sessions_active", table_name="work_sessions")
