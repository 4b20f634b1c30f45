"""create worktime tables

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2026-10-19 09:12:44.301822

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

changes_type = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("country", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_companies_id", "companies", ["id"], unique=False)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=False, server_default="USER"),
        sa.Column("weekly_hours_target", sa.Float(), nullable=False, server_default="40"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.CheckConstraint("role IN ('ADMIN', 'USER')", name="ck_users_role"),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=False)
    op.create_index("ix_users_company_id", "users", ["company_id"], unique=False)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "work_sessions",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("total_duration", sa.Float(), nullable=True),
        sa.Column("break_duration", sa.Float(), nullable=True),
        sa.Column("net_duration", sa.Float(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("project", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.CheckConstraint(
            "status IN ('ONGOING', 'PAUSED', 'COMPLETED')",
            name="ck_work_sessions_status",
        ),
    )
    op.create_index("ix_work_sessions_id", "work_sessions", ["id"], unique=False)
    op.create_index("ix_work_sessions_user_id", "work_sessions", ["user_id"], unique=False)
    op.create_index("ix_work_sessions_status", "work_sessions", ["status"], unique=False)
    op.create_index("ix_work_sessions_user_start", "work_sessions", ["user_id", "start_time"], unique=False)

    op.create_table(
        "breaks",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("work_session_id", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration", sa.Float(), nullable=True),
        sa.Column("type", sa.String(), nullable=False, server_default="UNPAID"),
        sa.Column("note", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["work_session_id"], ["work_sessions.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_breaks_id", "breaks", ["id"], unique=False)
    op.create_index("ix_breaks_work_session_id", "breaks", ["work_session_id"], unique=False)

    op.create_table(
        "work_session_edits",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("work_session_id", sa.Integer(), nullable=False),
        sa.Column("edited_by", sa.Integer(), nullable=False),
        sa.Column("changes", changes_type, nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("edited_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["work_session_id"], ["work_sessions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["edited_by"], ["users.id"]),
    )
    op.create_index("ix_work_session_edits_id", "work_session_edits", ["id"], unique=False)
    op.create_index("ix_work_session_edits_work_session_id", "work_session_edits", ["work_session_id"], unique=False)
    op.create_index("ix_work_session_edits_edited_by", "work_session_edits", ["edited_by"], unique=False)
    op.create_index("ix_work_session_edits_edited_at", "work_session_edits", ["edited_at"], unique=False)

    op.create_table(
        "time_entries",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.CheckConstraint("type IN ('START', 'STOP')", name="ck_time_entries_type"),
    )
    op.create_index("ix_time_entries_id", "time_entries", ["id"], unique=False)
    op.create_index("ix_time_entries_user_id", "time_entries", ["user_id"], unique=False)
    op.create_index("ix_time_entries_time", "time_entries", ["time"], unique=False)

    op.create_table(
        "time_entry_edits",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("time_entry_id", sa.Integer(), nullable=False),
        sa.Column("edited_by", sa.Integer(), nullable=False),
        sa.Column("changes", changes_type, nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("edited_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["time_entry_id"], ["time_entries.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["edited_by"], ["users.id"]),
    )
    op.create_index("ix_time_entry_edits_id", "time_entry_edits", ["id"], unique=False)
    op.create_index("ix_time_entry_edits_time_entry_id", "time_entry_edits", ["time_entry_id"], unique=False)
    op.create_index("ix_time_entry_edits_edited_by", "time_entry_edits", ["edited_by"], unique=False)
    op.create_index("ix_time_entry_edits_edited_at", "time_entry_edits", ["edited_at"], unique=False)

    op.create_table(
        "legacy_migrations",
        sa.Column("user_id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("sessions_created", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("orphans_flagged", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("migrated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )

    op.create_table(
        "invites",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("token", sa.String(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="USER"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
    )
    op.create_index("ix_invites_id", "invites", ["id"], unique=False)
    op.create_index("ix_invites_email", "invites", ["email"], unique=False)
    op.create_index("ix_invites_token", "invites", ["token"], unique=True)
    op.create_index("ix_invites_company_id", "invites", ["company_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("invites")
    op.drop_table("legacy_migrations")
    op.drop_table("time_entry_edits")
    op.drop_table("time_entries")
    op.drop_table("work_session_edits")
    op.drop_table("breaks")
    op.drop_table("work_sessions")
    op.drop_table("users")
    op.drop_table("companies")
