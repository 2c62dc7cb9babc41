"""initial schema

Revision ID: 20251217_0001
Revises:
Create Date: 2025-12-17
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20251217_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("rate_per_hour", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("rate_per_hour > 0", name="ck_roles_rate_per_hour_positive"),
    )

    op.create_table(
        "consultants",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column(
            "role_id",
            sa.Integer(),
            sa.ForeignKey("roles.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_consultants_role_id", "consultants", ["role_id"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.String(length=2000), nullable=True),
        sa.Column("duration_hours", sa.Numeric(8, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("duration_hours >= 0", name="ck_tasks_duration_hours_non_negative"),
    )

    op.create_table(
        "task_assignments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column(
            "consultant_id",
            sa.Integer(),
            sa.ForeignKey("consultants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("task_id", sa.Integer(), sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("consultant_id", "task_id", name="uq_task_assignments_consultant_task"),
    )
    op.create_index("ix_task_assignments_task_id", "task_assignments", ["task_id"])

    op.create_table(
        "work_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column(
            "consultant_id",
            sa.Integer(),
            sa.ForeignKey("consultants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("task_id", sa.Integer(), sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("work_date", sa.Date(), nullable=False),
        sa.Column("hours_worked", sa.Numeric(5, 2), nullable=False),
        sa.Column("rate_per_hour_at_time_of_work", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("hours_worked > 0", name="ck_work_entries_hours_worked_positive"),
        sa.CheckConstraint(
            "rate_per_hour_at_time_of_work > 0",
            name="ck_work_entries_rate_per_hour_at_time_of_work_positive",
        ),
    )
    op.create_index(
        "ix_work_entries_consultant_work_date",
        "work_entries",
        ["consultant_id", "work_date"],
    )
    op.create_index("ix_work_entries_task_id", "work_entries", ["task_id"])


def downgrade() -> None:
    op.drop_index("ix_work_entries_task_id", table_name="work_entries")
    op.drop_index("ix_work_entries_consultant_work_date", table_name="work_entries")
    op.drop_table("work_entries")

    op.drop_index("ix_task_assignments_task_id", table_name="task_assignments")
    op.drop_table("task_assignments")

    op.drop_table("tasks")

    op.drop_index("ix_consultants_role_id", table_name="consultants")
    op.drop_table("consultants")

    op.drop_table("roles")
