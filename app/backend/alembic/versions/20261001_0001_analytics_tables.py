"""analytics plugin tables

Revision ID: 20261001_0001
Revises:
Create Date: 2026-10-01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261001_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "ta_teams",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("personal_projects_label", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "ta_team_memberships",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("ta_teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False, server_default="member"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.CheckConstraint("role IN ('lead', 'member')", name="ck_ta_team_memberships_role"),
        sa.CheckConstraint("end_date IS NULL OR end_date >= start_date", name="ck_ta_team_memberships_dates"),
    )
    op.create_index(
        "ix_ta_team_memberships_team_dates",
        "ta_team_memberships",
        ["team_id", "user_id", "start_date", "end_date"],
    )

    op.create_table(
        "ta_team_projects",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("ta_teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_personal", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.CheckConstraint("end_date IS NULL OR end_date >= start_date", name="ck_ta_team_projects_dates"),
    )
    op.create_index(
        "ix_ta_team_projects_team_dates",
        "ta_team_projects",
        ["team_id", "project_id", "start_date", "end_date"],
    )

    op.create_table(
        "ta_team_settings",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("setting_type", sa.String(length=16), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.CheckConstraint("setting_type IN ('exclusion', 'super_user')", name="ck_ta_team_settings_type"),
    )
    op.create_unique_constraint("uq_ta_team_settings_user_type", "ta_team_settings", ["user_id", "setting_type"])

    op.create_table(
        "custom_holidays",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.CheckConstraint("end_date >= start_date", name="ck_custom_holidays_dates"),
    )
    op.create_index("ix_custom_holidays_range", "custom_holidays", ["start_date", "end_date"])


def downgrade() -> None:
    op.drop_index("ix_custom_holidays_range", table_name="custom_holidays")
    op.drop_table("custom_holidays")

    op.drop_constraint("uq_ta_team_settings_user_type", "ta_team_settings", type_="unique")
    op.drop_table("ta_team_settings")

    op.drop_index("ix_ta_team_projects_team_dates", table_name="ta_team_projects")
    op.drop_table("ta_team_projects")

    op.drop_index("ix_ta_team_memberships_team_dates", table_name="ta_team_memberships")
    op.drop_table("ta_team_memberships")

    op.drop_table("ta_teams")
