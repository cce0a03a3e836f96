"""m1_catalog_tree

Revision ID: 3a1f0c2b7d10
Revises:
Create Date: 2026-09-02 10:15:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "3a1f0c2b7d10"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "courses",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("slug", sa.String(128), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("slug", name="courses_slug_key"),
    )

    op.create_table(
        "packages",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("slug", sa.String(128), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("slug", name="packages_slug_key"),
    )

    op.create_table(
        "package_courses",
        sa.Column("package_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("course_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["package_id"], ["packages.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("package_id", "course_id"),
    )
    op.create_index("idx_package_courses_course", "package_courses", ["course_id"])

    op.create_table(
        "age_groups",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("course_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_age_groups_course", "age_groups", ["course_id", "sort_order"])

    op.create_table(
        "package_course_age_groups",
        sa.Column("package_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("course_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("age_group_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(["package_id"], ["packages.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["age_group_id"], ["age_groups.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("package_id", "course_id", "age_group_id"),
    )

    op.create_table(
        "player_cards",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("age_group_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("age", sa.SmallInteger(), nullable=True),
        sa.Column("height_cm", sa.Numeric(5, 1), nullable=True),
        sa.Column("weight_kg", sa.Numeric(5, 1), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["age_group_id"], ["age_groups.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_player_cards_age_group", "player_cards", ["age_group_id", "sort_order"])

    op.create_table(
        "months",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("age_group_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("month_number", sa.SmallInteger(), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.CheckConstraint("month_number > 0", name="ck_months_month_number_positive"),
        sa.ForeignKeyConstraint(["age_group_id"], ["age_groups.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_months_age_group", "months", ["age_group_id", "month_number"])

    op.create_table(
        "days",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("month_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("day_number", sa.SmallInteger(), nullable=True),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["month_id"], ["months.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_days_month", "days", ["month_id", "sort_order"])

    op.create_table(
        "videos",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("day_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("duration_sec", sa.Integer(), nullable=True),
        sa.Column("is_free_preview", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["day_id"], ["days.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_videos_day", "videos", ["day_id", "sort_order"])
    op.create_index(
        "idx_videos_free_preview",
        "videos",
        ["day_id"],
        postgresql_where=sa.text("is_free_preview"),
    )


def downgrade() -> None:
    op.drop_index("idx_videos_free_preview", table_name="videos")
    op.drop_index("idx_videos_day", table_name="videos")
    op.drop_table("videos")
    op.drop_index("idx_days_month", table_name="days")
    op.drop_table("days")
    op.drop_index("idx_months_age_group", table_name="months")
    op.drop_table("months")
    op.drop_index("idx_player_cards_age_group", table_name="player_cards")
    op.drop_table("player_cards")
    op.drop_table("package_course_age_groups")
    op.drop_index("idx_age_groups_course", table_name="age_groups")
    op.drop_table("age_groups")
    op.drop_index("idx_package_courses_course", table_name="package_courses")
    op.drop_table("package_courses")
    op.drop_table("packages")
    op.drop_table("courses")
