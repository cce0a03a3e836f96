"""m2_access_tables

Revision ID: 7c2e9d4b1a55
Revises: 3a1f0c2b7d10
Create Date: 2026-09-02 11:40:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "7c2e9d4b1a55"
down_revision: str | None = "3a1f0c2b7d10"
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "grants",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("account_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("grant_type", sa.String(16), nullable=False),
        sa.Column("course_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("player_card_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("month_number", sa.SmallInteger(), nullable=True),
        sa.Column("package_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("source_kind", sa.String(16), nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("grant_type IN ('COURSE','CARD','MONTH')", name="ck_grants_type"),
        sa.CheckConstraint("status IN ('active','inactive','expired')", name="ck_grants_status"),
        sa.CheckConstraint(
            "((grant_type = 'COURSE' AND player_card_id IS NULL AND month_number IS NULL) "
            "OR (grant_type = 'CARD' AND player_card_id IS NOT NULL AND month_number IS NULL) "
            "OR (grant_type = 'MONTH' AND player_card_id IS NULL AND month_number > 0))",
            name="ck_grants_type_payload_consistency",
        ),
        sa.CheckConstraint("end_at IS NULL OR end_at >= start_at", name="ck_grants_window_ordered"),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["player_card_id"], ["player_cards.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["package_id"], ["packages.id"], ondelete="SET NULL"),
    )
    op.create_index("idx_grants_account", "grants", ["account_id"])
    op.create_index("idx_grants_course", "grants", ["course_id"])
    op.create_index("idx_grants_end_at", "grants", ["end_at"])
    op.create_index(
        "uq_grants_course_subject",
        "grants",
        ["account_id", "course_id"],
        unique=True,
        postgresql_where=sa.text("grant_type = 'COURSE'"),
    )
    op.create_index(
        "uq_grants_card_subject",
        "grants",
        ["account_id", "player_card_id"],
        unique=True,
        postgresql_where=sa.text("grant_type = 'CARD'"),
    )
    op.create_index(
        "uq_grants_month_subject",
        "grants",
        ["account_id", "course_id", "month_number"],
        unique=True,
        postgresql_where=sa.text("grant_type = 'MONTH'"),
    )

    op.create_table(
        "device_bans",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("device_id", sa.String(128), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("banned_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_device_bans_device", "device_bans", ["device_id"])
    op.create_index(
        "uq_device_bans_active_device",
        "device_bans",
        ["device_id"],
        unique=True,
        postgresql_where=sa.text("active"),
    )

    op.create_table(
        "account_bans",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("account_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("banned_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_account_bans_account", "account_bans", ["account_id"])
    op.create_index(
        "uq_account_bans_active_account",
        "account_bans",
        ["account_id"],
        unique=True,
        postgresql_where=sa.text("active"),
    )

    op.create_table(
        "device_associations",
        sa.Column("device_id", sa.String(128), nullable=False),
        sa.Column("account_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("first_seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("device_id", "account_id"),
    )
    op.create_index("idx_device_associations_account", "device_associations", ["account_id"])
    op.create_index("idx_device_associations_last_seen", "device_associations", ["last_seen_at"])

    op.create_table(
        "redemption_codes",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("code", sa.String(32), nullable=False),
        sa.Column("scope_type", sa.String(16), nullable=False),
        sa.Column("course_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("package_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("player_card_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("month_number", sa.SmallInteger(), nullable=True),
        sa.Column("max_redemptions", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("redemptions", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("duration_days", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "scope_type IN ('COURSE','PACKAGE_COURSE','CARD','MONTH')",
            name="ck_redemption_codes_scope_type",
        ),
        sa.CheckConstraint(
            "((scope_type = 'COURSE' AND package_id IS NULL AND player_card_id IS NULL "
            "AND month_number IS NULL) "
            "OR (scope_type = 'PACKAGE_COURSE' AND package_id IS NOT NULL "
            "AND player_card_id IS NULL AND month_number IS NULL) "
            "OR (scope_type = 'CARD' AND player_card_id IS NOT NULL AND month_number IS NULL) "
            "OR (scope_type = 'MONTH' AND player_card_id IS NULL AND month_number > 0))",
            name="ck_redemption_codes_scope_payload_consistency",
        ),
        sa.CheckConstraint("max_redemptions > 0", name="ck_redemption_codes_max_positive"),
        sa.CheckConstraint("duration_days > 0", name="ck_redemption_codes_duration_positive"),
        sa.CheckConstraint(
            "redemptions >= 0 AND redemptions <= max_redemptions",
            name="ck_redemption_codes_redemptions_le_max",
        ),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["package_id"], ["packages.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["player_card_id"], ["player_cards.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("code", name="redemption_codes_code_key"),
    )
    op.create_index("idx_redemption_codes_course", "redemption_codes", ["course_id"])

    op.create_table(
        "code_redemptions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("code_id", sa.BigInteger(), nullable=False),
        sa.Column("account_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("grant_id", sa.BigInteger(), nullable=False),
        sa.Column("device_id", sa.String(128), nullable=True),
        sa.Column("redeemed_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["code_id"], ["redemption_codes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["grant_id"], ["grants.id"]),
        sa.UniqueConstraint("code_id", "account_id", name="uq_code_redemptions_code_account"),
    )
    op.create_index("idx_code_redemptions_account", "code_redemptions", ["account_id"])


def downgrade() -> None:
    op.drop_index("idx_code_redemptions_account", table_name="code_redemptions")
    op.drop_table("code_redemptions")
    op.drop_index("idx_redemption_codes_course", table_name="redemption_codes")
    op.drop_table("redemption_codes")
    op.drop_index("idx_device_associations_last_seen", table_name="device_associations")
    op.drop_index("idx_device_associations_account", table_name="device_associations")
    op.drop_table("device_associations")
    op.drop_index("uq_account_bans_active_account", table_name="account_bans")
    op.drop_index("idx_account_bans_account", table_name="account_bans")
    op.drop_table("account_bans")
    op.drop_index("uq_device_bans_active_device", table_name="device_bans")
    op.drop_index("idx_device_bans_device", table_name="device_bans")
    op.drop_table("device_bans")
    op.drop_index("uq_grants_month_subject", table_name="grants")
    op.drop_index("uq_grants_card_subject", table_name="grants")
    op.drop_index("uq_grants_course_subject", table_name="grants")
    op.drop_index("idx_grants_end_at", table_name="grants")
    op.drop_index("idx_grants_course", table_name="grants")
    op.drop_index("idx_grants_account", table_name="grants")
    op.drop_table("grants")
