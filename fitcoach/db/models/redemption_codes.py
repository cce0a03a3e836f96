from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    text,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from fitcoach.db.models.base import Base


class RedemptionCode(Base):
    __tablename__ = "redemption_codes"
    __table_args__ = (
        CheckConstraint(
            "scope_type IN ('COURSE','PACKAGE_COURSE','CARD','MONTH')",
            name="ck_redemption_codes_scope_type",
        ),
        CheckConstraint(
            "((scope_type = 'COURSE' AND package_id IS NULL AND player_card_id IS NULL "
            "AND month_number IS NULL) "
            "OR (scope_type = 'PACKAGE_COURSE' AND package_id IS NOT NULL "
            "AND player_card_id IS NULL AND month_number IS NULL) "
            "OR (scope_type = 'CARD' AND player_card_id IS NOT NULL AND month_number IS NULL) "
            "OR (scope_type = 'MONTH' AND player_card_id IS NULL AND month_number > 0))",
            name="ck_redemption_codes_scope_payload_consistency",
        ),
        CheckConstraint("max_redemptions > 0", name="ck_redemption_codes_max_positive"),
        CheckConstraint("duration_days > 0", name="ck_redemption_codes_duration_positive"),
        CheckConstraint(
            "redemptions >= 0 AND redemptions <= max_redemptions",
            name="ck_redemption_codes_redemptions_le_max",
        ),
        Index("idx_redemption_codes_course", "course_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    scope_type: Mapped[str] = mapped_column(String(16), nullable=False)
    course_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
    )
    package_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("packages.id", ondelete="CASCADE"),
        nullable=True,
    )
    player_card_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("player_cards.id", ondelete="CASCADE"),
        nullable=True,
    )
    month_number: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    max_redemptions: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
    redemptions: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
