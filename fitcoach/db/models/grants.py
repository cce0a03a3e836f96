from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    SmallInteger,
    String,
    text,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from fitcoach.db.models.base import Base


class Grant(Base):
    __tablename__ = "grants"
    __table_args__ = (
        CheckConstraint(
            "grant_type IN ('COURSE','CARD','MONTH')",
            name="ck_grants_type",
        ),
        CheckConstraint(
            "status IN ('active','inactive','expired')",
            name="ck_grants_status",
        ),
        CheckConstraint(
            "((grant_type = 'COURSE' AND player_card_id IS NULL AND month_number IS NULL) "
            "OR (grant_type = 'CARD' AND player_card_id IS NOT NULL AND month_number IS NULL) "
            "OR (grant_type = 'MONTH' AND player_card_id IS NULL AND month_number > 0))",
            name="ck_grants_type_payload_consistency",
        ),
        CheckConstraint(
            "end_at IS NULL OR end_at >= start_at",
            name="ck_grants_window_ordered",
        ),
        Index("idx_grants_account", "account_id"),
        Index("idx_grants_course", "course_id"),
        Index("idx_grants_end_at", "end_at"),
        Index(
            "uq_grants_course_subject",
            "account_id",
            "course_id",
            unique=True,
            postgresql_where=text("grant_type = 'COURSE'"),
        ),
        Index(
            "uq_grants_card_subject",
            "account_id",
            "player_card_id",
            unique=True,
            postgresql_where=text("grant_type = 'CARD'"),
        ),
        Index(
            "uq_grants_month_subject",
            "account_id",
            "course_id",
            "month_number",
            unique=True,
            postgresql_where=text("grant_type = 'MONTH'"),
        ),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    account_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    grant_type: Mapped[str] = mapped_column(String(16), nullable=False)
    course_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
    )
    player_card_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("player_cards.id", ondelete="CASCADE"),
        nullable=True,
    )
    month_number: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    package_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("packages.id", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    source_kind: Mapped[str] = mapped_column(String(16), nullable=False)
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
