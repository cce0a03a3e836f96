from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from fitcoach.db.models.base import Base


class CodeRedemption(Base):
    __tablename__ = "code_redemptions"
    __table_args__ = (
        UniqueConstraint("code_id", "account_id", name="uq_code_redemptions_code_account"),
        Index("idx_code_redemptions_account", "account_id"),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    code_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("redemption_codes.id", ondelete="CASCADE"),
        nullable=False,
    )
    account_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    grant_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("grants.id"), nullable=False)
    device_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    redeemed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
