from __future__ import annotations

from datetime import datetime

from sqlalchemy import BOOLEAN, BigInteger, DateTime, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from fitcoach.db.models.base import Base


class DeviceBan(Base):
    __tablename__ = "device_bans"
    __table_args__ = (
        Index("idx_device_bans_device", "device_id"),
        Index(
            "uq_device_bans_active_device",
            "device_id",
            unique=True,
            postgresql_where=text("active"),
        ),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    device_id: Mapped[str] = mapped_column(String(128), nullable=False)
    active: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("true"))
    banned_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
