from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Index, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from fitcoach.db.models.base import Base


class DeviceAssociation(Base):
    __tablename__ = "device_associations"
    __table_args__ = (
        Index("idx_device_associations_account", "account_id"),
        Index("idx_device_associations_last_seen", "last_seen_at"),
    )

    device_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    account_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    first_seen_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_seen_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
