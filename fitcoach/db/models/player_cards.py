from __future__ import annotations

from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, Numeric, SmallInteger, Text, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from fitcoach.db.models.base import Base


class PlayerCard(Base):
    __tablename__ = "player_cards"
    __table_args__ = (Index("idx_player_cards_age_group", "age_group_id", "sort_order"),)

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    age_group_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("age_groups.id", ondelete="CASCADE"),
        nullable=False,
    )
    age: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    height_cm: Mapped[float | None] = mapped_column(Numeric(5, 1, asdecimal=False), nullable=True)
    weight_kg: Mapped[float | None] = mapped_column(Numeric(5, 1, asdecimal=False), nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
