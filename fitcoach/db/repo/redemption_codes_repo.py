from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.db.models.code_redemptions import CodeRedemption
from fitcoach.db.models.redemption_codes import RedemptionCode


class RedemptionCodesRepo:
    @staticmethod
    async def get_by_code_for_update(session: AsyncSession, code: str) -> RedemptionCode | None:
        stmt = select(RedemptionCode).where(RedemptionCode.code == code).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def consume_one(session: AsyncSession, *, code_id: int, now_utc: datetime) -> bool:
        stmt = (
            update(RedemptionCode)
            .where(
                RedemptionCode.id == code_id,
                RedemptionCode.redemptions < RedemptionCode.max_redemptions,
            )
            .values(redemptions=RedemptionCode.redemptions + 1, updated_at=now_utc)
            .returning(RedemptionCode.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def has_account_redeemed(
        session: AsyncSession,
        *,
        code_id: int,
        account_id: UUID,
    ) -> bool:
        stmt = select(CodeRedemption.id).where(
            CodeRedemption.code_id == code_id,
            CodeRedemption.account_id == account_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def create_redemption(
        session: AsyncSession,
        *,
        redemption: CodeRedemption,
    ) -> CodeRedemption:
        session.add(redemption)
        await session.flush()
        return redemption

    @staticmethod
    async def insert_codes(session: AsyncSession, *, rows: list[dict[str, object]]) -> set[str]:
        if not rows:
            return set()
        stmt = (
            pg_insert(RedemptionCode)
            .values(rows)
            .on_conflict_do_nothing(index_elements=[RedemptionCode.code])
            .returning(RedemptionCode.code)
        )
        result = await session.execute(stmt)
        return set(result.scalars().all())
