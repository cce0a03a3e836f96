from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.db.models.device_associations import DeviceAssociation


class DevicesRepo:
    @staticmethod
    async def upsert_association(
        session: AsyncSession,
        *,
        device_id: str,
        account_id: UUID,
        now_utc: datetime,
    ) -> None:
        stmt = pg_insert(DeviceAssociation).values(
            device_id=device_id,
            account_id=account_id,
            first_seen_at=now_utc,
            last_seen_at=now_utc,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[DeviceAssociation.device_id, DeviceAssociation.account_id],
            set_={"last_seen_at": stmt.excluded.last_seen_at},
        )
        await session.execute(stmt)

    @staticmethod
    async def count_distinct_devices(session: AsyncSession, *, account_id: UUID) -> int:
        stmt = select(func.count(func.distinct(DeviceAssociation.device_id))).where(
            DeviceAssociation.account_id == account_id
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def list_for_account(
        session: AsyncSession,
        *,
        account_id: UUID,
    ) -> list[DeviceAssociation]:
        stmt = (
            select(DeviceAssociation)
            .where(DeviceAssociation.account_id == account_id)
            .order_by(DeviceAssociation.last_seen_at.desc(), DeviceAssociation.device_id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def delete_stale(session: AsyncSession, *, older_than: datetime) -> int:
        stmt = delete(DeviceAssociation).where(DeviceAssociation.last_seen_at < older_than)
        result = await session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0)
