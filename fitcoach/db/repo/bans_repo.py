from __future__ import annotations

from collections.abc import Collection
from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, select, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.db.models.account_bans import AccountBan
from fitcoach.db.models.device_bans import DeviceBan


class BansRepo:
    @staticmethod
    async def get_enforced_device_ban(
        session: AsyncSession,
        *,
        device_id: str,
        now_utc: datetime,
    ) -> DeviceBan | None:
        stmt = select(DeviceBan).where(
            DeviceBan.device_id == device_id,
            DeviceBan.active.is_(True),
            or_(DeviceBan.banned_until.is_(None), DeviceBan.banned_until > now_utc),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_enforced_account_ban(
        session: AsyncSession,
        *,
        account_id: UUID,
        now_utc: datetime,
    ) -> AccountBan | None:
        stmt = select(AccountBan).where(
            AccountBan.account_id == account_id,
            AccountBan.active.is_(True),
            or_(AccountBan.banned_until.is_(None), AccountBan.banned_until > now_utc),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_banned_device_ids(
        session: AsyncSession,
        *,
        device_ids: Collection[str],
        now_utc: datetime,
    ) -> set[str]:
        if not device_ids:
            return set()
        stmt = select(DeviceBan.device_id).where(
            DeviceBan.device_id.in_(tuple(device_ids)),
            DeviceBan.active.is_(True),
            or_(DeviceBan.banned_until.is_(None), DeviceBan.banned_until > now_utc),
        )
        result = await session.execute(stmt)
        return set(result.scalars().all())

    @staticmethod
    async def upsert_device_ban(
        session: AsyncSession,
        *,
        device_id: str,
        reason: str | None,
        banned_until: datetime | None,
        now_utc: datetime,
    ) -> int:
        stmt = pg_insert(DeviceBan).values(
            device_id=device_id,
            active=True,
            reason=reason,
            banned_until=banned_until,
            created_at=now_utc,
            updated_at=now_utc,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[DeviceBan.device_id],
            index_where=text("active"),
            set_={
                "reason": stmt.excluded.reason,
                "banned_until": stmt.excluded.banned_until,
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(DeviceBan.id)
        result = await session.execute(stmt)
        return int(result.scalar_one())

    @staticmethod
    async def upsert_account_ban(
        session: AsyncSession,
        *,
        account_id: UUID,
        reason: str | None,
        banned_until: datetime | None,
        now_utc: datetime,
    ) -> int:
        stmt = pg_insert(AccountBan).values(
            account_id=account_id,
            active=True,
            reason=reason,
            banned_until=banned_until,
            created_at=now_utc,
            updated_at=now_utc,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[AccountBan.account_id],
            index_where=text("active"),
            set_={
                "reason": stmt.excluded.reason,
                "banned_until": stmt.excluded.banned_until,
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(AccountBan.id)
        result = await session.execute(stmt)
        return int(result.scalar_one())

    @staticmethod
    async def deactivate_device_ban(
        session: AsyncSession,
        *,
        device_id: str,
        now_utc: datetime,
    ) -> int:
        stmt = (
            update(DeviceBan)
            .where(DeviceBan.device_id == device_id, DeviceBan.active.is_(True))
            .values(active=False, updated_at=now_utc)
        )
        result = await session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0)

    @staticmethod
    async def deactivate_account_ban(
        session: AsyncSession,
        *,
        account_id: UUID,
        now_utc: datetime,
    ) -> int:
        stmt = (
            update(AccountBan)
            .where(AccountBan.account_id == account_id, AccountBan.active.is_(True))
            .values(active=False, updated_at=now_utc)
        )
        result = await session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0)

    @staticmethod
    async def deactivate_lapsed(session: AsyncSession, *, now_utc: datetime) -> tuple[int, int]:
        device_stmt = (
            update(DeviceBan)
            .where(
                DeviceBan.active.is_(True),
                DeviceBan.banned_until.is_not(None),
                DeviceBan.banned_until <= now_utc,
            )
            .values(active=False, updated_at=now_utc)
        )
        account_stmt = (
            update(AccountBan)
            .where(
                AccountBan.active.is_(True),
                AccountBan.banned_until.is_not(None),
                AccountBan.banned_until <= now_utc,
            )
            .values(active=False, updated_at=now_utc)
        )
        device_result = await session.execute(device_stmt)
        account_result = await session.execute(account_stmt)
        return (
            int(getattr(device_result, "rowcount", 0) or 0),
            int(getattr(account_result, "rowcount", 0) or 0),
        )
