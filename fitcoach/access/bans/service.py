from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fitcoach.access.bans.types import BanResult
from fitcoach.db.repo.bans_repo import BansRepo
from fitcoach.db.session import SessionLocal

logger = structlog.get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BanRegistry:
    """Device and account bans backed by ``device_bans`` / ``account_bans``.

    Reads never swallow store errors: whether a failure means "not banned"
    or "banned" depends on the caller, see ``RequestGate`` and the resolver.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory or SessionLocal

    async def is_device_banned(self, device_id: str, *, now_utc: datetime | None = None) -> bool:
        async with self._session_factory() as session:
            ban = await BansRepo.get_enforced_device_ban(
                session,
                device_id=device_id,
                now_utc=now_utc or _utc_now(),
            )
        return ban is not None

    async def is_account_banned(self, account_id: UUID, *, now_utc: datetime | None = None) -> bool:
        async with self._session_factory() as session:
            ban = await BansRepo.get_enforced_account_ban(
                session,
                account_id=account_id,
                now_utc=now_utc or _utc_now(),
            )
        return ban is not None

    async def ban_device(
        self,
        device_id: str,
        *,
        reason: str | None = None,
        banned_until: datetime | None = None,
        now_utc: datetime | None = None,
    ) -> BanResult:
        now_utc = now_utc or _utc_now()
        async with self._session_factory.begin() as session:
            ban_id = await BansRepo.upsert_device_ban(
                session,
                device_id=device_id,
                reason=reason,
                banned_until=banned_until,
                now_utc=now_utc,
            )
        logger.info("device_banned", ban_id=ban_id, device_id=device_id, reason=reason)
        return BanResult(ban_id=ban_id, key=device_id, banned_until=banned_until, reason=reason)

    async def unban_device(self, device_id: str, *, now_utc: datetime | None = None) -> bool:
        async with self._session_factory.begin() as session:
            changed = await BansRepo.deactivate_device_ban(
                session,
                device_id=device_id,
                now_utc=now_utc or _utc_now(),
            )
        logger.info("device_unbanned", device_id=device_id, changed=changed > 0)
        return changed > 0

    async def ban_account(
        self,
        account_id: UUID,
        *,
        reason: str | None = None,
        banned_until: datetime | None = None,
        now_utc: datetime | None = None,
    ) -> BanResult:
        now_utc = now_utc or _utc_now()
        async with self._session_factory.begin() as session:
            ban_id = await BansRepo.upsert_account_ban(
                session,
                account_id=account_id,
                reason=reason,
                banned_until=banned_until,
                now_utc=now_utc,
            )
        logger.info("account_banned", ban_id=ban_id, account_id=str(account_id), reason=reason)
        return BanResult(
            ban_id=ban_id,
            key=str(account_id),
            banned_until=banned_until,
            reason=reason,
        )

    async def unban_account(self, account_id: UUID, *, now_utc: datetime | None = None) -> bool:
        async with self._session_factory.begin() as session:
            changed = await BansRepo.deactivate_account_ban(
                session,
                account_id=account_id,
                now_utc=now_utc or _utc_now(),
            )
        logger.info("account_unbanned", account_id=str(account_id), changed=changed > 0)
        return changed > 0

    async def deactivate_lapsed_bans(self, *, now_utc: datetime | None = None) -> tuple[int, int]:
        async with self._session_factory.begin() as session:
            return await BansRepo.deactivate_lapsed(session, now_utc=now_utc or _utc_now())
