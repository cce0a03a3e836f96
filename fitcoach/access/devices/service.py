from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fitcoach.access.devices.errors import (
    DeviceTrackBannedError,
    DeviceTrackTooManyDevicesError,
)
from fitcoach.access.devices.types import TrackedDevice, TrackResult
from fitcoach.core.config import get_settings
from fitcoach.db.repo.bans_repo import BansRepo
from fitcoach.db.repo.devices_repo import DevicesRepo
from fitcoach.db.session import SessionLocal

logger = structlog.get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DeviceTracker:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        max_devices: int | None = None,
    ) -> None:
        self._session_factory = session_factory or SessionLocal
        self._max_devices = max_devices

    @property
    def max_devices(self) -> int:
        if self._max_devices is not None:
            return self._max_devices
        return get_settings().max_devices_per_account

    async def track_device(
        self,
        *,
        account_id: UUID,
        device_id: str,
        now_utc: datetime | None = None,
    ) -> TrackResult:
        """Record that ``device_id`` is used by ``account_id`` and enforce the device limit.

        The association is committed before any check runs, so a rejected
        device still counts towards the account until it is pruned.
        """
        now_utc = now_utc or _utc_now()
        async with self._session_factory.begin() as session:
            await DevicesRepo.upsert_association(
                session,
                device_id=device_id,
                account_id=account_id,
                now_utc=now_utc,
            )

        async with self._session_factory() as session:
            account_ban = await BansRepo.get_enforced_account_ban(
                session,
                account_id=account_id,
                now_utc=now_utc,
            )
            device_ban = None
            if account_ban is None:
                device_ban = await BansRepo.get_enforced_device_ban(
                    session,
                    device_id=device_id,
                    now_utc=now_utc,
                )
            if account_ban is not None or device_ban is not None:
                logger.warning(
                    "device_track_banned",
                    account_id=str(account_id),
                    device_id=device_id,
                    account_banned=account_ban is not None,
                )
                raise DeviceTrackBannedError

            device_count = await DevicesRepo.count_distinct_devices(
                session,
                account_id=account_id,
            )

        max_devices = self.max_devices
        if device_count > max_devices:
            logger.warning(
                "device_limit_exceeded",
                account_id=str(account_id),
                device_id=device_id,
                device_count=device_count,
                max_devices=max_devices,
            )
            raise DeviceTrackTooManyDevicesError(device_count=device_count, max_devices=max_devices)

        logger.info(
            "device_tracked",
            account_id=str(account_id),
            device_id=device_id,
            device_count=device_count,
        )
        return TrackResult(device_count=device_count, max_devices=max_devices)

    async def list_devices(
        self,
        *,
        account_id: UUID,
        now_utc: datetime | None = None,
    ) -> list[TrackedDevice]:
        now_utc = now_utc or _utc_now()
        async with self._session_factory() as session:
            associations = await DevicesRepo.list_for_account(session, account_id=account_id)
            banned = await BansRepo.list_banned_device_ids(
                session,
                device_ids=[association.device_id for association in associations],
                now_utc=now_utc,
            )
        return [
            TrackedDevice(
                device_id=association.device_id,
                first_seen_at=association.first_seen_at,
                last_seen_at=association.last_seen_at,
                is_banned=association.device_id in banned,
            )
            for association in associations
        ]

    async def prune_stale_devices(
        self,
        *,
        now_utc: datetime | None = None,
        retention_days: int | None = None,
    ) -> int:
        now_utc = now_utc or _utc_now()
        if retention_days is None:
            retention_days = get_settings().device_association_retention_days
        async with self._session_factory.begin() as session:
            return await DevicesRepo.delete_stale(
                session,
                older_than=now_utc - timedelta(days=retention_days),
            )
