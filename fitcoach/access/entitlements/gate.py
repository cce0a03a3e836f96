from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol
from uuid import UUID

import structlog

from fitcoach.access.devices.errors import (
    DeviceTrackBannedError,
    DeviceTrackTooManyDevicesError,
)
from fitcoach.access.devices.types import TrackResult
from fitcoach.access.entitlements.errors import STORE_ERRORS
from fitcoach.access.entitlements.ports import BanChecker
from fitcoach.access.entitlements.types import Identity
from fitcoach.core.config import get_settings

logger = structlog.get_logger(__name__)


class GateStatus(str, Enum):
    OK = "ok"
    BLOCKED = "blocked"


@dataclass(slots=True)
class GateResult:
    status: GateStatus
    reason: str | None = None

    @property
    def is_blocked(self) -> bool:
        return self.status is GateStatus.BLOCKED


class DeviceTracking(Protocol):
    async def track_device(
        self, *, account_id: UUID, device_id: str, now_utc: datetime | None = None
    ) -> TrackResult: ...


def _blocked(reason: str) -> GateResult:
    return GateResult(status=GateStatus.BLOCKED, reason=reason)


class RequestGate:
    """Per-request ban and device checks run before any content is resolved."""

    def __init__(
        self,
        *,
        bans: BanChecker,
        devices: DeviceTracking,
        store_timeout_seconds: float | None = None,
    ) -> None:
        self._bans = bans
        self._devices = devices
        self._store_timeout_seconds = store_timeout_seconds

    @property
    def store_timeout_seconds(self) -> float:
        if self._store_timeout_seconds is not None:
            return self._store_timeout_seconds
        return get_settings().store_timeout_seconds

    async def check(
        self,
        identity: Identity,
        device_id: str | None,
        *,
        now_utc: datetime | None = None,
    ) -> GateResult:
        if identity.is_admin:
            return GateResult(status=GateStatus.OK)

        now_utc = now_utc or datetime.now(timezone.utc)
        account_id = identity.account_id
        timeout = self.store_timeout_seconds

        if device_id:
            try:
                device_banned = await asyncio.wait_for(
                    self._bans.is_device_banned(device_id, now_utc=now_utc),
                    timeout=timeout,
                )
            except STORE_ERRORS as exc:
                if account_id is not None:
                    logger.warning(
                        "ban_check_failed_closed",
                        check="device",
                        account_id=str(account_id),
                        error_type=type(exc).__name__,
                    )
                    return _blocked("ban_check_failed")
                # Anonymous traffic keeps flowing while the ban store is down.
                logger.warning(
                    "ban_check_failed_open",
                    check="device",
                    device_id=device_id,
                    error_type=type(exc).__name__,
                )
                device_banned = False
            if device_banned:
                return _blocked("device_banned")

        if account_id is None:
            return GateResult(status=GateStatus.OK)

        try:
            account_banned = await asyncio.wait_for(
                self._bans.is_account_banned(account_id, now_utc=now_utc),
                timeout=timeout,
            )
        except STORE_ERRORS as exc:
            logger.warning(
                "ban_check_failed_closed",
                check="account",
                account_id=str(account_id),
                error_type=type(exc).__name__,
            )
            return _blocked("ban_check_failed")
        if account_banned:
            return _blocked("account_banned")

        if not device_id:
            return GateResult(status=GateStatus.OK)

        try:
            await asyncio.wait_for(
                self._devices.track_device(
                    account_id=account_id, device_id=device_id, now_utc=now_utc
                ),
                timeout=timeout,
            )
        except DeviceTrackBannedError:
            return _blocked("banned")
        except DeviceTrackTooManyDevicesError:
            return _blocked("too_many_devices")
        except STORE_ERRORS as exc:
            logger.warning(
                "ban_check_failed_closed",
                check="device_tracking",
                account_id=str(account_id),
                error_type=type(exc).__name__,
            )
            return _blocked("device_check_failed")

        return GateResult(status=GateStatus.OK)
