from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fitcoach.access.bans.service import BanRegistry
from fitcoach.access.devices.service import DeviceTracker
from fitcoach.access.entitlements.gate import GateResult, RequestGate
from fitcoach.access.entitlements.preview import build_full, build_preview
from fitcoach.access.entitlements.resolver import EntitlementResolver
from fitcoach.access.entitlements.stores import (
    SqlAllowlistLookup,
    SqlCatalogLookup,
    SqlGrantLookup,
)
from fitcoach.access.entitlements.types import (
    AccessDecision,
    AccessResult,
    ContentLocator,
    ContentResult,
    Identity,
)
from fitcoach.db.session import SessionLocal


class AccessService:
    def __init__(self, *, resolver: EntitlementResolver, gate: RequestGate) -> None:
        self._resolver = resolver
        self._gate = gate

    @classmethod
    def from_session_factory(
        cls,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> AccessService:
        session_factory = session_factory or SessionLocal
        bans = BanRegistry(session_factory)
        resolver = EntitlementResolver(
            catalog=SqlCatalogLookup(session_factory),
            bans=bans,
            grants=SqlGrantLookup(session_factory),
            allowlist=SqlAllowlistLookup(session_factory),
        )
        gate = RequestGate(bans=bans, devices=DeviceTracker(session_factory))
        return cls(resolver=resolver, gate=gate)

    async def check_request(
        self,
        identity: Identity,
        device_id: str | None,
        *,
        now_utc: datetime | None = None,
    ) -> GateResult:
        return await self._gate.check(identity, device_id, now_utc=now_utc)

    async def resolve(
        self,
        identity: Identity,
        locator: ContentLocator,
        *,
        now_utc: datetime | None = None,
    ) -> AccessResult:
        return await self._resolver.resolve(identity, locator, now_utc=now_utc)

    async def fetch_content(
        self,
        identity: Identity,
        locator: ContentLocator,
        *,
        device_id: str | None = None,
        now_utc: datetime | None = None,
    ) -> ContentResult:
        gate = await self._gate.check(identity, device_id, now_utc=now_utc)
        if gate.is_blocked:
            return ContentResult(result=AccessResult(AccessDecision.DENIED, reason=gate.reason))

        resolution = await self._resolver.resolve_scoped(identity, locator, now_utc=now_utc)
        if resolution.tree is None:
            return ContentResult(result=resolution.result)

        if resolution.result.decision is AccessDecision.FULL_ACCESS:
            month_number = (
                resolution.month_number if resolution.result.reason == "month_grant" else None
            )
            content = build_full(resolution.tree, month_number=month_number)
        else:
            content = build_preview(resolution.tree)
        return ContentResult(result=resolution.result, content=content)
