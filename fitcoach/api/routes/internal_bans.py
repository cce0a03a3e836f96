from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Request

from fitcoach.access.bans.service import BanRegistry
from fitcoach.access.devices.service import DeviceTracker
from fitcoach.access.entitlements.errors import STORE_ERRORS
from fitcoach.core.config import get_settings

from .internal_helpers import assert_internal_access, raise_store_unavailable
from .internal_models import (
    AccountBanRequest,
    BanResponse,
    DeviceBanRequest,
    DeviceListResponse,
    DeviceResponse,
    UnbanResponse,
)

router = APIRouter(tags=["internal", "bans"])


@router.post("/internal/bans/devices", response_model=BanResponse)
async def ban_device(payload: DeviceBanRequest, request: Request) -> BanResponse:
    assert_internal_access(request, settings=get_settings(), area="bans")

    try:
        ban = await BanRegistry().ban_device(
            payload.device_id,
            reason=payload.reason,
            banned_until=payload.banned_until,
        )
    except STORE_ERRORS as exc:
        raise_store_unavailable(exc, area="bans")

    return BanResponse(
        ban_id=ban.ban_id,
        key=ban.key,
        reason=ban.reason,
        banned_until=ban.banned_until,
    )


@router.delete("/internal/bans/devices/{device_id}", response_model=UnbanResponse)
async def unban_device(device_id: str, request: Request) -> UnbanResponse:
    assert_internal_access(request, settings=get_settings(), area="bans")

    try:
        changed = await BanRegistry().unban_device(device_id)
    except STORE_ERRORS as exc:
        raise_store_unavailable(exc, area="bans")

    return UnbanResponse(key=device_id, unbanned=changed)


@router.post("/internal/bans/accounts", response_model=BanResponse)
async def ban_account(payload: AccountBanRequest, request: Request) -> BanResponse:
    assert_internal_access(request, settings=get_settings(), area="bans")

    try:
        ban = await BanRegistry().ban_account(
            payload.account_id,
            reason=payload.reason,
            banned_until=payload.banned_until,
        )
    except STORE_ERRORS as exc:
        raise_store_unavailable(exc, area="bans")

    return BanResponse(
        ban_id=ban.ban_id,
        key=ban.key,
        reason=ban.reason,
        banned_until=ban.banned_until,
    )


@router.delete("/internal/bans/accounts/{account_id}", response_model=UnbanResponse)
async def unban_account(account_id: UUID, request: Request) -> UnbanResponse:
    assert_internal_access(request, settings=get_settings(), area="bans")

    try:
        changed = await BanRegistry().unban_account(account_id)
    except STORE_ERRORS as exc:
        raise_store_unavailable(exc, area="bans")

    return UnbanResponse(key=str(account_id), unbanned=changed)


@router.get("/internal/devices", response_model=DeviceListResponse)
async def list_devices(request: Request, account_id: UUID = Query()) -> DeviceListResponse:
    assert_internal_access(request, settings=get_settings(), area="devices")

    tracker = DeviceTracker()
    try:
        devices = await tracker.list_devices(account_id=account_id)
    except STORE_ERRORS as exc:
        raise_store_unavailable(exc, area="devices")

    return DeviceListResponse(
        account_id=account_id,
        max_devices=tracker.max_devices,
        devices=[DeviceResponse.model_validate(device) for device in devices],
    )
