from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, HTTPException, Request

from fitcoach.access.entitlements.errors import STORE_ERRORS, AccessStoreError
from fitcoach.access.entitlements.service import AccessService
from fitcoach.access.entitlements.types import ContentLocator, Identity
from fitcoach.core.config import get_settings

from .internal_helpers import assert_internal_access, raise_store_unavailable
from .internal_models import (
    AccessContentRequest,
    AccessContentResponse,
    AccessGateRequest,
    AccessGateResponse,
    AccessResolveRequest,
    AccessResolveResponse,
    ContentResponse,
    IdentityPayload,
    LocatorPayload,
)

router = APIRouter(tags=["internal", "access"])


@lru_cache(maxsize=1)
def get_access_service() -> AccessService:
    return AccessService.from_session_factory()


def _identity(payload: IdentityPayload) -> Identity:
    return Identity(account_id=payload.account_id, is_admin=payload.is_admin)


def _locator(payload: LocatorPayload) -> ContentLocator:
    try:
        return ContentLocator(**payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=422, detail={"code": "E_INVALID_LOCATOR"}) from exc


@router.post("/internal/access/resolve", response_model=AccessResolveResponse)
async def resolve_access(payload: AccessResolveRequest, request: Request) -> AccessResolveResponse:
    assert_internal_access(request, settings=get_settings(), area="access")

    locator = _locator(payload.locator)
    try:
        result = await get_access_service().resolve(_identity(payload.identity), locator)
    except (AccessStoreError, *STORE_ERRORS) as exc:
        raise_store_unavailable(exc, area="access")

    return AccessResolveResponse(
        decision=result.decision.value,
        requires_package_selection=result.requires_package_selection,
        reason=result.reason,
    )


@router.post("/internal/access/content", response_model=AccessContentResponse)
async def fetch_content(payload: AccessContentRequest, request: Request) -> AccessContentResponse:
    assert_internal_access(request, settings=get_settings(), area="access")

    locator = _locator(payload.locator)
    try:
        content_result = await get_access_service().fetch_content(
            _identity(payload.identity),
            locator,
            device_id=payload.device_id,
        )
    except (AccessStoreError, *STORE_ERRORS) as exc:
        raise_store_unavailable(exc, area="access")

    result = content_result.result
    return AccessContentResponse(
        decision=result.decision.value,
        requires_package_selection=result.requires_package_selection,
        reason=result.reason,
        content=(
            ContentResponse.model_validate(content_result.content)
            if content_result.content is not None
            else None
        ),
    )


@router.post("/internal/access/gate", response_model=AccessGateResponse)
async def check_gate(payload: AccessGateRequest, request: Request) -> AccessGateResponse:
    assert_internal_access(request, settings=get_settings(), area="access")

    gate = await get_access_service().check_request(
        _identity(payload.identity),
        payload.device_id,
    )
    return AccessGateResponse(status=gate.status.value, reason=gate.reason)
