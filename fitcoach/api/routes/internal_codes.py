from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request

from fitcoach.access.codes.errors import (
    CodeScopeError,
    RedeemBannedError,
    RedeemCodeAlreadyUsedError,
    RedeemCodeExhaustedError,
    RedeemCodeNotFoundError,
)
from fitcoach.access.codes.service import RedemptionCodeService
from fitcoach.access.codes.types import CodeScope, CodeScopeType
from fitcoach.access.entitlements.errors import STORE_ERRORS
from fitcoach.core.config import get_settings
from fitcoach.db.session import SessionLocal

from .internal_helpers import assert_internal_access, raise_store_unavailable
from .internal_models import (
    CodeGenerateRequest,
    CodeGenerateResponse,
    CodeRedeemRequest,
    CodeRedeemResponse,
)

router = APIRouter(tags=["internal", "codes"])


@router.post("/internal/codes/redeem", response_model=CodeRedeemResponse)
async def redeem_code(payload: CodeRedeemRequest, request: Request) -> CodeRedeemResponse:
    assert_internal_access(request, settings=get_settings(), area="codes")

    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            result = await RedemptionCodeService.redeem(
                session,
                code=payload.code,
                account_id=payload.account_id,
                device_id=payload.device_id,
                now_utc=now_utc,
            )
    except RedeemCodeNotFoundError as exc:
        raise HTTPException(status_code=404, detail={"code": "E_CODE_NOT_FOUND"}) from exc
    except RedeemCodeExhaustedError as exc:
        raise HTTPException(status_code=409, detail={"code": "E_CODE_EXHAUSTED"}) from exc
    except RedeemCodeAlreadyUsedError as exc:
        raise HTTPException(status_code=409, detail={"code": "E_CODE_ALREADY_USED"}) from exc
    except RedeemBannedError as exc:
        raise HTTPException(status_code=403, detail={"code": "E_BANNED"}) from exc
    except STORE_ERRORS as exc:
        raise_store_unavailable(exc, area="codes")

    return CodeRedeemResponse(
        code_id=result.code_id,
        grant_id=result.grant_id,
        scope_type=result.scope_type.value,
        course_id=result.course_id,
        package_id=result.package_id,
        player_card_id=result.player_card_id,
        month_number=result.month_number,
        end_at=result.end_at,
    )


@router.post("/internal/codes/generate", response_model=CodeGenerateResponse)
async def generate_codes(payload: CodeGenerateRequest, request: Request) -> CodeGenerateResponse:
    assert_internal_access(request, settings=get_settings(), area="codes")

    scope = CodeScope(
        scope_type=CodeScopeType(payload.scope_type),
        course_id=payload.course_id,
        package_id=payload.package_id,
        player_card_id=payload.player_card_id,
        month_number=payload.month_number,
    )
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            generated = await RedemptionCodeService.generate_codes(
                session,
                scope=scope,
                count=payload.count,
                duration_days=payload.duration_days,
                max_redemptions=payload.max_redemptions,
                created_by=payload.created_by,
                now_utc=now_utc,
            )
    except CodeScopeError as exc:
        raise HTTPException(status_code=422, detail={"code": "E_INVALID_SCOPE"}) from exc
    except STORE_ERRORS as exc:
        raise_store_unavailable(exc, area="codes")

    return CodeGenerateResponse(
        scope_type=generated.scope.scope_type.value,
        course_id=generated.scope.course_id,
        duration_days=generated.duration_days,
        max_redemptions=generated.max_redemptions,
        codes=generated.codes,
    )
