from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, timedelta, timezone
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Request

from fitcoach.access.entitlements.errors import STORE_ERRORS
from fitcoach.access.grants.errors import GrantNotFoundError
from fitcoach.access.grants.service import GrantService
from fitcoach.access.grants.types import GrantRecord, GrantSubject, GrantType
from fitcoach.core.config import get_settings
from fitcoach.db.session import SessionLocal

from .internal_helpers import assert_internal_access, raise_store_unavailable
from .internal_models import (
    GrantIssueRequest,
    GrantIssueResponse,
    GrantListResponse,
    GrantResponse,
)

router = APIRouter(tags=["internal", "grants"])


def _subject(payload: GrantIssueRequest) -> GrantSubject:
    try:
        return GrantSubject(
            grant_type=GrantType(payload.grant_type),
            course_id=payload.course_id,
            player_card_id=payload.player_card_id,
            month_number=payload.month_number,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail={"code": "E_INVALID_GRANT"}) from exc


def _end_at(payload: GrantIssueRequest, now_utc: datetime) -> datetime | None:
    if payload.duration_days is not None:
        return now_utc + timedelta(days=payload.duration_days)
    end_at = payload.end_at
    if end_at is not None and (end_at.tzinfo is None or end_at <= now_utc):
        raise HTTPException(status_code=422, detail={"code": "E_INVALID_GRANT"})
    return end_at


def _grant_response(record: GrantRecord) -> GrantResponse:
    return GrantResponse(**{**asdict(record), "grant_type": record.grant_type.value})


@router.post("/internal/grants", response_model=GrantIssueResponse)
async def issue_grant(payload: GrantIssueRequest, request: Request) -> GrantIssueResponse:
    assert_internal_access(request, settings=get_settings(), area="grants")

    subject = _subject(payload)
    now_utc = datetime.now(timezone.utc)
    end_at = _end_at(payload, now_utc)

    try:
        async with SessionLocal.begin() as session:
            issued = await GrantService.issue_grant(
                session,
                account_id=payload.account_id,
                subject=subject,
                end_at=end_at,
                source_kind=payload.source_kind,
                package_id=payload.package_id,
                now_utc=now_utc,
            )
    except STORE_ERRORS as exc:
        raise_store_unavailable(exc, area="grants")

    return GrantIssueResponse(
        grant_id=issued.grant_id,
        grant_type=issued.subject.grant_type.value,
        created=issued.created,
        start_at=issued.window.start_at,
        end_at=issued.window.end_at,
    )


@router.post("/internal/grants/{grant_id}/revoke", response_model=GrantResponse)
async def revoke_grant(grant_id: int, request: Request) -> GrantResponse:
    assert_internal_access(request, settings=get_settings(), area="grants")

    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            record = await GrantService.revoke_grant(session, grant_id=grant_id, now_utc=now_utc)
    except GrantNotFoundError as exc:
        raise HTTPException(status_code=404, detail={"code": "E_GRANT_NOT_FOUND"}) from exc
    except STORE_ERRORS as exc:
        raise_store_unavailable(exc, area="grants")

    return _grant_response(record)


@router.get("/internal/grants", response_model=GrantListResponse)
async def list_grants(request: Request, account_id: UUID = Query()) -> GrantListResponse:
    assert_internal_access(request, settings=get_settings(), area="grants")

    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal() as session:
            records = await GrantService.list_account_grants(
                session, account_id=account_id, now_utc=now_utc
            )
    except STORE_ERRORS as exc:
        raise_store_unavailable(exc, area="grants")

    return GrantListResponse(grants=[_grant_response(record) for record in records])
