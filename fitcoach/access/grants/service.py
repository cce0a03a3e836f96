from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.access.grants.errors import GrantNotFoundError
from fitcoach.access.grants.rules import (
    QUALIFYING_COURSE_SOURCES,
    is_course_grant_active,
    is_grant_active,
    merge_grant_window,
)
from fitcoach.access.grants.types import (
    ActiveGrant,
    GrantIssueResult,
    GrantRecord,
    GrantStatus,
    GrantSubject,
    GrantType,
    GrantWindow,
)
from fitcoach.db.models.grants import Grant
from fitcoach.db.repo.grants_repo import GrantsRepo

logger = structlog.get_logger(__name__)


def _as_active_grant(grant: Grant | None) -> ActiveGrant | None:
    if grant is None:
        return None
    return ActiveGrant(
        grant_id=grant.id,
        grant_type=GrantType(grant.grant_type),
        end_at=grant.end_at,
    )


def _as_record(grant: Grant, *, now_utc: datetime) -> GrantRecord:
    if grant.grant_type == GrantType.COURSE.value:
        active = is_course_grant_active(
            status=grant.status,
            end_at=grant.end_at,
            source_kind=grant.source_kind,
            now_utc=now_utc,
        )
    else:
        active = is_grant_active(status=grant.status, end_at=grant.end_at, now_utc=now_utc)
    return GrantRecord(
        grant_id=grant.id,
        account_id=grant.account_id,
        grant_type=GrantType(grant.grant_type),
        course_id=grant.course_id,
        player_card_id=grant.player_card_id,
        month_number=grant.month_number,
        package_id=grant.package_id,
        status=grant.status,
        source_kind=grant.source_kind,
        start_at=grant.start_at,
        end_at=grant.end_at,
        is_active=active,
    )


class GrantService:
    @staticmethod
    async def active_course_grant(
        session: AsyncSession,
        *,
        account_id: UUID,
        course_id: UUID,
        now_utc: datetime,
    ) -> ActiveGrant | None:
        grant = await GrantsRepo.get_active_course_grant(
            session,
            account_id=account_id,
            course_id=course_id,
            now_utc=now_utc,
            qualifying_sources=QUALIFYING_COURSE_SOURCES,
        )
        return _as_active_grant(grant)

    @staticmethod
    async def active_card_grant(
        session: AsyncSession,
        *,
        account_id: UUID,
        player_card_id: UUID,
        now_utc: datetime,
    ) -> ActiveGrant | None:
        grant = await GrantsRepo.get_active_card_grant(
            session,
            account_id=account_id,
            player_card_id=player_card_id,
            now_utc=now_utc,
        )
        return _as_active_grant(grant)

    @staticmethod
    async def active_month_grant(
        session: AsyncSession,
        *,
        account_id: UUID,
        course_id: UUID,
        month_number: int,
        now_utc: datetime,
    ) -> ActiveGrant | None:
        grant = await GrantsRepo.get_active_month_grant(
            session,
            account_id=account_id,
            course_id=course_id,
            month_number=month_number,
            now_utc=now_utc,
        )
        return _as_active_grant(grant)

    @staticmethod
    async def issue_grant(
        session: AsyncSession,
        *,
        account_id: UUID,
        subject: GrantSubject,
        end_at: datetime | None,
        source_kind: str,
        now_utc: datetime,
        package_id: UUID | None = None,
    ) -> GrantIssueResult:
        """Grant access to ``subject`` or extend the grant the account already holds.

        Must run inside the caller's transaction. A concurrent issuer for the
        same subject either loses the insert and merges into the winner's row
        under a row lock, or wins and is merged into by the other.
        """
        inserted_id = await GrantsRepo.insert_if_absent(
            session,
            values={
                "account_id": account_id,
                "grant_type": subject.grant_type.value,
                "course_id": subject.course_id,
                "player_card_id": subject.player_card_id,
                "month_number": subject.month_number,
                "package_id": package_id,
                "status": GrantStatus.ACTIVE.value,
                "source_kind": source_kind,
                "start_at": now_utc,
                "end_at": end_at,
                "created_at": now_utc,
                "updated_at": now_utc,
            },
        )
        if inserted_id is not None:
            logger.info(
                "grant_issued",
                grant_id=inserted_id,
                account_id=str(account_id),
                grant_type=subject.grant_type.value,
                source_kind=source_kind,
                end_at=end_at.isoformat() if end_at is not None else None,
                created=True,
            )
            return GrantIssueResult(
                grant_id=inserted_id,
                subject=subject,
                window=GrantWindow(start_at=now_utc, end_at=end_at),
                created=True,
            )

        grant = await GrantsRepo.get_subject_grant_for_update(
            session,
            grant_type=subject.grant_type.value,
            account_id=account_id,
            course_id=subject.course_id,
            player_card_id=subject.player_card_id,
            month_number=subject.month_number,
        )
        if grant is None:
            raise GrantNotFoundError

        existing_end = grant.end_at
        if not is_grant_active(status=grant.status, end_at=grant.end_at, now_utc=now_utc):
            # A lapsed or revoked grant contributes no remaining time.
            existing_end = now_utc if grant.end_at is None else min(grant.end_at, now_utc)
        window = merge_grant_window(
            GrantWindow(start_at=grant.start_at, end_at=existing_end),
            now_utc=now_utc,
            new_end_at=end_at,
        )
        grant.start_at = window.start_at
        grant.end_at = window.end_at
        grant.status = GrantStatus.ACTIVE.value
        grant.source_kind = source_kind
        if package_id is not None:
            grant.package_id = package_id
        grant.updated_at = now_utc
        await session.flush()

        logger.info(
            "grant_issued",
            grant_id=grant.id,
            account_id=str(account_id),
            grant_type=subject.grant_type.value,
            source_kind=source_kind,
            end_at=window.end_at.isoformat() if window.end_at is not None else None,
            created=False,
        )
        return GrantIssueResult(grant_id=grant.id, subject=subject, window=window, created=False)

    @staticmethod
    async def revoke_grant(
        session: AsyncSession,
        *,
        grant_id: int,
        now_utc: datetime,
    ) -> GrantRecord:
        grant = await GrantsRepo.get_by_id_for_update(session, grant_id)
        if grant is None:
            raise GrantNotFoundError

        grant.status = GrantStatus.INACTIVE.value
        if grant.end_at is None or grant.end_at > now_utc:
            grant.end_at = now_utc
        if grant.start_at > grant.end_at:
            grant.start_at = grant.end_at
        grant.updated_at = now_utc
        await session.flush()

        logger.info("grant_revoked", grant_id=grant.id, account_id=str(grant.account_id))
        return _as_record(grant, now_utc=now_utc)

    @staticmethod
    async def list_account_grants(
        session: AsyncSession,
        *,
        account_id: UUID,
        now_utc: datetime,
    ) -> list[GrantRecord]:
        grants = await GrantsRepo.list_for_account(session, account_id=account_id)
        return [_as_record(grant, now_utc=now_utc) for grant in grants]

    @staticmethod
    async def expire_lapsed_grants(session: AsyncSession, *, now_utc: datetime) -> int:
        return await GrantsRepo.expire_lapsed(session, now_utc=now_utc)
