from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import ColumnElement, and_, or_, select, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.db.models.grants import Grant

# Partial unique index predicates per grant type, as declared on the model.
_SUBJECT_CONFLICT_TARGETS: dict[str, tuple[tuple[str, ...], str]] = {
    "COURSE": (("account_id", "course_id"), "grant_type = 'COURSE'"),
    "CARD": (("account_id", "player_card_id"), "grant_type = 'CARD'"),
    "MONTH": (("account_id", "course_id", "month_number"), "grant_type = 'MONTH'"),
}


def _active_window(now_utc: datetime) -> ColumnElement[bool]:
    return and_(
        Grant.status == "active",
        or_(Grant.end_at.is_(None), Grant.end_at > now_utc),
    )


def _subject_filter(
    *,
    grant_type: str,
    account_id: UUID,
    course_id: UUID,
    player_card_id: UUID | None,
    month_number: int | None,
) -> ColumnElement[bool]:
    if grant_type == "CARD":
        return and_(
            Grant.grant_type == "CARD",
            Grant.account_id == account_id,
            Grant.player_card_id == player_card_id,
        )
    if grant_type == "MONTH":
        return and_(
            Grant.grant_type == "MONTH",
            Grant.account_id == account_id,
            Grant.course_id == course_id,
            Grant.month_number == month_number,
        )
    return and_(
        Grant.grant_type == "COURSE",
        Grant.account_id == account_id,
        Grant.course_id == course_id,
    )


class GrantsRepo:
    @staticmethod
    async def get_active_course_grant(
        session: AsyncSession,
        *,
        account_id: UUID,
        course_id: UUID,
        now_utc: datetime,
        qualifying_sources: Iterable[str],
    ) -> Grant | None:
        stmt = select(Grant).where(
            Grant.grant_type == "COURSE",
            Grant.account_id == account_id,
            Grant.course_id == course_id,
            Grant.source_kind.in_(tuple(qualifying_sources)),
            _active_window(now_utc),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_active_card_grant(
        session: AsyncSession,
        *,
        account_id: UUID,
        player_card_id: UUID,
        now_utc: datetime,
    ) -> Grant | None:
        stmt = select(Grant).where(
            Grant.grant_type == "CARD",
            Grant.account_id == account_id,
            Grant.player_card_id == player_card_id,
            _active_window(now_utc),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_active_month_grant(
        session: AsyncSession,
        *,
        account_id: UUID,
        course_id: UUID,
        month_number: int,
        now_utc: datetime,
    ) -> Grant | None:
        stmt = select(Grant).where(
            Grant.grant_type == "MONTH",
            Grant.account_id == account_id,
            Grant.course_id == course_id,
            Grant.month_number == month_number,
            _active_window(now_utc),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def insert_if_absent(session: AsyncSession, *, values: dict[str, object]) -> int | None:
        index_elements, index_where = _SUBJECT_CONFLICT_TARGETS[str(values["grant_type"])]
        stmt = (
            pg_insert(Grant)
            .values(**values)
            .on_conflict_do_nothing(
                index_elements=list(index_elements),
                index_where=text(index_where),
            )
            .returning(Grant.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_subject_grant_for_update(
        session: AsyncSession,
        *,
        grant_type: str,
        account_id: UUID,
        course_id: UUID,
        player_card_id: UUID | None = None,
        month_number: int | None = None,
    ) -> Grant | None:
        stmt = (
            select(Grant)
            .where(
                _subject_filter(
                    grant_type=grant_type,
                    account_id=account_id,
                    course_id=course_id,
                    player_card_id=player_card_id,
                    month_number=month_number,
                )
            )
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_id(session: AsyncSession, grant_id: int) -> Grant | None:
        return await session.get(Grant, grant_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, grant_id: int) -> Grant | None:
        stmt = select(Grant).where(Grant.id == grant_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_for_account(session: AsyncSession, *, account_id: UUID) -> list[Grant]:
        stmt = (
            select(Grant)
            .where(Grant.account_id == account_id)
            .order_by(Grant.updated_at.desc(), Grant.id.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def expire_lapsed(session: AsyncSession, *, now_utc: datetime) -> int:
        stmt = (
            update(Grant)
            .where(
                Grant.status == "active",
                Grant.end_at.is_not(None),
                Grant.end_at <= now_utc,
            )
            .values(status="expired", updated_at=now_utc)
        )
        result = await session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0)
