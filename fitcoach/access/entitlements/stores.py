from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fitcoach.access.entitlements.types import (
    AgeGroupNode,
    CourseRef,
    DayNode,
    MonthNode,
    PackageRef,
    PlayerCardNode,
    VideoNode,
)
from fitcoach.access.grants.service import GrantService
from fitcoach.access.grants.types import ActiveGrant
from fitcoach.db.repo.catalog_repo import CatalogRepo
from fitcoach.db.session import SessionLocal


class SqlCatalogLookup:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory or SessionLocal

    async def get_course(
        self, *, slug: str | None = None, course_id: UUID | None = None
    ) -> CourseRef | None:
        async with self._session_factory() as session:
            if course_id is not None:
                course = await CatalogRepo.get_course_by_id(session, course_id)
            else:
                course = await CatalogRepo.get_course_by_slug(session, slug or "")
        if course is None:
            return None
        return CourseRef(
            id=course.id,
            slug=course.slug,
            title=course.title,
            is_published=course.is_published,
        )

    async def get_package(
        self, *, slug: str | None = None, package_id: UUID | None = None
    ) -> PackageRef | None:
        async with self._session_factory() as session:
            if package_id is not None:
                package = await CatalogRepo.get_package_by_id(session, package_id)
            else:
                package = await CatalogRepo.get_package_by_slug(session, slug or "")
        if package is None:
            return None
        return PackageRef(
            id=package.id,
            slug=package.slug,
            title=package.title,
            is_active=package.is_active,
        )

    async def package_contains_course(self, package_id: UUID, course_id: UUID) -> bool:
        async with self._session_factory() as session:
            return await CatalogRepo.package_contains_course(
                session, package_id=package_id, course_id=course_id
            )

    async def course_has_packages(self, course_id: UUID) -> bool:
        async with self._session_factory() as session:
            return await CatalogRepo.course_has_active_packages(session, course_id=course_id)

    async def load_course_tree(self, course_id: UUID) -> tuple[AgeGroupNode, ...]:
        async with self._session_factory() as session:
            age_groups = await CatalogRepo.list_age_groups(session, course_id=course_id)
            age_group_ids = [group.id for group in age_groups]
            cards = await CatalogRepo.list_player_cards(session, age_group_ids=age_group_ids)
            months = await CatalogRepo.list_months(session, age_group_ids=age_group_ids)
            days = await CatalogRepo.list_days(session, month_ids=[month.id for month in months])
            videos = await CatalogRepo.list_videos(session, day_ids=[day.id for day in days])

        videos_by_day: dict[UUID, list[VideoNode]] = defaultdict(list)
        for video in videos:
            videos_by_day[video.day_id].append(
                VideoNode(
                    id=video.id,
                    title=video.title,
                    video_url=video.video_url,
                    thumbnail_url=video.thumbnail_url,
                    details=video.details,
                    duration_sec=video.duration_sec,
                    is_free_preview=video.is_free_preview,
                )
            )
        days_by_month: dict[UUID, list[DayNode]] = defaultdict(list)
        for day in days:
            days_by_month[day.month_id].append(
                DayNode(
                    id=day.id,
                    day_number=day.day_number,
                    title=day.title,
                    videos=tuple(videos_by_day[day.id]),
                )
            )
        months_by_group: dict[UUID, list[MonthNode]] = defaultdict(list)
        for month in months:
            months_by_group[month.age_group_id].append(
                MonthNode(
                    id=month.id,
                    month_number=month.month_number,
                    title=month.title,
                    days=tuple(days_by_month[month.id]),
                )
            )
        cards_by_group: dict[UUID, list[PlayerCardNode]] = defaultdict(list)
        for card in cards:
            cards_by_group[card.age_group_id].append(
                PlayerCardNode(
                    id=card.id,
                    age=card.age,
                    height_cm=card.height_cm,
                    weight_kg=card.weight_kg,
                    note=card.note,
                )
            )

        return tuple(
            AgeGroupNode(
                id=group.id,
                title=group.title,
                cards=tuple(cards_by_group[group.id]),
                months=tuple(months_by_group[group.id]),
            )
            for group in age_groups
        )


class SqlAllowlistLookup:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory or SessionLocal

    async def allowed_age_group_ids(self, package_id: UUID, course_id: UUID) -> frozenset[UUID]:
        async with self._session_factory() as session:
            allowed = await CatalogRepo.list_allowed_age_group_ids(
                session, package_id=package_id, course_id=course_id
            )
        return frozenset(allowed)


class SqlGrantLookup:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory or SessionLocal

    async def active_course_grant(
        self, account_id: UUID, course_id: UUID, now_utc: datetime
    ) -> ActiveGrant | None:
        async with self._session_factory() as session:
            return await GrantService.active_course_grant(
                session, account_id=account_id, course_id=course_id, now_utc=now_utc
            )

    async def active_card_grant(
        self, account_id: UUID, player_card_id: UUID, now_utc: datetime
    ) -> ActiveGrant | None:
        async with self._session_factory() as session:
            return await GrantService.active_card_grant(
                session, account_id=account_id, player_card_id=player_card_id, now_utc=now_utc
            )

    async def active_month_grant(
        self, account_id: UUID, course_id: UUID, month_number: int, now_utc: datetime
    ) -> ActiveGrant | None:
        async with self._session_factory() as session:
            return await GrantService.active_month_grant(
                session,
                account_id=account_id,
                course_id=course_id,
                month_number=month_number,
                now_utc=now_utc,
            )
