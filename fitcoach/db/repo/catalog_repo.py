from __future__ import annotations

from collections.abc import Collection
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.db.models.age_groups import AgeGroup
from fitcoach.db.models.courses import Course
from fitcoach.db.models.days import Day
from fitcoach.db.models.months import Month
from fitcoach.db.models.package_course_age_groups import PackageCourseAgeGroup
from fitcoach.db.models.package_courses import PackageCourse
from fitcoach.db.models.packages import Package
from fitcoach.db.models.player_cards import PlayerCard
from fitcoach.db.models.videos import Video


class CatalogRepo:
    @staticmethod
    async def get_course_by_slug(session: AsyncSession, slug: str) -> Course | None:
        stmt = select(Course).where(Course.slug == slug)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_course_by_id(session: AsyncSession, course_id: UUID) -> Course | None:
        return await session.get(Course, course_id)

    @staticmethod
    async def get_package_by_slug(session: AsyncSession, slug: str) -> Package | None:
        stmt = select(Package).where(Package.slug == slug)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_package_by_id(session: AsyncSession, package_id: UUID) -> Package | None:
        return await session.get(Package, package_id)

    @staticmethod
    async def package_contains_course(
        session: AsyncSession,
        *,
        package_id: UUID,
        course_id: UUID,
    ) -> bool:
        stmt = select(PackageCourse.course_id).where(
            PackageCourse.package_id == package_id,
            PackageCourse.course_id == course_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def course_has_active_packages(session: AsyncSession, *, course_id: UUID) -> bool:
        stmt = (
            select(PackageCourse.package_id)
            .join(Package, Package.id == PackageCourse.package_id)
            .where(PackageCourse.course_id == course_id, Package.is_active.is_(True))
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def list_allowed_age_group_ids(
        session: AsyncSession,
        *,
        package_id: UUID,
        course_id: UUID,
    ) -> set[UUID]:
        stmt = select(PackageCourseAgeGroup.age_group_id).where(
            PackageCourseAgeGroup.package_id == package_id,
            PackageCourseAgeGroup.course_id == course_id,
        )
        result = await session.execute(stmt)
        return set(result.scalars().all())

    @staticmethod
    async def list_age_groups(session: AsyncSession, *, course_id: UUID) -> list[AgeGroup]:
        stmt = (
            select(AgeGroup)
            .where(AgeGroup.course_id == course_id)
            .order_by(AgeGroup.sort_order.asc(), AgeGroup.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_player_cards(
        session: AsyncSession,
        *,
        age_group_ids: Collection[UUID],
    ) -> list[PlayerCard]:
        if not age_group_ids:
            return []
        stmt = (
            select(PlayerCard)
            .where(PlayerCard.age_group_id.in_(tuple(age_group_ids)))
            .order_by(PlayerCard.sort_order.asc(), PlayerCard.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_months(session: AsyncSession, *, age_group_ids: Collection[UUID]) -> list[Month]:
        if not age_group_ids:
            return []
        stmt = (
            select(Month)
            .where(Month.age_group_id.in_(tuple(age_group_ids)))
            .order_by(Month.month_number.asc(), Month.sort_order.asc(), Month.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_days(session: AsyncSession, *, month_ids: Collection[UUID]) -> list[Day]:
        if not month_ids:
            return []
        stmt = (
            select(Day)
            .where(Day.month_id.in_(tuple(month_ids)))
            .order_by(Day.day_number.asc().nullslast(), Day.sort_order.asc(), Day.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_videos(session: AsyncSession, *, day_ids: Collection[UUID]) -> list[Video]:
        if not day_ids:
            return []
        stmt = (
            select(Video)
            .where(Video.day_id.in_(tuple(day_ids)))
            .order_by(Video.sort_order.asc(), Video.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_player_card_course_id(
        session: AsyncSession,
        *,
        player_card_id: UUID,
    ) -> UUID | None:
        stmt = (
            select(AgeGroup.course_id)
            .join(PlayerCard, PlayerCard.age_group_id == AgeGroup.id)
            .where(PlayerCard.id == player_card_id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
