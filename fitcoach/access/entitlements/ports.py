from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from fitcoach.access.entitlements.types import AgeGroupNode, CourseRef, PackageRef
from fitcoach.access.grants.types import ActiveGrant


class BanChecker(Protocol):
    async def is_device_banned(self, device_id: str, *, now_utc: datetime | None = None) -> bool: ...

    async def is_account_banned(
        self, account_id: UUID, *, now_utc: datetime | None = None
    ) -> bool: ...


class GrantLookup(Protocol):
    async def active_course_grant(
        self, account_id: UUID, course_id: UUID, now_utc: datetime
    ) -> ActiveGrant | None: ...

    async def active_card_grant(
        self, account_id: UUID, player_card_id: UUID, now_utc: datetime
    ) -> ActiveGrant | None: ...

    async def active_month_grant(
        self, account_id: UUID, course_id: UUID, month_number: int, now_utc: datetime
    ) -> ActiveGrant | None: ...


class AllowlistLookup(Protocol):
    async def allowed_age_group_ids(self, package_id: UUID, course_id: UUID) -> frozenset[UUID]: ...


class CatalogLookup(Protocol):
    async def get_course(
        self, *, slug: str | None = None, course_id: UUID | None = None
    ) -> CourseRef | None: ...

    async def get_package(
        self, *, slug: str | None = None, package_id: UUID | None = None
    ) -> PackageRef | None: ...

    async def package_contains_course(self, package_id: UUID, course_id: UUID) -> bool: ...

    async def course_has_packages(self, course_id: UUID) -> bool: ...

    async def load_course_tree(self, course_id: UUID) -> tuple[AgeGroupNode, ...]: ...
