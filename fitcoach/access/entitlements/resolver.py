from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from datetime import datetime, timezone
from typing import TypeVar
from uuid import UUID

import structlog

from fitcoach.access.entitlements.errors import STORE_ERRORS, AccessStoreError
from fitcoach.access.entitlements.ports import (
    AllowlistLookup,
    BanChecker,
    CatalogLookup,
    GrantLookup,
)
from fitcoach.access.entitlements.scope import ScopedTree, scope_content_tree
from fitcoach.access.entitlements.types import (
    AccessDecision,
    AccessResult,
    ContentLocator,
    ContentTree,
    CourseRef,
    Identity,
    PackageRef,
    Resolution,
)
from fitcoach.access.grants.types import ActiveGrant
from fitcoach.core.config import get_settings

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class EntitlementResolver:
    """Decides what an identity may see at a content locator.

    Only reads. Catalog failures abort resolution with ``AccessStoreError``;
    a failed ban check denies; a failed grant lookup counts as no grant.
    """

    def __init__(
        self,
        *,
        catalog: CatalogLookup,
        bans: BanChecker,
        grants: GrantLookup,
        allowlist: AllowlistLookup,
        store_timeout_seconds: float | None = None,
    ) -> None:
        self._catalog = catalog
        self._bans = bans
        self._grants = grants
        self._allowlist = allowlist
        self._store_timeout_seconds = store_timeout_seconds

    @property
    def store_timeout_seconds(self) -> float:
        if self._store_timeout_seconds is not None:
            return self._store_timeout_seconds
        return get_settings().store_timeout_seconds

    async def _with_timeout(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, timeout=self.store_timeout_seconds)

    async def _catalog_call(self, awaitable: Awaitable[T], *, lookup: str) -> T:
        try:
            return await self._with_timeout(awaitable)
        except STORE_ERRORS as exc:
            logger.error("access_store_error", lookup=lookup, error_type=type(exc).__name__)
            raise AccessStoreError(lookup) from exc

    async def _package_context(self, locator: ContentLocator, course: CourseRef) -> PackageRef | None:
        if not locator.has_package:
            return None
        package = await self._catalog_call(
            self._catalog.get_package(slug=locator.package_slug, package_id=locator.package_id),
            lookup="package",
        )
        if package is None or not package.is_active:
            return None
        contains = await self._catalog_call(
            self._catalog.package_contains_course(package.id, course.id),
            lookup="package_courses",
        )
        return package if contains else None

    async def _allowed_age_groups(
        self, package: PackageRef | None, course: CourseRef
    ) -> frozenset[UUID]:
        if package is None:
            return frozenset()
        return await self._catalog_call(
            self._allowlist.allowed_age_group_ids(package.id, course.id),
            lookup="allowlist",
        )

    async def _is_account_banned(self, account_id: UUID, now_utc: datetime) -> bool:
        try:
            return await self._with_timeout(
                self._bans.is_account_banned(account_id, now_utc=now_utc)
            )
        except STORE_ERRORS as exc:
            logger.warning(
                "ban_check_failed_closed",
                account_id=str(account_id),
                error_type=type(exc).__name__,
            )
            return True

    async def _grant_lookup(
        self, awaitable: Awaitable[ActiveGrant | None], *, lookup: str
    ) -> ActiveGrant | None:
        try:
            return await self._with_timeout(awaitable)
        except STORE_ERRORS as exc:
            logger.warning("access_store_error", lookup=lookup, error_type=type(exc).__name__)
            return None

    async def _none(self) -> None:
        return None

    async def resolve(
        self,
        identity: Identity,
        locator: ContentLocator,
        *,
        now_utc: datetime | None = None,
    ) -> AccessResult:
        resolution = await self.resolve_scoped(identity, locator, now_utc=now_utc)
        return resolution.result

    async def resolve_scoped(
        self,
        identity: Identity,
        locator: ContentLocator,
        *,
        now_utc: datetime | None = None,
    ) -> Resolution:
        now_utc = now_utc or _utc_now()
        resolution = await self._resolve(identity, locator, now_utc=now_utc)
        logger.info(
            "access_resolved",
            account_id=str(identity.account_id) if identity.account_id else None,
            is_admin=identity.is_admin,
            course=locator.course_slug or str(locator.course_id),
            decision=resolution.result.decision.value,
            reason=resolution.result.reason,
            requires_package_selection=resolution.result.requires_package_selection,
        )
        return resolution

    async def _resolve(
        self,
        identity: Identity,
        locator: ContentLocator,
        *,
        now_utc: datetime,
    ) -> Resolution:
        course = await self._catalog_call(
            self._catalog.get_course(slug=locator.course_slug, course_id=locator.course_id),
            lookup="course",
        )
        if course is None or (not course.is_published and not identity.is_admin):
            return Resolution(AccessResult(AccessDecision.NOT_FOUND, reason="course_not_found"))

        try:
            async with asyncio.TaskGroup() as group:
                package_task = group.create_task(self._package_context(locator, course))
                packages_task = group.create_task(
                    self._catalog_call(self._catalog.course_has_packages(course.id), lookup="packages")
                )
                tree_task = group.create_task(
                    self._catalog_call(self._catalog.load_course_tree(course.id), lookup="content_tree")
                )
        except ExceptionGroup as failures:
            # The first catalog failure cancels its siblings; surface it unwrapped.
            store_failures, other_failures = failures.split(AccessStoreError)
            if other_failures is not None or store_failures is None:
                raise
            raise store_failures.exceptions[0] from None

        package = package_task.result()
        course_has_packages = packages_task.result()
        age_groups = tree_task.result()
        allowed = await self._allowed_age_groups(package, course)
        scoped = scope_content_tree(
            ContentTree(course=course, package=package, age_groups=age_groups),
            locator,
            allowed_age_group_ids=allowed,
        )
        if scoped is None:
            return Resolution(AccessResult(AccessDecision.NOT_FOUND, reason="content_not_found"))

        if identity.is_admin:
            return self._granted(scoped, reason="admin")

        if course_has_packages and package is None:
            return Resolution(
                AccessResult(
                    AccessDecision.DENIED,
                    requires_package_selection=True,
                    reason="package_selection_required",
                )
            )

        if identity.account_id is None:
            if scoped.path_has_free_preview:
                return self._preview(scoped, reason="anonymous")
            return Resolution(AccessResult(AccessDecision.DENIED, reason="anonymous"))

        return await self._resolve_account(identity.account_id, course, scoped, now_utc=now_utc)

    async def _resolve_account(
        self,
        account_id: UUID,
        course: CourseRef,
        scoped: ScopedTree,
        *,
        now_utc: datetime,
    ) -> Resolution:
        card_lookup = (
            self._grant_lookup(
                self._grants.active_card_grant(account_id, scoped.player_card_id, now_utc),
                lookup="card_grant",
            )
            if scoped.player_card_id is not None
            else self._none()
        )
        month_lookup = (
            self._grant_lookup(
                self._grants.active_month_grant(
                    account_id, course.id, scoped.month_number, now_utc
                ),
                lookup="month_grant",
            )
            if scoped.month_number is not None
            else self._none()
        )

        banned, course_grant, card_grant, month_grant = await asyncio.gather(
            self._is_account_banned(account_id, now_utc),
            self._grant_lookup(
                self._grants.active_course_grant(account_id, course.id, now_utc),
                lookup="course_grant",
            ),
            card_lookup,
            month_lookup,
        )

        if banned:
            return Resolution(AccessResult(AccessDecision.DENIED, reason="account_banned"))
        if course_grant is not None:
            return self._granted(scoped, reason="course_grant")
        if card_grant is not None:
            return self._granted(scoped, reason="card_grant")
        if month_grant is not None:
            return self._granted(scoped, reason="month_grant")
        return self._preview(scoped, reason="no_grant")

    @staticmethod
    def _granted(scoped: ScopedTree, *, reason: str) -> Resolution:
        return Resolution(
            AccessResult(AccessDecision.FULL_ACCESS, reason=reason),
            tree=scoped.tree,
            month_number=scoped.month_number,
        )

    @staticmethod
    def _preview(scoped: ScopedTree, *, reason: str) -> Resolution:
        return Resolution(
            AccessResult(AccessDecision.PREVIEW_ONLY, reason=reason),
            tree=scoped.tree,
            month_number=scoped.month_number,
        )
