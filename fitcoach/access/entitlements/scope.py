from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, replace
from uuid import UUID

from fitcoach.access.entitlements.types import (
    AgeGroupNode,
    ContentLocator,
    ContentTree,
    DayNode,
    MonthNode,
)


@dataclass(slots=True)
class ScopedTree:
    tree: ContentTree
    player_card_id: UUID | None = None
    month_number: int | None = None
    # Measured on the enclosing course, age group or month before narrowing.
    path_has_free_preview: bool = False


def visible_age_groups(
    age_groups: tuple[AgeGroupNode, ...],
    allowed_age_group_ids: Collection[UUID],
) -> tuple[AgeGroupNode, ...]:
    """Age groups visible through a package; an empty allowlist means all of them."""
    if not allowed_age_group_ids:
        return age_groups
    return tuple(group for group in age_groups if group.id in allowed_age_group_ids)


def _narrow_month(month: MonthNode, locator: ContentLocator) -> MonthNode | None:
    days = month.days
    if locator.day_id is not None:
        days = tuple(day for day in days if day.id == locator.day_id)
    if locator.video_id is not None:
        narrowed: list[DayNode] = []
        for day in days:
            videos = tuple(video for video in day.videos if video.id == locator.video_id)
            if videos:
                narrowed.append(replace(day, videos=videos))
        days = tuple(narrowed)
    if (locator.day_id is not None or locator.video_id is not None) and not days:
        return None
    return replace(month, days=days)


def _scope_month(
    tree: ContentTree,
    groups: tuple[AgeGroupNode, ...],
    locator: ContentLocator,
) -> ScopedTree | None:
    # Groups are in catalog order, so a bare month number picks the first visible group.
    for group in groups:
        for month in group.months:
            if locator.month_number is not None and month.month_number != locator.month_number:
                continue
            narrowed = _narrow_month(month, locator)
            if narrowed is None:
                continue
            scoped_group = replace(group, cards=(), months=(narrowed,))
            return ScopedTree(
                tree=replace(tree, age_groups=(scoped_group,)),
                month_number=narrowed.month_number,
                path_has_free_preview=month.has_free_preview(),
            )
    return None


def scope_content_tree(
    tree: ContentTree,
    locator: ContentLocator,
    *,
    allowed_age_group_ids: Collection[UUID] = (),
) -> ScopedTree | None:
    """Cut ``tree`` down to what ``locator`` points at.

    Returns ``None`` when the locator names something that does not exist
    under the course or is hidden by the package allowlist.
    """
    groups = visible_age_groups(tree.age_groups, allowed_age_group_ids)
    if locator.age_group_id is not None:
        groups = tuple(group for group in groups if group.id == locator.age_group_id)
        if not groups:
            return None

    if locator.player_card_id is not None:
        for group in groups:
            cards = tuple(card for card in group.cards if card.id == locator.player_card_id)
            if cards:
                return ScopedTree(
                    tree=replace(tree, age_groups=(replace(group, cards=cards),)),
                    player_card_id=locator.player_card_id,
                    path_has_free_preview=any(month.has_free_preview() for month in group.months),
                )
        return None

    if locator.names_month:
        return _scope_month(tree, groups, locator)

    scoped_tree = replace(tree, age_groups=groups)
    return ScopedTree(tree=scoped_tree, path_has_free_preview=scoped_tree.has_free_preview())
