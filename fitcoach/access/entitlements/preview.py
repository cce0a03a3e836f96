from __future__ import annotations

from fitcoach.access.entitlements.types import (
    AgeGroupNode,
    AgeGroupView,
    ContentTree,
    ContentView,
    DayView,
    MonthNode,
    MonthView,
    PlayerCardNode,
    PlayerCardView,
    VideoNode,
    VideoView,
)


def _video_view(video: VideoNode, *, unlocked: bool) -> VideoView:
    if unlocked or video.is_free_preview:
        return VideoView(
            id=video.id,
            title=video.title,
            thumbnail_url=video.thumbnail_url,
            duration_sec=video.duration_sec,
            is_free_preview=video.is_free_preview,
            locked=False,
            video_url=video.video_url,
            details=video.details,
        )
    return VideoView(
        id=video.id,
        title=video.title,
        thumbnail_url=video.thumbnail_url,
        duration_sec=video.duration_sec,
        is_free_preview=False,
        locked=True,
    )


def _month_view(month: MonthNode, *, unlocked: bool) -> MonthView:
    return MonthView(
        id=month.id,
        month_number=month.month_number,
        title=month.title,
        locked=not unlocked,
        days=[
            DayView(
                id=day.id,
                day_number=day.day_number,
                title=day.title,
                videos=[_video_view(video, unlocked=unlocked) for video in day.videos],
            )
            for day in month.days
        ],
    )


def _card_view(card: PlayerCardNode) -> PlayerCardView:
    return PlayerCardView(
        id=card.id,
        age=card.age,
        height_cm=card.height_cm,
        weight_kg=card.weight_kg,
        note=card.note,
    )


def _age_group_view(
    group: AgeGroupNode,
    *,
    unlocked_month: int | None,
    unlock_all: bool,
) -> AgeGroupView:
    return AgeGroupView(
        id=group.id,
        title=group.title,
        cards=[_card_view(card) for card in group.cards],
        months=[
            _month_view(
                month,
                unlocked=unlock_all or month.month_number == unlocked_month,
            )
            for month in group.months
        ],
    )


def _project(tree: ContentTree, *, unlocked_month: int | None, unlock_all: bool) -> ContentView:
    return ContentView(
        course_id=tree.course.id,
        course_slug=tree.course.slug,
        course_title=tree.course.title,
        package_slug=tree.package.slug if tree.package is not None else None,
        age_groups=[
            _age_group_view(group, unlocked_month=unlocked_month, unlock_all=unlock_all)
            for group in tree.age_groups
        ],
    )


def build_preview(tree: ContentTree) -> ContentView:
    """Project ``tree`` for a caller without access.

    Free-preview videos stay playable; every other video keeps its title,
    thumbnail and duration but loses ``video_url`` and ``details``.
    """
    return _project(tree, unlocked_month=None, unlock_all=False)


def build_full(tree: ContentTree, *, month_number: int | None = None) -> ContentView:
    """Project ``tree`` with content unlocked.

    With ``month_number`` only months with that number are unlocked and the
    rest of the tree is projected as a preview.
    """
    if month_number is None:
        return _project(tree, unlocked_month=None, unlock_all=True)
    return _project(tree, unlocked_month=month_number, unlock_all=False)
