from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID


class AccessDecision(str, Enum):
    FULL_ACCESS = "FULL_ACCESS"
    PREVIEW_ONLY = "PREVIEW_ONLY"
    DENIED = "DENIED"
    NOT_FOUND = "NOT_FOUND"


@dataclass(frozen=True, slots=True)
class Identity:
    account_id: UUID | None = None
    is_admin: bool = False


@dataclass(frozen=True, slots=True)
class ContentLocator:
    course_slug: str | None = None
    course_id: UUID | None = None
    package_slug: str | None = None
    package_id: UUID | None = None
    age_group_id: UUID | None = None
    player_card_id: UUID | None = None
    month_number: int | None = None
    day_id: UUID | None = None
    video_id: UUID | None = None

    def __post_init__(self) -> None:
        if not self.course_slug and self.course_id is None:
            raise ValueError("locator requires course_slug or course_id")
        if self.month_number is not None and self.month_number < 1:
            raise ValueError("month_number must be positive")
        if self.player_card_id is not None and self.names_month:
            raise ValueError("a locator names either a player card or a month, not both")

    @property
    def names_month(self) -> bool:
        return self.month_number is not None or self.day_id is not None or self.video_id is not None

    @property
    def has_package(self) -> bool:
        return bool(self.package_slug) or self.package_id is not None


@dataclass(slots=True)
class AccessResult:
    decision: AccessDecision
    requires_package_selection: bool = False
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class CourseRef:
    id: UUID
    slug: str
    title: str | None = None
    is_published: bool = True


@dataclass(frozen=True, slots=True)
class PackageRef:
    id: UUID
    slug: str
    title: str | None = None
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class VideoNode:
    id: UUID
    title: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None
    details: str | None = None
    duration_sec: int | None = None
    is_free_preview: bool = False


@dataclass(frozen=True, slots=True)
class DayNode:
    id: UUID
    day_number: int | None = None
    title: str | None = None
    videos: tuple[VideoNode, ...] = ()


@dataclass(frozen=True, slots=True)
class MonthNode:
    id: UUID
    month_number: int
    title: str | None = None
    days: tuple[DayNode, ...] = ()

    def has_free_preview(self) -> bool:
        return any(video.is_free_preview for day in self.days for video in day.videos)


@dataclass(frozen=True, slots=True)
class PlayerCardNode:
    id: UUID
    age: int | None = None
    height_cm: float | None = None
    weight_kg: float | None = None
    note: str | None = None


@dataclass(frozen=True, slots=True)
class AgeGroupNode:
    id: UUID
    title: str | None = None
    cards: tuple[PlayerCardNode, ...] = ()
    months: tuple[MonthNode, ...] = ()


@dataclass(frozen=True, slots=True)
class ContentTree:
    course: CourseRef
    package: PackageRef | None = None
    age_groups: tuple[AgeGroupNode, ...] = ()

    def has_free_preview(self) -> bool:
        return any(month.has_free_preview() for group in self.age_groups for month in group.months)


@dataclass(slots=True)
class Resolution:
    """Decision plus the part of the content tree the locator points at."""

    result: AccessResult
    tree: ContentTree | None = None
    month_number: int | None = None


@dataclass(slots=True)
class VideoView:
    id: UUID
    title: str | None
    thumbnail_url: str | None
    duration_sec: int | None
    is_free_preview: bool
    locked: bool
    video_url: str | None = None
    details: str | None = None


@dataclass(slots=True)
class DayView:
    id: UUID
    day_number: int | None
    title: str | None
    videos: list[VideoView] = field(default_factory=list)


@dataclass(slots=True)
class MonthView:
    id: UUID
    month_number: int
    title: str | None
    locked: bool
    days: list[DayView] = field(default_factory=list)


@dataclass(slots=True)
class PlayerCardView:
    id: UUID
    age: int | None
    height_cm: float | None
    weight_kg: float | None
    note: str | None


@dataclass(slots=True)
class AgeGroupView:
    id: UUID
    title: str | None
    cards: list[PlayerCardView] = field(default_factory=list)
    months: list[MonthView] = field(default_factory=list)


@dataclass(slots=True)
class ContentView:
    course_id: UUID
    course_slug: str
    course_title: str | None
    package_slug: str | None
    age_groups: list[AgeGroupView] = field(default_factory=list)


@dataclass(slots=True)
class ContentResult:
    result: AccessResult
    content: ContentView | None = None
