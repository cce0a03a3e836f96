from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class GrantType(str, Enum):
    COURSE = "COURSE"
    CARD = "CARD"
    MONTH = "MONTH"


class GrantStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


@dataclass(frozen=True, slots=True)
class GrantSubject:
    """What a grant unlocks: a whole course, one player card, or one course month."""

    grant_type: GrantType
    course_id: UUID
    player_card_id: UUID | None = None
    month_number: int | None = None

    def __post_init__(self) -> None:
        if self.grant_type is GrantType.CARD and self.player_card_id is None:
            raise ValueError("card grant requires player_card_id")
        if self.grant_type is GrantType.MONTH and (
            self.month_number is None or self.month_number < 1
        ):
            raise ValueError("month grant requires a positive month_number")
        if self.grant_type is not GrantType.CARD and self.player_card_id is not None:
            raise ValueError("player_card_id is only valid for card grants")
        if self.grant_type is not GrantType.MONTH and self.month_number is not None:
            raise ValueError("month_number is only valid for month grants")

    @classmethod
    def course(cls, course_id: UUID) -> GrantSubject:
        return cls(grant_type=GrantType.COURSE, course_id=course_id)

    @classmethod
    def card(cls, course_id: UUID, player_card_id: UUID) -> GrantSubject:
        return cls(grant_type=GrantType.CARD, course_id=course_id, player_card_id=player_card_id)

    @classmethod
    def month(cls, course_id: UUID, month_number: int) -> GrantSubject:
        return cls(grant_type=GrantType.MONTH, course_id=course_id, month_number=month_number)


@dataclass(frozen=True, slots=True)
class GrantWindow:
    start_at: datetime
    end_at: datetime | None


@dataclass(slots=True)
class ActiveGrant:
    grant_id: int
    grant_type: GrantType
    end_at: datetime | None


@dataclass(slots=True)
class GrantIssueResult:
    grant_id: int
    subject: GrantSubject
    window: GrantWindow
    created: bool


@dataclass(slots=True)
class GrantRecord:
    grant_id: int
    account_id: UUID
    grant_type: GrantType
    course_id: UUID
    player_card_id: UUID | None
    month_number: int | None
    package_id: UUID | None
    status: str
    source_kind: str
    start_at: datetime
    end_at: datetime | None
    is_active: bool
