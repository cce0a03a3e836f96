from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from fitcoach.access.codes.errors import CodeScopeError
from fitcoach.access.grants.types import GrantSubject


class CodeScopeType(str, Enum):
    COURSE = "COURSE"
    PACKAGE_COURSE = "PACKAGE_COURSE"
    CARD = "CARD"
    MONTH = "MONTH"


@dataclass(frozen=True, slots=True)
class CodeScope:
    scope_type: CodeScopeType
    course_id: UUID
    package_id: UUID | None = None
    player_card_id: UUID | None = None
    month_number: int | None = None

    def validate(self) -> None:
        if self.scope_type is CodeScopeType.PACKAGE_COURSE and self.package_id is None:
            raise CodeScopeError("PACKAGE_COURSE codes require package_id")
        if self.scope_type is CodeScopeType.COURSE and self.package_id is not None:
            raise CodeScopeError("COURSE codes must not carry package_id")
        if self.scope_type is CodeScopeType.CARD and self.player_card_id is None:
            raise CodeScopeError("CARD codes require player_card_id")
        if self.scope_type is not CodeScopeType.CARD and self.player_card_id is not None:
            raise CodeScopeError("player_card_id is only valid for CARD codes")
        if self.scope_type is CodeScopeType.MONTH and (
            self.month_number is None or self.month_number < 1
        ):
            raise CodeScopeError("MONTH codes require a positive month_number")
        if self.scope_type is not CodeScopeType.MONTH and self.month_number is not None:
            raise CodeScopeError("month_number is only valid for MONTH codes")

    def grant_subject(self) -> GrantSubject:
        if self.scope_type is CodeScopeType.CARD:
            assert self.player_card_id is not None
            return GrantSubject.card(self.course_id, self.player_card_id)
        if self.scope_type is CodeScopeType.MONTH:
            assert self.month_number is not None
            return GrantSubject.month(self.course_id, self.month_number)
        return GrantSubject.course(self.course_id)


@dataclass(slots=True)
class RedeemResult:
    code_id: int
    grant_id: int
    scope_type: CodeScopeType
    course_id: UUID
    end_at: datetime | None
    package_id: UUID | None = None
    player_card_id: UUID | None = None
    month_number: int | None = None


@dataclass(slots=True)
class GeneratedCodes:
    codes: list[str]
    scope: CodeScope
    duration_days: int
    max_redemptions: int
