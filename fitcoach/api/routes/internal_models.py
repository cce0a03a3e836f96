from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class IdentityPayload(BaseModel):
    account_id: UUID | None = None
    is_admin: bool = False


class LocatorPayload(BaseModel):
    course_slug: str | None = Field(default=None, min_length=1, max_length=128)
    course_id: UUID | None = None
    package_slug: str | None = Field(default=None, min_length=1, max_length=128)
    package_id: UUID | None = None
    age_group_id: UUID | None = None
    player_card_id: UUID | None = None
    month_number: int | None = Field(default=None, ge=1)
    day_id: UUID | None = None
    video_id: UUID | None = None

    @model_validator(mode="after")
    def _require_course(self) -> LocatorPayload:
        if self.course_slug is None and self.course_id is None:
            raise ValueError("course_slug or course_id is required")
        return self


class AccessResolveRequest(BaseModel):
    identity: IdentityPayload = Field(default_factory=IdentityPayload)
    locator: LocatorPayload


class AccessContentRequest(AccessResolveRequest):
    device_id: str | None = Field(default=None, min_length=1, max_length=128)


class AccessResolveResponse(BaseModel):
    decision: str
    requires_package_selection: bool
    reason: str | None = None


class VideoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str | None
    thumbnail_url: str | None
    duration_sec: int | None
    is_free_preview: bool
    locked: bool
    video_url: str | None = None
    details: str | None = None


class DayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    day_number: int | None
    title: str | None
    videos: list[VideoResponse]


class MonthResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    month_number: int
    title: str | None
    locked: bool
    days: list[DayResponse]


class PlayerCardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    age: int | None
    height_cm: float | None
    weight_kg: float | None
    note: str | None


class AgeGroupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str | None
    cards: list[PlayerCardResponse]
    months: list[MonthResponse]


class ContentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    course_id: UUID
    course_slug: str
    course_title: str | None
    package_slug: str | None
    age_groups: list[AgeGroupResponse]


class AccessContentResponse(AccessResolveResponse):
    content: ContentResponse | None = None


class AccessGateRequest(BaseModel):
    identity: IdentityPayload = Field(default_factory=IdentityPayload)
    device_id: str | None = Field(default=None, min_length=1, max_length=128)


class AccessGateResponse(BaseModel):
    status: Literal["ok", "blocked"]
    reason: str | None = None


class CodeRedeemRequest(BaseModel):
    account_id: UUID
    code: str = Field(min_length=1, max_length=64)
    device_id: str | None = Field(default=None, min_length=1, max_length=128)


class CodeRedeemResponse(BaseModel):
    code_id: int
    grant_id: int
    scope_type: str
    course_id: UUID
    package_id: UUID | None = None
    player_card_id: UUID | None = None
    month_number: int | None = None
    end_at: datetime | None = None


class CodeGenerateRequest(BaseModel):
    scope_type: Literal["COURSE", "PACKAGE_COURSE", "CARD", "MONTH"]
    course_id: UUID
    package_id: UUID | None = None
    player_card_id: UUID | None = None
    month_number: int | None = Field(default=None, ge=1)
    count: int = Field(ge=1, le=1000)
    duration_days: int = Field(ge=1, le=3650)
    max_redemptions: int = Field(default=1, ge=1, le=100_000)
    created_by: str = Field(min_length=1, max_length=64)


class CodeGenerateResponse(BaseModel):
    scope_type: str
    course_id: UUID
    duration_days: int
    max_redemptions: int
    codes: list[str]


class GrantIssueRequest(BaseModel):
    account_id: UUID
    grant_type: Literal["COURSE", "CARD", "MONTH"]
    course_id: UUID
    player_card_id: UUID | None = None
    month_number: int | None = Field(default=None, ge=1)
    package_id: UUID | None = None
    end_at: datetime | None = None
    duration_days: int | None = Field(default=None, ge=1, le=3650)
    source_kind: Literal["admin", "manual"] = "admin"

    @model_validator(mode="after")
    def _single_expiry(self) -> GrantIssueRequest:
        if self.end_at is not None and self.duration_days is not None:
            raise ValueError("pass either end_at or duration_days")
        return self


class GrantIssueResponse(BaseModel):
    grant_id: int
    grant_type: str
    created: bool
    start_at: datetime
    end_at: datetime | None = None


class GrantResponse(BaseModel):
    grant_id: int
    account_id: UUID
    grant_type: str
    course_id: UUID
    player_card_id: UUID | None = None
    month_number: int | None = None
    package_id: UUID | None = None
    status: str
    source_kind: str
    start_at: datetime
    end_at: datetime | None = None
    is_active: bool


class GrantListResponse(BaseModel):
    grants: list[GrantResponse]


class DeviceBanRequest(BaseModel):
    device_id: str = Field(min_length=1, max_length=128)
    reason: str | None = Field(default=None, max_length=256)
    banned_until: datetime | None = None


class AccountBanRequest(BaseModel):
    account_id: UUID
    reason: str | None = Field(default=None, max_length=256)
    banned_until: datetime | None = None


class BanResponse(BaseModel):
    ban_id: int
    key: str
    reason: str | None = None
    banned_until: datetime | None = None


class UnbanResponse(BaseModel):
    key: str
    unbanned: bool


class DeviceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    device_id: str
    first_seen_at: datetime
    last_seen_at: datetime
    is_banned: bool


class DeviceListResponse(BaseModel):
    account_id: UUID
    max_devices: int
    devices: list[DeviceResponse]
