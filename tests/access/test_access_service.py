from __future__ import annotations

from uuid import uuid4

import pytest

from fitcoach.access.entitlements.gate import RequestGate
from fitcoach.access.entitlements.resolver import EntitlementResolver
from fitcoach.access.entitlements.service import AccessService
from fitcoach.access.entitlements.types import AccessDecision, ContentLocator, Identity
from fitcoach.access.devices.types import TrackResult
from tests.access.access_fixtures import (
    NOW,
    FakeAllowlist,
    FakeBans,
    FakeCatalog,
    FakeGrants,
    make_age_group,
)


class _Devices:
    def __init__(self) -> None:
        self.calls: list[tuple[object, str]] = []

    async def track_device(self, *, account_id, device_id, now_utc=None) -> TrackResult:
        self.calls.append((account_id, device_id))
        return TrackResult(device_count=1, max_devices=3)


@pytest.fixture
def setup():
    catalog = FakeCatalog()
    bans = FakeBans()
    grants = FakeGrants()
    devices = _Devices()
    group = make_age_group("juniors", months=2)
    course = catalog.add_course("speed-training", (group,))
    service = AccessService(
        resolver=EntitlementResolver(
            catalog=catalog,
            bans=bans,
            grants=grants,
            allowlist=FakeAllowlist(),
            store_timeout_seconds=1.0,
        ),
        gate=RequestGate(bans=bans, devices=devices, store_timeout_seconds=1.0),
    )
    return {
        "service": service,
        "bans": bans,
        "grants": grants,
        "devices": devices,
        "course": course,
        "group": group,
    }


def _video_urls(content):
    return [
        video.video_url
        for group in content.age_groups
        for month in group.months
        for day in month.days
        for video in day.videos
        if not video.is_free_preview
    ]


@pytest.mark.asyncio
async def test_fetch_content_returns_full_tree_for_course_grant(setup) -> None:
    account_id = uuid4()
    setup["grants"].course_grants.add((account_id, setup["course"].id))

    result = await setup["service"].fetch_content(
        Identity(account_id=account_id),
        ContentLocator(course_slug="speed-training"),
        device_id="device-1",
        now_utc=NOW,
    )

    assert result.result.decision is AccessDecision.FULL_ACCESS
    assert result.content is not None
    assert all(_video_urls(result.content))
    assert setup["devices"].calls == [(account_id, "device-1")]


@pytest.mark.asyncio
async def test_fetch_content_anonymous_gets_locked_placeholders(setup) -> None:
    result = await setup["service"].fetch_content(
        Identity(),
        ContentLocator(course_slug="speed-training"),
        device_id="device-1",
        now_utc=NOW,
    )

    assert result.result.decision is AccessDecision.PREVIEW_ONLY
    assert result.content is not None
    assert _video_urls(result.content)
    assert not any(_video_urls(result.content))
    assert setup["devices"].calls == []


@pytest.mark.asyncio
async def test_fetch_content_month_grant_unlocks_single_month(setup) -> None:
    account_id = uuid4()
    setup["grants"].month_grants.add((account_id, setup["course"].id, 2))

    result = await setup["service"].fetch_content(
        Identity(account_id=account_id),
        ContentLocator(course_slug="speed-training", month_number=2),
        now_utc=NOW,
    )

    assert result.result.reason == "month_grant"
    assert result.content is not None
    months = result.content.age_groups[0].months
    assert [month.month_number for month in months] == [2]
    assert months[0].locked is False


@pytest.mark.asyncio
async def test_fetch_content_blocked_gate_returns_denied_without_content(setup) -> None:
    setup["bans"].banned_devices.add("device-9")

    result = await setup["service"].fetch_content(
        Identity(account_id=uuid4()),
        ContentLocator(course_slug="speed-training"),
        device_id="device-9",
        now_utc=NOW,
    )

    assert result.result.decision is AccessDecision.DENIED
    assert result.result.reason == "device_banned"
    assert result.content is None


@pytest.mark.asyncio
async def test_fetch_content_not_found_has_no_content(setup) -> None:
    result = await setup["service"].fetch_content(
        Identity(account_id=uuid4()),
        ContentLocator(course_slug="missing-course"),
        now_utc=NOW,
    )

    assert result.result.decision is AccessDecision.NOT_FOUND
    assert result.content is None


@pytest.mark.asyncio
async def test_resolve_does_not_track_devices(setup) -> None:
    result = await setup["service"].resolve(
        Identity(account_id=uuid4()),
        ContentLocator(course_slug="speed-training"),
        now_utc=NOW,
    )

    assert result.decision is AccessDecision.PREVIEW_ONLY
    assert setup["devices"].calls == []


@pytest.mark.asyncio
async def test_fetch_content_anonymous_paid_video_is_locked_placeholder(setup) -> None:
    paid_video = setup["group"].months[0].days[0].videos[1]

    result = await setup["service"].fetch_content(
        Identity(),
        ContentLocator(course_id=setup["course"].id, video_id=paid_video.id),
        now_utc=NOW,
    )

    assert result.result.decision is AccessDecision.PREVIEW_ONLY
    assert result.content is not None
    videos = [
        video
        for group in result.content.age_groups
        for month in group.months
        for day in month.days
        for video in day.videos
    ]
    assert len(videos) == 1
    assert videos[0].id == paid_video.id
    assert videos[0].locked is True
    assert videos[0].video_url is None
    assert videos[0].details is None
