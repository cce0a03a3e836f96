from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from fitcoach.access.grants.rules import (
    is_course_grant_active,
    is_grant_active,
    merge_grant_window,
)
from fitcoach.access.grants.types import GrantSubject, GrantType, GrantWindow

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_grant_active_until_end_at_exclusive() -> None:
    assert is_grant_active(status="active", end_at=NOW + timedelta(seconds=1), now_utc=NOW) is True
    assert is_grant_active(status="active", end_at=NOW, now_utc=NOW) is False
    assert is_grant_active(status="active", end_at=None, now_utc=NOW) is True


@pytest.mark.parametrize("status", ["inactive", "expired"])
def test_non_active_status_never_grants(status: str) -> None:
    assert is_grant_active(status=status, end_at=None, now_utc=NOW) is False


@pytest.mark.parametrize("source_kind", ["code", "manual", "admin"])
def test_course_grant_honours_qualifying_sources(source_kind: str) -> None:
    assert (
        is_course_grant_active(status="active", end_at=None, source_kind=source_kind, now_utc=NOW)
        is True
    )


def test_course_grant_ignores_pending_source() -> None:
    assert (
        is_course_grant_active(status="active", end_at=None, source_kind="checkout", now_utc=NOW)
        is False
    )


def test_merge_without_existing_starts_now() -> None:
    end_at = NOW + timedelta(days=30)
    assert merge_grant_window(None, now_utc=NOW, new_end_at=end_at) == GrantWindow(
        start_at=NOW, end_at=end_at
    )


def test_merge_keeps_earliest_start_and_latest_end() -> None:
    existing = GrantWindow(start_at=NOW - timedelta(days=10), end_at=NOW + timedelta(days=50))

    shorter = merge_grant_window(existing, now_utc=NOW, new_end_at=NOW + timedelta(days=20))
    longer = merge_grant_window(existing, now_utc=NOW, new_end_at=NOW + timedelta(days=90))

    assert shorter == existing
    assert longer == GrantWindow(start_at=NOW - timedelta(days=10), end_at=NOW + timedelta(days=90))


def test_merge_with_unbounded_side_is_unbounded() -> None:
    bounded = GrantWindow(start_at=NOW - timedelta(days=1), end_at=NOW + timedelta(days=5))
    unbounded = GrantWindow(start_at=NOW - timedelta(days=1), end_at=None)

    assert merge_grant_window(bounded, now_utc=NOW, new_end_at=None).end_at is None
    assert merge_grant_window(unbounded, now_utc=NOW, new_end_at=NOW + timedelta(days=5)).end_at is None


def test_merge_is_idempotent_for_repeated_issue() -> None:
    existing = GrantWindow(start_at=NOW - timedelta(days=3), end_at=NOW + timedelta(days=27))
    new_end = NOW + timedelta(days=30)

    once = merge_grant_window(existing, now_utc=NOW, new_end_at=new_end)
    twice = merge_grant_window(once, now_utc=NOW, new_end_at=new_end)

    assert once == twice


def test_merge_never_shortens_access() -> None:
    existing = GrantWindow(start_at=NOW, end_at=NOW + timedelta(days=60))
    for days in (1, 30, 59, 60, 61, 365):
        merged = merge_grant_window(existing, now_utc=NOW, new_end_at=NOW + timedelta(days=days))
        assert merged.end_at is not None
        assert merged.end_at >= existing.end_at


def test_grant_subject_validates_payload() -> None:
    course_id = uuid4()
    assert GrantSubject.month(course_id, 2).grant_type is GrantType.MONTH

    with pytest.raises(ValueError):
        GrantSubject(grant_type=GrantType.CARD, course_id=course_id)
    with pytest.raises(ValueError):
        GrantSubject.month(course_id, 0)
    with pytest.raises(ValueError):
        GrantSubject(grant_type=GrantType.COURSE, course_id=course_id, month_number=1)
