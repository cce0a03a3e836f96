from __future__ import annotations

from datetime import datetime

from fitcoach.access.grants.types import GrantStatus, GrantWindow

# Course enrollments from other sources (e.g. pending checkout) never unlock content.
QUALIFYING_COURSE_SOURCES = frozenset({"code", "manual", "admin"})


def is_grant_active(*, status: str, end_at: datetime | None, now_utc: datetime) -> bool:
    if status != GrantStatus.ACTIVE.value:
        return False
    return end_at is None or now_utc < end_at


def is_course_source_qualifying(source_kind: str) -> bool:
    return source_kind in QUALIFYING_COURSE_SOURCES


def is_course_grant_active(
    *,
    status: str,
    end_at: datetime | None,
    source_kind: str,
    now_utc: datetime,
) -> bool:
    return is_course_source_qualifying(source_kind) and is_grant_active(
        status=status, end_at=end_at, now_utc=now_utc
    )


def merge_grant_window(
    existing: GrantWindow | None,
    *,
    now_utc: datetime,
    new_end_at: datetime | None,
) -> GrantWindow:
    """Combine an existing grant window with a newly issued one.

    The start only moves back in time and the end only moves forward, so
    re-issuing never shortens access. ``None`` as an end means unbounded and
    wins over any bounded end on either side.
    """
    if existing is None:
        return GrantWindow(start_at=now_utc, end_at=new_end_at)

    start_at = min(existing.start_at, now_utc)
    if existing.end_at is None or new_end_at is None:
        return GrantWindow(start_at=start_at, end_at=None)
    return GrantWindow(start_at=start_at, end_at=max(existing.end_at, new_end_at))
