from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class TrackedDevice:
    device_id: str
    first_seen_at: datetime
    last_seen_at: datetime
    is_banned: bool


@dataclass(slots=True)
class TrackResult:
    device_count: int
    max_devices: int
