from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class BanResult:
    ban_id: int
    key: str
    banned_until: datetime | None
    reason: str | None
