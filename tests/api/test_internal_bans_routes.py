from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from fitcoach.access.bans.types import BanResult
from fitcoach.access.devices.types import TrackedDevice
from fitcoach.api.routes import internal_bans
from fitcoach.main import app
from tests.access.access_fixtures import store_down

SEEN_AT = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class _FakeRegistry:
    error: Exception | None = None
    unbanned: set[str] = set()

    async def ban_device(self, device_id, *, reason=None, banned_until=None):
        if self.error is not None:
            raise self.error
        return BanResult(ban_id=3, key=device_id, banned_until=banned_until, reason=reason)

    async def ban_account(self, account_id, *, reason=None, banned_until=None):
        return BanResult(ban_id=4, key=str(account_id), banned_until=banned_until, reason=reason)

    async def unban_device(self, device_id):
        return device_id in self.unbanned

    async def unban_account(self, account_id):
        return str(account_id) in self.unbanned


class _FakeTracker:
    max_devices = 3

    async def list_devices(self, *, account_id):
        return [
            TrackedDevice(device_id="dev-1", first_seen_at=SEEN_AT, last_seen_at=SEEN_AT, is_banned=False),
            TrackedDevice(device_id="dev-2", first_seen_at=SEEN_AT, last_seen_at=SEEN_AT, is_banned=True),
        ]


@pytest.fixture(autouse=True)
def _internal_access(monkeypatch) -> None:
    _FakeRegistry.error = None
    _FakeRegistry.unbanned = set()
    monkeypatch.setattr(internal_bans, "assert_internal_access", lambda request, **kwargs: None)
    monkeypatch.setattr(internal_bans, "BanRegistry", _FakeRegistry)
    monkeypatch.setattr(internal_bans, "DeviceTracker", _FakeTracker)


def test_ban_device_returns_ban() -> None:
    client = TestClient(app)
    response = client.post(
        "/internal/bans/devices",
        json={"device_id": "dev-9", "reason": "chargeback", "banned_until": "2026-04-01T00:00:00Z"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["ban_id"] == 3
    assert payload["key"] == "dev-9"
    assert payload["reason"] == "chargeback"
    assert payload["banned_until"].startswith("2026-04-01T00:00:00")


def test_ban_device_maps_store_failure_to_503() -> None:
    _FakeRegistry.error = store_down()

    client = TestClient(app)
    response = client.post("/internal/bans/devices", json={"device_id": "dev-9"})

    assert response.status_code == 503
    assert response.json() == {"detail": {"code": "E_STORE_UNAVAILABLE"}}


def test_ban_account_without_expiry_is_permanent() -> None:
    account_id = uuid4()

    client = TestClient(app)
    response = client.post("/internal/bans/accounts", json={"account_id": str(account_id)})

    assert response.status_code == 200
    assert response.json() == {"ban_id": 4, "key": str(account_id), "reason": None, "banned_until": None}


def test_unban_reports_whether_a_ban_was_lifted() -> None:
    account_id = uuid4()
    _FakeRegistry.unbanned = {"dev-1", str(account_id)}

    client = TestClient(app)
    lifted = client.delete("/internal/bans/devices/dev-1")
    missing = client.delete("/internal/bans/devices/dev-2")
    account = client.delete(f"/internal/bans/accounts/{account_id}")

    assert lifted.json() == {"key": "dev-1", "unbanned": True}
    assert missing.json() == {"key": "dev-2", "unbanned": False}
    assert account.json() == {"key": str(account_id), "unbanned": True}


def test_list_devices_reports_limit_and_ban_flags() -> None:
    account_id = uuid4()

    client = TestClient(app)
    response = client.get("/internal/devices", params={"account_id": str(account_id)})

    assert response.status_code == 200
    payload = response.json()
    assert payload["account_id"] == str(account_id)
    assert payload["max_devices"] == 3
    assert [(device["device_id"], device["is_banned"]) for device in payload["devices"]] == [
        ("dev-1", False),
        ("dev-2", True),
    ]
