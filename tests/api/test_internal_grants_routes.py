from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from fitcoach.access.grants.errors import GrantNotFoundError
from fitcoach.access.grants.service import GrantService
from fitcoach.access.grants.types import (
    GrantIssueResult,
    GrantRecord,
    GrantType,
    GrantWindow,
)
from fitcoach.api.routes import internal_grants
from fitcoach.main import app
from tests.access.access_fixtures import FakeSessionFactory, store_down


@pytest.fixture
def sessions(monkeypatch) -> FakeSessionFactory:
    factory = FakeSessionFactory()
    monkeypatch.setattr(internal_grants, "assert_internal_access", lambda request, **kwargs: None)
    monkeypatch.setattr(internal_grants, "SessionLocal", factory)
    return factory


def _record(**overrides) -> GrantRecord:
    values = {
        "grant_id": 7,
        "account_id": uuid4(),
        "grant_type": GrantType.CARD,
        "course_id": uuid4(),
        "player_card_id": uuid4(),
        "month_number": None,
        "package_id": None,
        "status": "active",
        "source_kind": "code",
        "start_at": datetime(2026, 3, 1, tzinfo=timezone.utc),
        "end_at": None,
        "is_active": True,
    }
    values.update(overrides)
    return GrantRecord(**values)


def test_issue_grant_converts_duration_to_end_at(monkeypatch, sessions: FakeSessionFactory) -> None:
    captured: dict[str, object] = {}

    async def _fake_issue(session, **kwargs):
        captured.update(kwargs)
        return GrantIssueResult(
            grant_id=5,
            subject=kwargs["subject"],
            window=GrantWindow(start_at=kwargs["now_utc"], end_at=kwargs["end_at"]),
            created=True,
        )

    monkeypatch.setattr(GrantService, "issue_grant", _fake_issue)

    client = TestClient(app)
    response = client.post(
        "/internal/grants",
        json={
            "account_id": str(uuid4()),
            "grant_type": "MONTH",
            "course_id": str(uuid4()),
            "month_number": 3,
            "duration_days": 30,
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["grant_id"] == 5
    assert payload["grant_type"] == "MONTH"
    assert payload["created"] is True
    assert captured["end_at"] - captured["now_utc"] == timedelta(days=30)
    assert captured["subject"].month_number == 3
    assert captured["source_kind"] == "admin"
    assert sessions.begin_calls == 1


def test_issue_grant_rejects_month_grant_without_month(sessions: FakeSessionFactory) -> None:
    client = TestClient(app)
    response = client.post(
        "/internal/grants",
        json={"account_id": str(uuid4()), "grant_type": "MONTH", "course_id": str(uuid4())},
    )

    assert response.status_code == 422
    assert response.json() == {"detail": {"code": "E_INVALID_GRANT"}}


def test_issue_grant_rejects_end_at_with_duration(sessions: FakeSessionFactory) -> None:
    client = TestClient(app)
    response = client.post(
        "/internal/grants",
        json={
            "account_id": str(uuid4()),
            "grant_type": "COURSE",
            "course_id": str(uuid4()),
            "end_at": "2026-05-01T00:00:00Z",
            "duration_days": 30,
        },
    )

    assert response.status_code == 422


def test_issue_grant_maps_store_failure_to_503(monkeypatch, sessions: FakeSessionFactory) -> None:
    async def _fake_issue(session, **kwargs):
        raise store_down()

    monkeypatch.setattr(GrantService, "issue_grant", _fake_issue)

    client = TestClient(app)
    response = client.post(
        "/internal/grants",
        json={"account_id": str(uuid4()), "grant_type": "COURSE", "course_id": str(uuid4())},
    )

    assert response.status_code == 503
    assert response.json() == {"detail": {"code": "E_STORE_UNAVAILABLE"}}


def test_revoke_grant_returns_record(monkeypatch, sessions: FakeSessionFactory) -> None:
    async def _fake_revoke(session, *, grant_id, now_utc):
        return _record(grant_id=grant_id, status="revoked", is_active=False)

    monkeypatch.setattr(GrantService, "revoke_grant", _fake_revoke)

    client = TestClient(app)
    response = client.post("/internal/grants/7/revoke")

    assert response.status_code == 200
    payload = response.json()
    assert payload["grant_id"] == 7
    assert payload["grant_type"] == "CARD"
    assert payload["status"] == "revoked"
    assert payload["is_active"] is False


def test_revoke_unknown_grant_returns_404(monkeypatch, sessions: FakeSessionFactory) -> None:
    async def _fake_revoke(session, *, grant_id, now_utc):
        raise GrantNotFoundError

    monkeypatch.setattr(GrantService, "revoke_grant", _fake_revoke)

    client = TestClient(app)
    response = client.post("/internal/grants/999/revoke")

    assert response.status_code == 404
    assert response.json() == {"detail": {"code": "E_GRANT_NOT_FOUND"}}


def test_list_grants_uses_read_session(monkeypatch, sessions: FakeSessionFactory) -> None:
    account_id = uuid4()

    async def _fake_list(session, *, account_id, now_utc):
        return [
            _record(account_id=account_id),
            _record(account_id=account_id, grant_id=8, grant_type=GrantType.COURSE, player_card_id=None),
        ]

    monkeypatch.setattr(GrantService, "list_account_grants", _fake_list)

    client = TestClient(app)
    response = client.get("/internal/grants", params={"account_id": str(account_id)})

    assert response.status_code == 200
    grants = response.json()["grants"]
    assert [grant["grant_id"] for grant in grants] == [7, 8]
    assert {grant["account_id"] for grant in grants} == {str(account_id)}
    assert sessions.plain_calls == 1
    assert sessions.begin_calls == 0


@pytest.mark.parametrize(
    "end_at",
    ["2000-01-01T00:00:00Z", "2099-01-01T00:00:00"],
    ids=["past", "naive"],
)
def test_issue_grant_rejects_past_or_naive_end_at(
    monkeypatch, sessions: FakeSessionFactory, end_at: str
) -> None:
    async def _fake_issue(session, **kwargs):
        raise AssertionError("grant must not be issued")

    monkeypatch.setattr(GrantService, "issue_grant", _fake_issue)

    client = TestClient(app)
    response = client.post(
        "/internal/grants",
        json={
            "account_id": str(uuid4()),
            "grant_type": "COURSE",
            "course_id": str(uuid4()),
            "end_at": end_at,
        },
    )

    assert response.status_code == 422
    assert response.json() == {"detail": {"code": "E_INVALID_GRANT"}}
    assert sessions.begin_calls == 0


def test_issue_grant_passes_future_end_at_through(monkeypatch, sessions: FakeSessionFactory) -> None:
    captured: dict[str, object] = {}

    async def _fake_issue(session, **kwargs):
        captured.update(kwargs)
        return GrantIssueResult(
            grant_id=9,
            subject=kwargs["subject"],
            window=GrantWindow(start_at=kwargs["now_utc"], end_at=kwargs["end_at"]),
            created=True,
        )

    monkeypatch.setattr(GrantService, "issue_grant", _fake_issue)

    client = TestClient(app)
    response = client.post(
        "/internal/grants",
        json={
            "account_id": str(uuid4()),
            "grant_type": "COURSE",
            "course_id": str(uuid4()),
            "end_at": "2099-01-01T00:00:00Z",
        },
    )

    assert response.status_code == 200
    assert captured["end_at"] == datetime(2099, 1, 1, tzinfo=timezone.utc)
