from __future__ import annotations

from types import SimpleNamespace
from uuid import uuid4

from fastapi.testclient import TestClient

from fitcoach.access.entitlements.errors import AccessStoreError
from fitcoach.access.entitlements.gate import GateResult, GateStatus
from fitcoach.access.entitlements.preview import build_preview
from fitcoach.access.entitlements.types import (
    AccessDecision,
    AccessResult,
    ContentResult,
    ContentTree,
    CourseRef,
)
from fitcoach.api.routes import internal_access
from fitcoach.main import app
from tests.access.access_fixtures import make_age_group


class _FakeAccessService:
    def __init__(self, *, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, object, object]] = []

    async def resolve(self, identity, locator, *, now_utc=None) -> AccessResult:
        self.calls.append(("resolve", identity, locator))
        if self.error is not None:
            raise self.error
        return AccessResult(
            AccessDecision.DENIED,
            requires_package_selection=True,
            reason="package_selection_required",
        )

    async def fetch_content(self, identity, locator, *, device_id=None, now_utc=None) -> ContentResult:
        self.calls.append(("content", identity, device_id))
        tree = ContentTree(
            course=CourseRef(id=uuid4(), slug="speed-training"),
            age_groups=(make_age_group("juniors", months=1),),
        )
        return ContentResult(
            result=AccessResult(AccessDecision.PREVIEW_ONLY, reason="anonymous"),
            content=build_preview(tree),
        )

    async def check_request(self, identity, device_id, *, now_utc=None) -> GateResult:
        self.calls.append(("gate", identity, device_id))
        return GateResult(status=GateStatus.BLOCKED, reason="too_many_devices")


def _allow_internal(monkeypatch, service: _FakeAccessService) -> None:
    monkeypatch.setattr(internal_access, "assert_internal_access", lambda request, **kwargs: None)
    monkeypatch.setattr(internal_access, "get_access_service", lambda: service)


def test_internal_access_rejects_missing_token(monkeypatch) -> None:
    monkeypatch.setattr(
        internal_access,
        "get_settings",
        lambda: SimpleNamespace(
            internal_api_token="internal-secret",
            internal_api_allowlist="127.0.0.1/32",
        ),
    )

    client = TestClient(app)
    response = client.post(
        "/internal/access/resolve",
        json={"locator": {"course_slug": "speed-training"}},
    )

    assert response.status_code == 403
    assert response.json() == {"detail": {"code": "E_FORBIDDEN"}}


def test_internal_access_rejects_disallowed_ip(monkeypatch) -> None:
    monkeypatch.setattr(
        internal_access,
        "get_settings",
        lambda: SimpleNamespace(
            internal_api_token="internal-secret",
            internal_api_allowlist="192.168.0.0/16",
        ),
    )

    client = TestClient(app)
    response = client.post(
        "/internal/access/gate",
        json={"device_id": "dev-1"},
        headers={"X-Internal-Token": "internal-secret", "X-Forwarded-For": "10.0.0.25"},
    )

    assert response.status_code == 403
    assert response.json() == {"detail": {"code": "E_FORBIDDEN"}}


def test_resolve_returns_decision_and_package_selection_flag(monkeypatch) -> None:
    service = _FakeAccessService()
    _allow_internal(monkeypatch, service)
    account_id = uuid4()

    client = TestClient(app)
    response = client.post(
        "/internal/access/resolve",
        json={
            "identity": {"account_id": str(account_id)},
            "locator": {"course_slug": "speed-training", "month_number": 2},
        },
    )

    assert response.status_code == 200
    assert response.json() == {
        "decision": "DENIED",
        "requires_package_selection": True,
        "reason": "package_selection_required",
    }
    _, identity, locator = service.calls[0]
    assert identity.account_id == account_id
    assert identity.is_admin is False
    assert locator.month_number == 2


def test_resolve_rejects_locator_without_course(monkeypatch) -> None:
    _allow_internal(monkeypatch, _FakeAccessService())

    client = TestClient(app)
    response = client.post("/internal/access/resolve", json={"locator": {"month_number": 1}})

    assert response.status_code == 422


def test_resolve_rejects_card_and_month_together(monkeypatch) -> None:
    _allow_internal(monkeypatch, _FakeAccessService())

    client = TestClient(app)
    response = client.post(
        "/internal/access/resolve",
        json={
            "locator": {
                "course_slug": "speed-training",
                "player_card_id": str(uuid4()),
                "month_number": 1,
            }
        },
    )

    assert response.status_code == 422
    assert response.json() == {"detail": {"code": "E_INVALID_LOCATOR"}}


def test_resolve_maps_store_failure_to_503(monkeypatch) -> None:
    _allow_internal(monkeypatch, _FakeAccessService(error=AccessStoreError("course")))

    client = TestClient(app)
    response = client.post(
        "/internal/access/resolve",
        json={"locator": {"course_slug": "speed-training"}},
    )

    assert response.status_code == 503
    assert response.json() == {"detail": {"code": "E_STORE_UNAVAILABLE"}}


def test_content_returns_locked_preview_tree(monkeypatch) -> None:
    service = _FakeAccessService()
    _allow_internal(monkeypatch, service)

    client = TestClient(app)
    response = client.post(
        "/internal/access/content",
        json={"locator": {"course_slug": "speed-training"}, "device_id": "dev-1"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["decision"] == "PREVIEW_ONLY"
    videos = payload["content"]["age_groups"][0]["months"][0]["days"][0]["videos"]
    locked = [video for video in videos if video["locked"]]
    assert locked
    assert all(video["video_url"] is None for video in locked)
    assert service.calls[0][2] == "dev-1"


def test_gate_reports_blocked_reason(monkeypatch) -> None:
    _allow_internal(monkeypatch, _FakeAccessService())

    client = TestClient(app)
    response = client.post(
        "/internal/access/gate",
        json={"identity": {"account_id": str(uuid4())}, "device_id": "dev-4"},
    )

    assert response.status_code == 200
    assert response.json() == {"status": "blocked", "reason": "too_many_devices"}
