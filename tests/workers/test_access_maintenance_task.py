from types import SimpleNamespace

from fitcoach.access.grants.service import GrantService
from fitcoach.workers.tasks import access_maintenance
from tests.access.access_fixtures import FakeSessionFactory


def test_run_grant_expiry_task_wrapper(monkeypatch) -> None:
    async def fake_async() -> dict[str, int]:
        return {"expired_grants": 4}

    monkeypatch.setattr(access_maintenance, "run_grant_expiry_async", fake_async)

    result = access_maintenance.run_grant_expiry()
    assert result["expired_grants"] == 4


def test_run_stale_device_prune_task_wrapper(monkeypatch) -> None:
    async def fake_async() -> dict[str, int]:
        return {"pruned_devices": 2, "retention_days": 90}

    monkeypatch.setattr(access_maintenance, "run_stale_device_prune_async", fake_async)

    result = access_maintenance.run_stale_device_prune()
    assert result["pruned_devices"] == 2


def test_run_lapsed_ban_deactivation_task_wrapper(monkeypatch) -> None:
    async def fake_async() -> dict[str, int]:
        return {"deactivated_device_bans": 1, "deactivated_account_bans": 0}

    monkeypatch.setattr(access_maintenance, "run_lapsed_ban_deactivation_async", fake_async)

    result = access_maintenance.run_lapsed_ban_deactivation()
    assert result["deactivated_device_bans"] == 1


async def test_run_grant_expiry_async_uses_write_transaction(monkeypatch) -> None:
    sessions = FakeSessionFactory()
    seen: list[object] = []

    async def fake_expire(session, *, now_utc):
        seen.append(session)
        return 6

    monkeypatch.setattr(access_maintenance, "SessionLocal", sessions)
    monkeypatch.setattr(GrantService, "expire_lapsed_grants", fake_expire)

    result = await access_maintenance.run_grant_expiry_async()

    assert result == {"expired_grants": 6}
    assert seen == [sessions.session]
    assert sessions.begin_calls == 1


async def test_run_stale_device_prune_async_passes_retention(monkeypatch) -> None:
    calls: list[int] = []

    class _FakeTracker:
        async def prune_stale_devices(self, *, retention_days):
            calls.append(retention_days)
            return 3

    monkeypatch.setattr(access_maintenance, "DeviceTracker", _FakeTracker)
    monkeypatch.setattr(
        access_maintenance,
        "get_settings",
        lambda: SimpleNamespace(device_association_retention_days=45),
    )

    result = await access_maintenance.run_stale_device_prune_async()

    assert result == {"pruned_devices": 3, "retention_days": 45}
    assert calls == [45]


async def test_run_lapsed_ban_deactivation_async_reports_both_counts(monkeypatch) -> None:
    class _FakeRegistry:
        async def deactivate_lapsed_bans(self):
            return 2, 1

    monkeypatch.setattr(access_maintenance, "BanRegistry", _FakeRegistry)

    result = await access_maintenance.run_lapsed_ban_deactivation_async()

    assert result == {"deactivated_device_bans": 2, "deactivated_account_bans": 1}


def test_maintenance_jobs_are_scheduled_on_maintenance_queue() -> None:
    schedule = access_maintenance.celery_app.conf.beat_schedule

    tasks = {entry["task"] for entry in schedule.values()}
    assert {
        "fitcoach.workers.tasks.access_maintenance.run_grant_expiry",
        "fitcoach.workers.tasks.access_maintenance.run_stale_device_prune",
        "fitcoach.workers.tasks.access_maintenance.run_lapsed_ban_deactivation",
    } <= tasks
    assert {entry["options"]["queue"] for entry in schedule.values()} == {"q_maintenance"}
