from __future__ import annotations

from datetime import datetime, timezone

import structlog

from fitcoach.access.bans.service import BanRegistry
from fitcoach.access.devices.service import DeviceTracker
from fitcoach.access.grants.service import GrantService
from fitcoach.core.config import get_settings
from fitcoach.db.session import SessionLocal
from fitcoach.workers.asyncio_runner import run_async_job
from fitcoach.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)


async def run_grant_expiry_async() -> dict[str, int]:
    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        expired_count = await GrantService.expire_lapsed_grants(session, now_utc=now_utc)

    result = {"expired_grants": expired_count}
    logger.info("grant_expiry_finished", **result)
    return result


async def run_stale_device_prune_async() -> dict[str, int]:
    retention_days = get_settings().device_association_retention_days
    pruned_count = await DeviceTracker().prune_stale_devices(retention_days=retention_days)

    result = {"pruned_devices": pruned_count, "retention_days": retention_days}
    logger.info("stale_device_prune_finished", **result)
    return result


async def run_lapsed_ban_deactivation_async() -> dict[str, int]:
    device_bans, account_bans = await BanRegistry().deactivate_lapsed_bans()

    result = {
        "deactivated_device_bans": device_bans,
        "deactivated_account_bans": account_bans,
    }
    logger.info("lapsed_ban_deactivation_finished", **result)
    return result


@celery_app.task(name="fitcoach.workers.tasks.access_maintenance.run_grant_expiry")
def run_grant_expiry() -> dict[str, int]:
    return run_async_job(run_grant_expiry_async())


@celery_app.task(name="fitcoach.workers.tasks.access_maintenance.run_stale_device_prune")
def run_stale_device_prune() -> dict[str, int]:
    return run_async_job(run_stale_device_prune_async())


@celery_app.task(name="fitcoach.workers.tasks.access_maintenance.run_lapsed_ban_deactivation")
def run_lapsed_ban_deactivation() -> dict[str, int]:
    return run_async_job(run_lapsed_ban_deactivation_async())


celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
celery_app.conf.beat_schedule.update(
    {
        "grant-expiry-every-10-minutes": {
            "task": "fitcoach.workers.tasks.access_maintenance.run_grant_expiry",
            "schedule": 600.0,
            "options": {"queue": "q_maintenance"},
        },
        "stale-device-prune-hourly": {
            "task": "fitcoach.workers.tasks.access_maintenance.run_stale_device_prune",
            "schedule": 3600.0,
            "options": {"queue": "q_maintenance"},
        },
        "lapsed-ban-deactivation-every-10-minutes": {
            "task": "fitcoach.workers.tasks.access_maintenance.run_lapsed_ban_deactivation",
            "schedule": 600.0,
            "options": {"queue": "q_maintenance"},
        },
    }
)
