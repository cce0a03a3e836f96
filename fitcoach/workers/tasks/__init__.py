from fitcoach.workers.tasks.access_maintenance import (
    run_grant_expiry,
    run_lapsed_ban_deactivation,
    run_stale_device_prune,
)

__all__ = [
    "run_grant_expiry",
    "run_lapsed_ban_deactivation",
    "run_stale_device_prune",
]
