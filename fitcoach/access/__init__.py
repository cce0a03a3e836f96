from fitcoach.access.bans import BanRegistry
from fitcoach.access.codes import RedemptionCodeService
from fitcoach.access.devices import DeviceTracker
from fitcoach.access.entitlements import AccessService, EntitlementResolver
from fitcoach.access.grants import GrantService

__all__ = [
    "AccessService",
    "BanRegistry",
    "DeviceTracker",
    "EntitlementResolver",
    "GrantService",
    "RedemptionCodeService",
]
