from fitcoach.access.entitlements.resolver import EntitlementResolver
from fitcoach.access.entitlements.service import AccessService

__all__ = ["AccessService", "EntitlementResolver"]
