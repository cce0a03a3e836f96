from fitcoach.access.grants.service import GrantService

__all__ = ["GrantService"]
