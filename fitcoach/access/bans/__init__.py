from fitcoach.access.bans.service import BanRegistry

__all__ = ["BanRegistry"]
