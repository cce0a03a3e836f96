from fitcoach.access.codes.service import RedemptionCodeService

__all__ = ["RedemptionCodeService"]
