from fitcoach.db.repo.bans_repo import BansRepo
from fitcoach.db.repo.catalog_repo import CatalogRepo
from fitcoach.db.repo.devices_repo import DevicesRepo
from fitcoach.db.repo.grants_repo import GrantsRepo
from fitcoach.db.repo.redemption_codes_repo import RedemptionCodesRepo

__all__ = [
    "BansRepo",
    "CatalogRepo",
    "DevicesRepo",
    "GrantsRepo",
    "RedemptionCodesRepo",
]
