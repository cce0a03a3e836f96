from fitcoach.db.models.account_bans import AccountBan
from fitcoach.db.models.age_groups import AgeGroup
from fitcoach.db.models.code_redemptions import CodeRedemption
from fitcoach.db.models.courses import Course
from fitcoach.db.models.days import Day
from fitcoach.db.models.device_associations import DeviceAssociation
from fitcoach.db.models.device_bans import DeviceBan
from fitcoach.db.models.grants import Grant
from fitcoach.db.models.months import Month
from fitcoach.db.models.package_course_age_groups import PackageCourseAgeGroup
from fitcoach.db.models.package_courses import PackageCourse
from fitcoach.db.models.packages import Package
from fitcoach.db.models.player_cards import PlayerCard
from fitcoach.db.models.redemption_codes import RedemptionCode
from fitcoach.db.models.videos import Video

__all__ = [
    "AccountBan",
    "AgeGroup",
    "CodeRedemption",
    "Course",
    "Day",
    "DeviceAssociation",
    "DeviceBan",
    "Grant",
    "Month",
    "Package",
    "PackageCourse",
    "PackageCourseAgeGroup",
    "PlayerCard",
    "RedemptionCode",
    "Video",
]
