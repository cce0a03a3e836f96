from __future__ import annotations

from sqlalchemy import CheckConstraint, UniqueConstraint

from fitcoach.db.models import (  # noqa: F401
    AccountBan,
    AgeGroup,
    CodeRedemption,
    Course,
    Day,
    DeviceAssociation,
    DeviceBan,
    Grant,
    Month,
    Package,
    PackageCourse,
    PackageCourseAgeGroup,
    PlayerCard,
    RedemptionCode,
    Video,
)
from fitcoach.db.models.base import Base


def _check_names(table_name: str) -> set[str]:
    table = Base.metadata.tables[table_name]
    return {
        constraint.name for constraint in table.constraints if isinstance(constraint, CheckConstraint)
    }


def _index_names(table_name: str) -> set[str]:
    return {index.name for index in Base.metadata.tables[table_name].indexes}


def test_all_tables_registered() -> None:
    expected_tables = {
        "courses",
        "packages",
        "package_courses",
        "package_course_age_groups",
        "age_groups",
        "player_cards",
        "months",
        "days",
        "videos",
        "grants",
        "device_bans",
        "account_bans",
        "device_associations",
        "redemption_codes",
        "code_redemptions",
    }
    assert expected_tables.issubset(set(Base.metadata.tables))


def test_grant_constraints_present() -> None:
    assert {
        "ck_grants_type",
        "ck_grants_status",
        "ck_grants_type_payload_consistency",
        "ck_grants_window_ordered",
    }.issubset(_check_names("grants"))

    indexes = {index.name: index for index in Base.metadata.tables["grants"].indexes}
    for name in ("uq_grants_course_subject", "uq_grants_card_subject", "uq_grants_month_subject"):
        assert indexes[name].unique is True
        assert indexes[name].dialect_options["postgresql"]["where"] is not None


def test_single_active_ban_per_key() -> None:
    device_indexes = {index.name: index for index in Base.metadata.tables["device_bans"].indexes}
    account_indexes = {index.name: index for index in Base.metadata.tables["account_bans"].indexes}

    assert device_indexes["uq_device_bans_active_device"].unique is True
    assert account_indexes["uq_account_bans_active_account"].unique is True


def test_redemption_code_constraints_present() -> None:
    assert {
        "ck_redemption_codes_scope_type",
        "ck_redemption_codes_scope_payload_consistency",
        "ck_redemption_codes_max_positive",
        "ck_redemption_codes_redemptions_le_max",
    }.issubset(_check_names("redemption_codes"))

    code_redemptions = Base.metadata.tables["code_redemptions"]
    unique_constraints = {
        constraint.name
        for constraint in code_redemptions.constraints
        if isinstance(constraint, UniqueConstraint)
    }
    assert "uq_code_redemptions_code_account" in unique_constraints


def test_device_association_keyed_by_device_and_account() -> None:
    table = Base.metadata.tables["device_associations"]
    assert {column.name for column in table.primary_key.columns} == {"device_id", "account_id"}
    assert "idx_device_associations_last_seen" in _index_names("device_associations")


def test_catalog_indexes_present() -> None:
    assert "idx_videos_free_preview" in _index_names("videos")
    assert "ck_months_month_number_positive" in _check_names("months")
    assert "idx_package_courses_course" in _index_names("package_courses")
