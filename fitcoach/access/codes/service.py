from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from fitcoach.access.codes.batch import generate_raw_codes
from fitcoach.access.codes.errors import (
    CodeScopeError,
    RedeemBannedError,
    RedeemCodeAlreadyUsedError,
    RedeemCodeExhaustedError,
    RedeemCodeNotFoundError,
)
from fitcoach.access.codes.types import CodeScope, CodeScopeType, GeneratedCodes, RedeemResult
from fitcoach.access.grants.service import GrantService
from fitcoach.core.config import get_settings
from fitcoach.db.models.code_redemptions import CodeRedemption
from fitcoach.db.models.redemption_codes import RedemptionCode
from fitcoach.db.repo.bans_repo import BansRepo
from fitcoach.db.repo.catalog_repo import CatalogRepo
from fitcoach.db.repo.redemption_codes_repo import RedemptionCodesRepo
from fitcoach.services.redemption_codes import normalize_redemption_code

logger = structlog.get_logger(__name__)

CODE_GRANT_SOURCE = "code"
MAX_GENERATE_ROUNDS = 5


def _scope_of(code: RedemptionCode) -> CodeScope:
    return CodeScope(
        scope_type=CodeScopeType(code.scope_type),
        course_id=code.course_id,
        package_id=code.package_id,
        player_card_id=code.player_card_id,
        month_number=code.month_number,
    )


def _log_rejection(*, reason: str, account_id: UUID, code_id: int | None = None) -> None:
    logger.info(
        "code_redeem_rejected",
        reason=reason,
        account_id=str(account_id),
        code_id=code_id,
    )


class RedemptionCodeService:
    @staticmethod
    async def redeem(
        session: AsyncSession,
        *,
        code: str,
        account_id: UUID,
        now_utc: datetime,
        device_id: str | None = None,
    ) -> RedeemResult:
        """Consume one use of ``code`` and grant its scope to ``account_id``.

        Runs inside the caller's transaction; any raised error rolls back the
        consumed use together with the grant.
        """
        account_ban = await BansRepo.get_enforced_account_ban(
            session, account_id=account_id, now_utc=now_utc
        )
        device_ban = None
        if device_id:
            device_ban = await BansRepo.get_enforced_device_ban(
                session, device_id=device_id, now_utc=now_utc
            )
        if account_ban is not None or device_ban is not None:
            _log_rejection(reason="banned", account_id=account_id)
            raise RedeemBannedError

        normalized_code = normalize_redemption_code(code)
        redemption_code = None
        if normalized_code:
            redemption_code = await RedemptionCodesRepo.get_by_code_for_update(
                session, normalized_code
            )
        if redemption_code is None:
            _log_rejection(reason="not_found", account_id=account_id)
            raise RedeemCodeNotFoundError

        if await RedemptionCodesRepo.has_account_redeemed(
            session, code_id=redemption_code.id, account_id=account_id
        ):
            _log_rejection(reason="already_used", account_id=account_id, code_id=redemption_code.id)
            raise RedeemCodeAlreadyUsedError

        consumed = await RedemptionCodesRepo.consume_one(
            session, code_id=redemption_code.id, now_utc=now_utc
        )
        if not consumed:
            _log_rejection(reason="exhausted", account_id=account_id, code_id=redemption_code.id)
            raise RedeemCodeExhaustedError

        scope = _scope_of(redemption_code)
        issued = await GrantService.issue_grant(
            session,
            account_id=account_id,
            subject=scope.grant_subject(),
            end_at=now_utc + timedelta(days=redemption_code.duration_days),
            source_kind=CODE_GRANT_SOURCE,
            now_utc=now_utc,
            package_id=scope.package_id,
        )
        await RedemptionCodesRepo.create_redemption(
            session,
            redemption=CodeRedemption(
                id=uuid4(),
                code_id=redemption_code.id,
                account_id=account_id,
                grant_id=issued.grant_id,
                device_id=device_id,
                redeemed_at=now_utc,
            ),
        )

        logger.info(
            "code_redeemed",
            code_id=redemption_code.id,
            account_id=str(account_id),
            scope_type=scope.scope_type.value,
            grant_id=issued.grant_id,
        )
        return RedeemResult(
            code_id=redemption_code.id,
            grant_id=issued.grant_id,
            scope_type=scope.scope_type,
            course_id=scope.course_id,
            end_at=issued.window.end_at,
            package_id=scope.package_id,
            player_card_id=scope.player_card_id,
            month_number=scope.month_number,
        )

    @staticmethod
    async def _validate_scope_references(session: AsyncSession, *, scope: CodeScope) -> None:
        if await CatalogRepo.get_course_by_id(session, scope.course_id) is None:
            raise CodeScopeError("course does not exist")
        if scope.package_id is not None and not await CatalogRepo.package_contains_course(
            session, package_id=scope.package_id, course_id=scope.course_id
        ):
            raise CodeScopeError("package does not contain the course")
        if scope.player_card_id is not None:
            card_course_id = await CatalogRepo.get_player_card_course_id(
                session, player_card_id=scope.player_card_id
            )
            if card_course_id != scope.course_id:
                raise CodeScopeError("player card does not belong to the course")

    @staticmethod
    async def generate_codes(
        session: AsyncSession,
        *,
        scope: CodeScope,
        count: int,
        duration_days: int,
        created_by: str,
        now_utc: datetime,
        max_redemptions: int = 1,
        token_length: int | None = None,
    ) -> GeneratedCodes:
        if count <= 0:
            raise ValueError("count must be positive")
        if duration_days <= 0:
            raise ValueError("duration_days must be positive")
        if max_redemptions <= 0:
            raise ValueError("max_redemptions must be positive")
        scope.validate()
        await RedemptionCodeService._validate_scope_references(session, scope=scope)

        length = token_length or get_settings().redemption_code_length
        created: list[str] = []
        seen: set[str] = set()
        for _ in range(MAX_GENERATE_ROUNDS):
            remaining = count - len(created)
            if remaining <= 0:
                break
            candidates = generate_raw_codes(
                count=remaining,
                token_length=length,
                existing_codes=seen,
            )
            inserted = await RedemptionCodesRepo.insert_codes(
                session,
                rows=[
                    {
                        "code": candidate,
                        "scope_type": scope.scope_type.value,
                        "course_id": scope.course_id,
                        "package_id": scope.package_id,
                        "player_card_id": scope.player_card_id,
                        "month_number": scope.month_number,
                        "max_redemptions": max_redemptions,
                        "redemptions": 0,
                        "duration_days": duration_days,
                        "created_by": created_by,
                        "created_at": now_utc,
                        "updated_at": now_utc,
                    }
                    for candidate in candidates
                ],
            )
            # Candidates already present in the store were skipped; retry for those.
            created.extend(candidate for candidate in candidates if candidate in inserted)

        if len(created) < count:
            raise RuntimeError("unable to generate unique redemption codes")

        logger.info(
            "codes_generated",
            count=len(created),
            scope_type=scope.scope_type.value,
            course_id=str(scope.course_id),
            created_by=created_by,
        )
        return GeneratedCodes(
            codes=created,
            scope=scope,
            duration_days=duration_days,
            max_redemptions=max_redemptions,
        )
