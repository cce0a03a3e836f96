from __future__ import annotations

import argparse
import asyncio
import csv
from datetime import datetime, timezone
from pathlib import Path
from uuid import UUID

from fitcoach.access.codes.service import RedemptionCodeService
from fitcoach.access.codes.types import CodeScope, CodeScopeType, GeneratedCodes
from fitcoach.core.config import get_settings
from fitcoach.core.logging import configure_logging
from fitcoach.db.session import SessionLocal


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Redemption code batch generation tool")
    parser.add_argument(
        "--scope-type",
        choices=tuple(scope.value for scope in CodeScopeType),
        required=True,
    )
    parser.add_argument("--course-id", type=UUID, required=True)
    parser.add_argument("--package-id", type=UUID)
    parser.add_argument("--player-card-id", type=UUID)
    parser.add_argument("--month-number", type=int)
    parser.add_argument("--count", type=int, required=True)
    parser.add_argument("--duration-days", type=int, required=True)
    parser.add_argument("--max-redemptions", type=int, default=1)
    parser.add_argument("--token-length", type=int)
    parser.add_argument("--created-by", required=True)
    parser.add_argument("--output-csv", type=Path)
    return parser.parse_args(argv)


def _build_scope(args: argparse.Namespace) -> CodeScope:
    scope = CodeScope(
        scope_type=CodeScopeType(args.scope_type),
        course_id=args.course_id,
        package_id=args.package_id,
        player_card_id=args.player_card_id,
        month_number=args.month_number,
    )
    scope.validate()
    return scope


def _validate_args(args: argparse.Namespace) -> None:
    if args.count <= 0:
        raise ValueError("--count must be positive")
    if args.duration_days <= 0:
        raise ValueError("--duration-days must be positive")
    if args.max_redemptions <= 0:
        raise ValueError("--max-redemptions must be positive")
    if args.token_length is not None and args.token_length < 6:
        raise ValueError("--token-length must be at least 6")


async def _generate(args: argparse.Namespace, scope: CodeScope) -> GeneratedCodes:
    async with SessionLocal.begin() as session:
        return await RedemptionCodeService.generate_codes(
            session,
            scope=scope,
            count=args.count,
            duration_days=args.duration_days,
            max_redemptions=args.max_redemptions,
            created_by=args.created_by,
            token_length=args.token_length,
            now_utc=datetime.now(timezone.utc),
        )


def _write_output(path: Path, generated: GeneratedCodes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    scope = generated.scope
    with path.open("w", encoding="utf-8", newline="") as file:
        writer = csv.writer(file)
        writer.writerow(
            [
                "code",
                "scope_type",
                "course_id",
                "package_id",
                "player_card_id",
                "month_number",
                "duration_days",
                "max_redemptions",
            ]
        )
        for code in generated.codes:
            writer.writerow(
                [
                    code,
                    scope.scope_type.value,
                    scope.course_id,
                    scope.package_id or "",
                    scope.player_card_id or "",
                    scope.month_number or "",
                    generated.duration_days,
                    generated.max_redemptions,
                ]
            )


async def _run(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    _validate_args(args)
    scope = _build_scope(args)
    configure_logging(get_settings().log_level)

    generated = await _generate(args, scope)

    output_csv = args.output_csv or Path("reports/redemption_codes.csv")
    _write_output(output_csv, generated)
    print(f"generated={len(generated.codes)} output={output_csv}")  # noqa: T201
    return 0


def main() -> int:
    return asyncio.run(_run())


if __name__ == "__main__":
    raise SystemExit(main())
