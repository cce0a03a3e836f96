from __future__ import annotations

from typing import Any, NoReturn

import structlog
from fastapi import HTTPException, Request

from fitcoach.services.internal_auth import (
    extract_client_ip,
    is_client_ip_allowed,
    is_internal_request_authenticated,
)

logger = structlog.get_logger(__name__)


def assert_internal_access(request: Request, *, settings: Any, area: str) -> None:
    client_ip = extract_client_ip(
        request,
        trusted_proxies=getattr(settings, "internal_api_trusted_proxies", ""),
    )

    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning(
            "internal_api_auth_failed",
            area=area,
            reason="ip_not_allowed",
            client_ip=client_ip,
        )
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})

    if not is_internal_request_authenticated(
        request,
        expected_token=settings.internal_api_token,
    ):
        logger.warning(
            "internal_api_auth_failed",
            area=area,
            reason="invalid_credentials",
            client_ip=client_ip,
        )
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})


def raise_store_unavailable(exc: BaseException, *, area: str) -> NoReturn:
    logger.error("access_store_error", area=area, error_type=type(exc).__name__)
    raise HTTPException(status_code=503, detail={"code": "E_STORE_UNAVAILABLE"}) from exc
