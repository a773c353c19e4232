"""Honeypot endpoint.

Nothing legitimate links to ``/api/internal/export``. Any request to it
blocks the caller's address and gets decoy data back, so scrapers keep
harvesting worthless values instead of probing further.
"""

import secrets
from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from promption.core.rate_limit.ip_tracker import ip_tracker
from promption.core.utils.net import get_client_ip


logger = structlog.get_logger()

HONEYPOT_PATH = "/api/internal/export"

NO_INDEX_HEADERS = {
    "X-Robots-Tag": "noindex, nofollow",
    "Cache-Control": "no-cache, no-store, must-revalidate",
}

DECOY_EXPORT: dict[str, Any] = {
    "users": [
        {
            "id": "00000000-0000-0000-0000-000000000000",
            "email": "fake@example.com",
            "token": "fake_token_12345",
        },
        {
            "id": "11111111-1111-1111-1111-111111111111",
            "email": "decoy@nowhere.com",
            "token": "trap_token_67890",
        },
    ],
    "apiKeys": [
        "sk-fake_api_key_abcdefghijklmnopqrstuvwxyz123456",
        "sk-trap_key_zyxwvutsrqponmlkjihgfedcba654321",
    ],
    "database": {
        "host": "fake-db.example.com",
        "username": "honeypot_user",
        "password": "fake_password_123",
        "port": 5432,
    },
    "secrets": {
        "jwt_secret": "fake_jwt_secret_abcd1234",
        "encryption_key": "trap_encryption_xyz9876",
        "webhook_url": "https://fake-webhook.example.com/trap",
    },
    "message": "Internal API - Authorized access only",
    "version": "1.0.0",
}


honeypot_router = APIRouter(include_in_schema=False)


async def _record(request: Request) -> None:
    client_ip = get_client_ip(request)
    try:
        await ip_tracker.record_honeypot_hit(client_ip, request.url.path)
    except RedisError as e:
        logger.warning(
            "honeypot_record_failed",
            client_ip=client_ip,
            user_agent=request.headers.get("User-Agent"),
            error=str(e),
        )


def _now() -> str:
    return datetime.now(UTC).isoformat()


@honeypot_router.get(HONEYPOT_PATH)
async def honeypot_export(request: Request) -> JSONResponse:
    await _record(request)
    return JSONResponse(
        content={**DECOY_EXPORT, "timestamp": _now()},
        headers=NO_INDEX_HEADERS,
    )


@honeypot_router.post(HONEYPOT_PATH)
@honeypot_router.put(HONEYPOT_PATH)
async def honeypot_write(request: Request) -> JSONResponse:
    await _record(request)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={
            "success": True,
            "message": "Data processed successfully",
            "id": f"fake_{secrets.token_hex(5)}",
            "created_at": _now(),
        },
        headers=NO_INDEX_HEADERS,
    )


@honeypot_router.delete(HONEYPOT_PATH)
async def honeypot_delete(request: Request) -> JSONResponse:
    await _record(request)
    return JSONResponse(
        content={"success": True, "deleted": 0},
        headers=NO_INDEX_HEADERS,
    )
