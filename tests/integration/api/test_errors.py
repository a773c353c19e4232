"""Integration tests for how store failures reach API clients."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from promption.core.database import get_db


pytestmark = pytest.mark.integration

DRIVER_DETAIL = "connection to server at 10.0.0.5 port 5432 refused"


def failing_session(exc: Exception):  # type: ignore[no-untyped-def]
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        raise exc
        yield  # pragma: no cover

    return override_get_db


class TestDependencyFailure:
    """Store outages surface as a retryable 503."""

    @pytest.mark.parametrize(
        "exc",
        [
            OperationalError("SELECT 1", {}, Exception(DRIVER_DETAIL)),
            InterfaceError("SELECT 1", {}, Exception(DRIVER_DETAIL)),
            PoolTimeoutError(f"QueuePool limit reached: {DRIVER_DETAIL}"),
            TimeoutError(DRIVER_DETAIL),
        ],
        ids=["operational", "interface", "pool_timeout", "timeout"],
    )
    async def test_store_failure_is_service_unavailable(
        self,
        app: FastAPI,
        client: AsyncClient,
        owner_headers: dict[str, str],
        exc: Exception,
    ):
        app.dependency_overrides[get_db] = failing_session(exc)

        response = await client.get(
            "/api/v1/me", headers={**owner_headers, "X-Request-ID": "req-503"}
        )

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "5"
        body = response.json()
        assert body["error_code"] == "dependency_failure"
        assert body["status"] == 503
        assert body["trace_id"] == "req-503"
        assert "10.0.0.5" not in response.text
        assert "SELECT" not in response.text
