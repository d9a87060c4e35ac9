"""Data store failures are reported as 503 with a stable error code."""

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)

from sietch.database import get_db
from sietch.main import app

STORE_ERRORS = [
    OperationalError("SELECT 1", {}, Exception("server closed the connection")),
    InterfaceError("SELECT 1", {}, Exception("connection is closed")),
    DisconnectionError("connection invalidated"),
    PoolTimeoutError("QueuePool limit of size 5 overflow 10 reached, connection timed out"),
]


def _failing_db(exc: Exception):
    async def override_get_db():
        raise exc
        yield  # pragma: no cover

    return override_get_db


@pytest.mark.parametrize("exc", STORE_ERRORS, ids=lambda e: type(e).__name__)
async def test_store_error_maps_to_store_unavailable(client: AsyncClient, exc: Exception):
    app.dependency_overrides[get_db] = _failing_db(exc)
    try:
        resp = await client.post(
            "/auth/login", json={"email": "down@example.com", "password": "password123"}
        )
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 503
    assert resp.json()["code"] == "store_unavailable"


def test_integrity_error_is_not_a_store_outage():
    handled = set(app.exception_handlers)
    assert IntegrityError not in handled
    assert {OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError} <= handled
