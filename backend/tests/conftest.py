"""
Roadie User Service — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment overrides are applied before any `roadie_user` import so
       the module-level settings and engine point at a throwaway SQLite file.

Fixtures:
    ├── memory_store:     fresh InMemoryUserStore
    ├── dispatcher:       UserDispatcher over memory_store, default policies
    ├── failing_store:    AsyncMock store whose every call raises DatabaseError
    ├── sqlite_engine:    in-memory aiosqlite engine with the schema created
    ├── test_client:      HTTPX AsyncClient talking to create_app(memory_store)
    └── gateway_event:    builder for API Gateway HTTP API (2.0) proxy events
"""

import base64
import os
import tempfile
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock

# Override settings for testing BEFORE any app imports
os.environ.pop("DATABASE_CONNECTION_STRING", None)
os.environ["DATABASE_URL"] = (
    f"sqlite+aiosqlite:///{tempfile.mkdtemp(prefix='roadie_test_')}/roadie_test.db"
)
os.environ["STORE_BACKEND"] = "database"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from roadie_user.database import create_schema
from roadie_user.exceptions import DatabaseError
from roadie_user.services.dispatcher import UserDispatcher
from roadie_user.services.memory_store import InMemoryUserStore
from roadie_user.services.store_base import UserStore


# ══════════════════════════════════════════════════════════════════════════
# Store Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def memory_store():
    return InMemoryUserStore()


@pytest.fixture
def dispatcher(memory_store):
    return UserDispatcher(memory_store)


@pytest.fixture
def failing_store():
    """
    A store that is down: every operation raises DatabaseError.

    Usage:
        async def test_outage(failing_store):
            response = await UserDispatcher(failing_store).dispatch(...)
            assert response.status_code == 500
    """
    store = AsyncMock(spec=UserStore)
    outage = DatabaseError(message="connection refused", context={"host": "db"})
    store.find_by_key.side_effect = outage
    store.insert.side_effect = outage
    store.replace.side_effect = outage
    store.remove.side_effect = outage
    return store


@pytest_asyncio.fixture
async def sqlite_engine():
    """In-memory SQLite (single shared connection) with the `users` table."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    await create_schema(engine)
    yield engine
    await engine.dispose()


# ══════════════════════════════════════════════════════════════════════════
# Host Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(memory_store):
    """
    HTTPX AsyncClient routed straight into the FastAPI app.

    The app shares `memory_store`, so tests can seed or inspect it directly.
    ASGITransport does not run the lifespan; the engine is never touched.
    """
    from roadie_user.main import create_app

    app = create_app(memory_store=memory_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def gateway_event():
    """
    Builds API Gateway HTTP API (payload 2.0) proxy events.

    Usage:
        event = gateway_event("GET", key="u1")
        event = gateway_event("POST", body='{"Sub": "u1"}', base64_body=True)
    """

    def _build(
        method: str,
        key: Optional[str] = None,
        body: Optional[str] = None,
        base64_body: bool = False,
        request_id: str = "req-test",
    ) -> Dict[str, Any]:
        raw_path = "/users" if key is None else f"/users/{key}"
        route_key = f"{method} /users" if key is None else f"{method} /users/{{id}}"
        if body is not None and base64_body:
            body = base64.b64encode(body.encode("utf-8")).decode("ascii")
        return {
            "version": "2.0",
            "routeKey": route_key,
            "rawPath": raw_path,
            "rawQueryString": "",
            "headers": {"content-type": "application/json", "host": "api.test"},
            "requestContext": {
                "requestId": request_id,
                "stage": "$default",
                "http": {
                    "method": method,
                    "path": raw_path,
                    "protocol": "HTTP/1.1",
                    "sourceIp": "127.0.0.1",
                    "userAgent": "pytest",
                },
            },
            "pathParameters": {"id": key} if key is not None else None,
            "body": body,
            "isBase64Encoded": base64_body,
        }

    return _build
