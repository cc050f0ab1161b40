"""
Readlater Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the whole suite.
How:   A real SQLAlchemy engine on in-memory SQLite (aiosqlite, StaticPool so
       every session shares one connection), tables created from the models,
       two seeded users, and an AnalyticsClient mock that records track()
       calls instead of sending them.

Fixture Hierarchy (all function-scoped):
    engine ─┬─ trx ── users
            └─ app ── test_client
    config, analytics, auth_headers
"""

import os
import uuid
from datetime import datetime, timezone
from typing import Dict
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

# Keep a developer's .env or shell from leaking into RuntimeSettings
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("DATABASE_URL", None)

import readlater.models  # noqa: E402,F401
from readlater.auth import encode_token  # noqa: E402
from readlater.config import RuntimeSettings, load_config  # noqa: E402
from readlater.database import Base  # noqa: E402
from readlater.models.user import User  # noqa: E402
from readlater.repository import TransactionManager  # noqa: E402
from readlater.services.analytics import AnalyticsClient  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"

JWT_SECRET = "test-jwt-secret"
PUBSUB_TOKEN = "test-pubsub-token"

ALICE_ID = uuid.UUID("00000000-0000-4000-8000-00000000a11c")
BOB_ID = uuid.UUID("00000000-0000-4000-8000-000000000b0b")

# Minimal environment that satisfies load_config() outside App Engine
BASE_ENV: Dict[str, str] = {
    "PG_HOST": "localhost",
    "PG_PORT": "5432",
    "PG_USER": "app_user",
    "PG_PASSWORD": "app_pass",
    "PG_DB": "readlater",
    "PG_POOL_MAX": "20",
    "JWT_SECRET": JWT_SECRET,
    "SSO_JWT_SECRET": "test-sso-secret",
    "GATEWAY_URL": "http://localhost:8080/api",
    "API_ENV": "test",
    "CLIENT_URL": "http://localhost:3000",
    "PUBSUB_VERIFICATION_TOKEN": PUBSUB_TOKEN,
}


def as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on round-trip; values are stored as UTC."""
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


@pytest.fixture
def env() -> Dict[str, str]:
    return dict(BASE_ENV)


@pytest.fixture
def config(env):
    runtime = RuntimeSettings(database_url=TEST_DATABASE_URL, log_level="WARNING")
    return load_config(env, runtime=runtime, instance_id_factory=lambda: "xtest_host")


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def trx(engine) -> TransactionManager:
    return TransactionManager(engine)


@pytest_asyncio.fixture
async def users(trx):
    """Seeds alice and bob; returns {"alice": User, "bob": User}."""

    async def seed(session):
        alice = User(id=ALICE_ID, name="Alice", username="alice")
        bob = User(id=BOB_ID, name="Bob", username="bob")
        session.add_all([alice, bob])
        await session.flush()
        return {"alice": alice, "bob": bob}

    return await trx.run(seed)


@pytest.fixture
def analytics():
    """AnalyticsClient stand-in; assert on analytics.track calls."""
    return MagicMock(spec=AnalyticsClient)


@pytest.fixture
def app(config, engine, analytics):
    from readlater.main import create_app

    return create_app(config, engine=engine, analytics=analytics)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient bound to the app through ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {encode_token(ALICE_ID, JWT_SECRET)}"}


@pytest.fixture
def bob_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {encode_token(BOB_ID, JWT_SECRET)}"}
