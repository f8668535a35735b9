"""Pytest configuration and shared fixtures.

This module provides shared test fixtures for all tests:
- isolated_db: Function-scoped in-memory SQLite database with all tables
- session: A session on that database (services commit it themselves)
- session_factory: The global factory, as used for notification fan-out

The suite needs no external services. Each test gets a fresh
``sqlite+aiosqlite:///:memory:`` database kept alive by a StaticPool.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from hypothesis import HealthCheck, settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

settings.register_profile(
    "default",
    max_examples=100,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
settings.register_profile("ci", max_examples=200, derandomize=True)
settings.register_profile("fast", max_examples=20)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None]:
    """Point settings at the in-memory database and reset the cache around each test."""
    from neighborguard.core.config import get_settings

    original_db_url = os.environ.get("DATABASE_URL")
    os.environ["DATABASE_URL"] = TEST_DATABASE_URL
    get_settings.cache_clear()

    yield

    if original_db_url is None:
        os.environ.pop("DATABASE_URL", None)
    else:
        os.environ["DATABASE_URL"] = original_db_url
    get_settings.cache_clear()


@pytest.fixture
async def isolated_db() -> AsyncGenerator[None]:
    """Create a fresh database with all tables for one test."""
    from neighborguard.core.database import close_db, init_db

    await close_db()
    await init_db()

    yield

    await close_db()


@pytest.fixture
def session_factory(isolated_db: None) -> async_sessionmaker[AsyncSession]:
    from neighborguard.core.database import get_session_factory

    return get_session_factory()


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Database session for a test.

    Seed helpers and services commit, so every write is visible to the
    separate sessions used by notification fan-out.
    """
    async with session_factory() as sess:
        yield sess

