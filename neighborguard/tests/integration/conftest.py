"""Fixtures for HTTP-level tests against the FastAPI app.

The app's lifespan is not run by the ASGI transport; ``isolated_db`` sets up
the in-memory database that the request dependencies use instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


@pytest.fixture
async def client(isolated_db: None) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client bound to the application."""
    from neighborguard.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac



@pytest.fixture
async def household(client: AsyncClient) -> dict[str, str]:
    """Default owner's home circle with a neighbor and an observer added over HTTP.

    Returns ids keyed by ``circle``, ``owner``, ``neighbor`` and ``observer``.
    """
    me = (await client.get("/api/users/me")).json()
    circle_id = me["circles"][0]["id"]
    ids = {"circle": circle_id, "owner": me["id"]}

    for role in ("neighbor", "observer"):
        response = await client.post(
            f"/api/circles/{circle_id}/members",
            json={"email": f"{role}@example.com", "name": role.title(), "role": role},
        )
        assert response.status_code == 200
        ids[role] = response.json()["userId"]
    return ids
