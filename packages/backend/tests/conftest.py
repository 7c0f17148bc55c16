"""Test fixtures — apps built from explicit Settings, no env leakage.

Learn: create_app() takes a Settings object, so each fixture builds its
own app with exactly the configuration under test. httpx's ASGITransport
drives the app in-process; no server or port is involved.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from headerguard.config import Settings
from headerguard.main import create_app
from headerguard.platform import PlatformHeaders

PLATFORM_HSTS = "max-age=31536000"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Drop HEADERGUARD_* / PORT vars so tests see only their own settings."""
    import os

    for key in list(os.environ):
        if key.upper().startswith("HEADERGUARD_") or key.upper() == "PORT":
            monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def settings():
    return Settings()


@pytest_asyncio.fixture()
async def client(settings):
    """HTTP client against an app with the shipped configuration."""
    app = create_app(settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def platform_client():
    """Factory: client for an app behind a platform that sets its own HSTS.

    Returns (client, platform) so tests can check what was relinquished.
    """
    clients = []

    async def _make(**overrides):
        settings = Settings(**overrides)
        platform = PlatformHeaders({"Strict-Transport-Security": PLATFORM_HSTS})
        app = create_app(settings, platform=platform)
        ac = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(ac)
        return ac, platform

    yield _make

    for ac in clients:
        await ac.aclose()
