"""Integration-test fixtures.

httpx's ASGITransport does not run the app lifespan, so each test installs
its own in-memory engine (fixed clock at T0) on app.state before requests.
"""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app


@pytest_asyncio.fixture
async def client(engine) -> AsyncClient:  # type: ignore[override]
    """Async HTTP client bound to the app, with the test engine installed."""
    app.state.engine = engine
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
