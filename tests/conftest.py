import httpx
import pytest
from httpx import ASGITransport


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("LITEAPI_KEY", "test-lite-key")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-anthropic-key")
    monkeypatch.setenv("RATE_LIMIT_BACKOFF", "0")
    monkeypatch.setenv("CONTENT_STAGGER_MS", "0")
    monkeypatch.setenv("DETAIL_STAGGER_MS", "0")


@pytest.fixture
async def client(mock_env):
    from app.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
