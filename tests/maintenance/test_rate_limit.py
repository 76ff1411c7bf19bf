import pytest
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient

from codenotes.presentation.middleware.rate_limit import RateLimitMiddleware


@pytest.fixture
def limited_app():
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limit=2, window=60)

    @app.get("/ping")
    async def ping():
        return {"pong": True}

    return app


@pytest.mark.asyncio
async def test_requests_over_limit_are_rejected(limited_app, fake_redis):
    async with AsyncClient(transport=ASGITransport(app=limited_app), base_url="http://test") as client:
        statuses = [(await client.get("/ping")).status_code for _ in range(3)]

    assert statuses == [status.HTTP_200_OK, status.HTTP_200_OK, status.HTTP_429_TOO_MANY_REQUESTS]
    assert list(fake_redis.store.values()) == [2]


@pytest.mark.asyncio
async def test_unavailable_redis_does_not_block_requests(limited_app, fake_redis):
    async def broken(name):
        raise ConnectionError("redis is down")

    fake_redis.get = broken

    async with AsyncClient(transport=ASGITransport(app=limited_app), base_url="http://test") as client:
        response = await client.get("/ping")

    assert response.status_code == status.HTTP_200_OK
