# Set environment variables before the application is imported
import os

os.environ["TESTING"] = "True"
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import codenotes.data.schemas  # noqa: F401
from codenotes.business.services import create_access_token
from codenotes.config import logger
from codenotes.data.repositories import get_session, redis_client
from codenotes.main import app

OWNER_ID = "owner-1"
OTHER_OWNER_ID = "owner-2"


class FakeRedis:
    """In-memory stand-in for the few Redis commands the app uses."""

    def __init__(self):
        self.store = {}

    async def ping(self):
        return True

    async def get(self, name):
        return self.store.get(name)

    async def incr(self, name):
        self.store[name] = int(self.store.get(name) or 0) + 1
        return self.store[name]

    async def expire(self, name, seconds):
        return name in self.store

    async def close(self):
        pass


@pytest_asyncio.fixture
async def engine():
    # In-memory SQLite shared by every session of one test
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


# Redis double on the shared client (autouse so rate limiting never hits a server)
@pytest.fixture(autouse=True)
def fake_redis():
    previous = (redis_client.redis, redis_client._connected)
    redis_client.redis = FakeRedis()
    redis_client._connected = True
    yield redis_client.redis
    redis_client.redis, redis_client._connected = previous


def make_auth_headers(owner_id: str, username: str = "tester") -> dict:
    token = create_access_token({"id": owner_id, "username": username})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return make_auth_headers(OWNER_ID)


@pytest.fixture
def other_auth_headers():
    return make_auth_headers(OTHER_OWNER_ID, "someone-else")


@pytest.fixture
def headers_for():
    return make_auth_headers


@pytest.fixture
def problem_payload():
    return {
        "title": "Two Sum",
        "statement": "Find two numbers that add up to target.",
        "difficulty": "Easy",
        "language": "python",
        "topicId": "Arrays",
        "code": "def two_sum(nums, target): ...",
        "timeComplexity": "O(n)",
        "spaceComplexity": "O(n)",
    }


@pytest_asyncio.fixture
async def created_problem(client, auth_headers, problem_payload):
    response = await client.post("/api/v1/problems", json=problem_payload, headers=auth_headers)
    assert response.status_code == 201
    return response.json()


# Disable logging during tests
@pytest.fixture(autouse=True)
def disable_logging():
    logger.disabled = True
    yield
    logger.disabled = False
