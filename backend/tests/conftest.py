"""
Test configuration and fixtures.
Uses an in-memory SQLite database and an httpx.MockTransport object store.
"""
import os

# Set test environment before any imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"

import pytest
import httpx
from typing import AsyncGenerator, List, Optional

from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from gateway.models import Base, UserPreference
from gateway.schemas.storage_config import StorageConfig
from gateway.storage.object_client import ObjectClient


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_USER_ID = "user-firebase-uid-1"
OTHER_USER_ID = "user-firebase-uid-2"


def storage_section(**overrides) -> dict:
    """The s3Config section as the settings screen stores it."""
    section = {
        "access_key_id": "AKIAEXAMPLE",
        "secret_access_key": "secret",
        "region": "us-east-1",
        "bucket_name": "bkt",
        "endpoint": "https://s3.example.com",
        "enabled": True,
    }
    section.update(overrides)
    return section


class FakeObjectStore:
    """
    Object store double behind httpx.MockTransport.

    Records every request; status codes are set per test.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.put_status = 200
        self.delete_status = 204
        self.error_body = "<Error><Code>SignatureDoesNotMatch</Code></Error>"
        self.raise_on: Optional[str] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_on == request.method:
            raise httpx.ConnectError("connection refused", request=request)
        status = self.put_status if request.method == "PUT" else self.delete_status
        body = "" if status < 300 else self.error_body
        return httpx.Response(status, text=body)

    def methods(self) -> List[str]:
        return [r.method for r in self.requests]


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create database session for testing."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def storage_config() -> StorageConfig:
    return StorageConfig.model_validate(storage_section())


@pytest.fixture(scope="function")
async def test_preferences(db_session: AsyncSession) -> UserPreference:
    """Preferences with an enabled storage config for TEST_USER_ID."""
    prefs = UserPreference(
        user_id=TEST_USER_ID,
        preferences={"theme": "dark", "s3Config": storage_section()}
    )
    db_session.add(prefs)
    await db_session.commit()
    return prefs


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
async def object_client(object_store: FakeObjectStore) -> AsyncGenerator[ObjectClient, None]:
    client = ObjectClient(transport=httpx.MockTransport(object_store.handler))
    yield client
    await client.aclose()


def get_test_app(
    db_session: AsyncSession,
    object_client: ObjectClient,
    user_id: Optional[str] = TEST_USER_ID
) -> FastAPI:
    """
    Create a test FastAPI app with overridden dependencies.
    With user_id=None the real bearer-token dependency stays in place.
    """
    from gateway.main import app
    from gateway.database import get_db
    from gateway.auth.dependencies import get_current_user
    from gateway.storage.object_client import get_object_client

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_object_client] = lambda: object_client

    if user_id is not None:
        async def override_get_current_user():
            return user_id
        app.dependency_overrides[get_current_user] = override_get_current_user

    return app


@pytest.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    object_client: ObjectClient
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client authenticated as TEST_USER_ID."""
    app = get_test_app(db_session, object_client)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def anonymous_client(
    db_session: AsyncSession,
    object_client: ObjectClient
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client going through real bearer token verification."""
    app = get_test_app(db_session, object_client, user_id=None)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
