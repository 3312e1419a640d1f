import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["IDENTITY_JWT_KEY"] = "test-signing-key"
os.environ["ENVIRONMENT"] = "test"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["AUTO_CREATE_TABLES"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.core.rate_limit import limiter
from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.services.storage import LocalBlobStorage, get_blob_storage

API = "/api/v1"


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    await engine.dispose()


@pytest.fixture
def storage(tmp_path):
    return LocalBlobStorage(tmp_path / "blobs")


@pytest.fixture
async def client(session_factory, storage):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_storage] = lambda: storage
    limiter.enabled = False

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def auth_headers():
    def make(subject: str, email: str | None = None, **claims) -> dict:
        token = create_access_token({"sub": subject, "email": email or f"{subject}@example.com", **claims})
        return {"Authorization": f"Bearer {token}"}
    return make


@pytest.fixture
def sign_in(client, auth_headers):
    """Headers and internal id for a user, creating the user on first call."""
    async def _sign_in(subject: str, email: str | None = None):
        headers = auth_headers(subject, email)
        response = await client.get(f"{API}/users/me", headers=headers)
        assert response.status_code == 200, response.text
        return headers, response.json()["user"]["id"]
    return _sign_in


@pytest.fixture
def upload(client):
    async def _upload(
        headers: dict,
        name: str,
        content: bytes = b"hello world",
        mime_type: str = "text/plain",
        folder_id: str | None = None,
        replace: bool = False,
    ):
        data = {"replace": "true" if replace else "false"}
        if folder_id:
            data["folderId"] = folder_id
        return await client.post(
            f"{API}/upload",
            headers=headers,
            files={"file": (name, content, mime_type)},
            data=data,
        )
    return _upload


@pytest.fixture
def create_folder(client):
    async def _create(headers: dict, name: str, parent_id: str | None = None) -> dict:
        body = {"name": name}
        if parent_id:
            body["parentId"] = parent_id
        response = await client.post(f"{API}/folders", headers=headers, json=body)
        assert response.status_code == 201, response.text
        return response.json()["folder"]
    return _create
