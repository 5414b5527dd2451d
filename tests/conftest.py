import os
import tempfile

# Point settings at a throwaway SQLite file before anything imports app.core.config
_db_dir = tempfile.mkdtemp(prefix="savings-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["TRIGGER_SWEEP_INTERVAL_SECONDS"] = "0"

import pytest
from httpx import AsyncClient, ASGITransport

from app.main import app
from app.core.database import engine, Base, AsyncSessionLocal
from app.api.deps import get_current_user
from app.models.user import User


@pytest.fixture
async def tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db(tables):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def user(db):
    user = User(email="saver@example.com", full_name="Test Saver")
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def client(user):
    async def _current_user():
        return user

    app.dependency_overrides[get_current_user] = _current_user
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def anonymous_client(tables):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
