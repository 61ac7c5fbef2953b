import os

# Settings are read at import time; the app's own engine is never used in tests.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_records.db")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.main import app
from shortener.database import build_engine, build_session_factory, get_db, init_db


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'records.db'}", echo=False)
    await init_db(engine)
    yield engine
    await engine.dispose()

@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)

@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session

@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    # One session per request, like the real get_db, but against the temporary database.
    # ASGITransport does not run the lifespan, so Redis stays disconnected and the cache is off.
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with ASGITransport(app=app) as transport:
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
    app.dependency_overrides.clear()
