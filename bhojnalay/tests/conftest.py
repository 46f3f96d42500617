"""
Test fixtures - in-memory SQLite database, temp-file local storage, HTTP clients
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from bhojnalay.database import Base, get_db
from bhojnalay.main import app
from bhojnalay.api.deps import get_local_storage
from bhojnalay.services.local_storage import LocalStorage


@pytest_asyncio.fixture()
async def db_session():
    """Create a fresh in-memory SQLite database for each test"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture()
def local_storage(tmp_path):
    return LocalStorage(tmp_path / "local_store.json")


@pytest_asyncio.fixture()
async def client(db_session, local_storage):
    """httpx AsyncClient bound to the app, backed by the in-memory database"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_local_storage] = lambda: local_storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def local_client(local_storage):
    """httpx AsyncClient with no database configured (local storage only)"""

    async def no_db():
        yield None

    app.dependency_overrides[get_db] = no_db
    app.dependency_overrides[get_local_storage] = lambda: local_storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        yield ac

    app.dependency_overrides.clear()
