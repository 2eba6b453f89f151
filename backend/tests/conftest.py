"""
Test fixtures - in-memory SQLite database, authenticated HTTP clients, engine stores
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from backend.database import Base, get_db
from backend.main import app
from backend.api.auth import get_password_hash, create_access_token
from backend.models.user import User
from backend.services.audit_recorder import AuditRecorder
from backend.services.task_store import TaskStore
from backend.storage.memory import MemoryStore
from backend.utils.errors import PersistenceError


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


@pytest_asyncio.fixture()
async def seed_data(db_session):
    """Insert baseline test data: two users"""
    user = User(
        email="test@example.com",
        full_name="Test User",
        hashed_password=get_password_hash("testpass123"),
    )
    other = User(
        email="other@example.com",
        full_name="Other User",
        hashed_password=get_password_hash("otherpass123"),
    )

    db_session.add_all([user, other])
    await db_session.commit()
    await db_session.refresh(user)
    await db_session.refresh(other)

    return {"user": user, "other": other}


def _override_db(db_session):
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db


@pytest_asyncio.fixture()
async def client(db_session, seed_data):
    """Authenticated httpx AsyncClient bound to the FastAPI app"""
    _override_db(db_session)

    token = create_access_token(data={"sub": seed_data["user"].email})

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        ac.headers["Authorization"] = f"Bearer {token}"
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def other_client(db_session, seed_data):
    """Client authenticated as a second user"""
    _override_db(db_session)

    token = create_access_token(data={"sub": seed_data["other"].email})

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        ac.headers["Authorization"] = f"Bearer {token}"
        yield ac


@pytest_asyncio.fixture()
async def unauth_client(db_session):
    """Unauthenticated httpx AsyncClient"""
    _override_db(db_session)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        yield ac

    app.dependency_overrides.clear()


# ===================== ENGINE =====================


class FlakyStore(MemoryStore):
    """
    MemoryStore whose writes fail while ``failing`` is set.

    With ``fail_after = n`` the next n writes succeed and the one after
    fails once.
    """

    name = "flaky"

    def __init__(self):
        super().__init__()
        self.failing = False
        self.fail_after = None

    def _maybe_fail(self):
        if self.failing:
            raise PersistenceError("disk on fire")
        if self.fail_after is not None:
            if self.fail_after == 0:
                self.fail_after = None
                raise PersistenceError("write interrupted")
            self.fail_after -= 1

    async def put(self, collection, record):
        self._maybe_fail()
        await super().put(collection, record)

    async def delete(self, collection, key):
        self._maybe_fail()
        await super().delete(collection, key)

    async def clear(self, collection):
        self._maybe_fail()
        await super().clear(collection)


@pytest.fixture()
def memory_store():
    return MemoryStore()


@pytest.fixture()
def recorder(memory_store):
    return AuditRecorder(memory_store)


@pytest.fixture()
def store(memory_store, recorder):
    return TaskStore(memory_store, audit=recorder)


@pytest.fixture()
def flaky_store():
    return FlakyStore()
