"""
ParcInfo - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Awaitable, Callable, Dict

import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['LOG_FILE'] = ''
os.environ['LOG_LEVEL'] = 'WARNING'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['SEED_DEMO_DATA'] = 'false'
os.environ['SESSION_BACKEND'] = 'memory'
os.environ['SCRYPT_N'] = '1024'

from parcinfo.main import app
from parcinfo.core.config import settings
from parcinfo.core.database import Base, enable_sqlite_foreign_keys, get_db
from parcinfo.core.security import get_password_hash
from parcinfo.core.session_store import InMemorySessionStore, get_session_store
from parcinfo.db.repository import InventoryRepository
from parcinfo.models.establishment import Establishment
from parcinfo.models.pc import PC, PcType
from parcinfo.models.user import User, UserRole

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
enable_sqlite_foreign_keys(test_engine)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

DEFAULT_PASSWORD = 'password123'


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def repository(db_session: AsyncSession) -> InventoryRepository:
    return InventoryRepository(db_session)


@pytest.fixture
async def client(
    db_session: AsyncSession,
    session_store: InMemorySessionStore,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database and session store overrides"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_store] = lambda: session_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Data fixtures ====================

@pytest.fixture
async def establishment(repository: InventoryRepository) -> Establishment:
    return await repository.create_establishment({'name': fake.company()})


@pytest.fixture
async def other_establishment(repository: InventoryRepository) -> Establishment:
    return await repository.create_establishment({'name': fake.company()})


@pytest.fixture
def make_user(repository: InventoryRepository) -> Callable[..., Awaitable[User]]:
    """Factory creating a user with DEFAULT_PASSWORD unless told otherwise"""
    async def _make_user(role: UserRole, establishment_id=None, username=None, password=DEFAULT_PASSWORD) -> User:
        return await repository.create_user({
            'username': username or fake.unique.user_name(),
            'hashed_password': get_password_hash(password),
            'role': role,
            'establishment_id': establishment_id,
        })
    return _make_user


@pytest.fixture
def make_pc(repository: InventoryRepository) -> Callable[..., Awaitable[PC]]:
    async def _make_pc(establishment_id: int, **overrides) -> PC:
        data = {
            'establishment_id': establishment_id,
            'type': PcType.TERMINAL,
            'ip_address': fake.ipv4_private(),
        }
        data.update(overrides)
        return await repository.create_pc(data)
    return _make_pc


@pytest.fixture
async def super_admin(make_user) -> User:
    return await make_user(UserRole.SUPER_ADMIN)


@pytest.fixture
async def admin_user(make_user, establishment: Establishment) -> User:
    return await make_user(UserRole.ADMIN, establishment.id)


@pytest.fixture
async def regular_user(make_user, establishment: Establishment) -> User:
    return await make_user(UserRole.USER, establishment.id)


@pytest.fixture
async def other_admin(make_user, other_establishment: Establishment) -> User:
    return await make_user(UserRole.ADMIN, other_establishment.id)


# ==================== Auth helpers ====================

@pytest.fixture
def login(client: AsyncClient) -> Callable[..., Awaitable[Dict[str, str]]]:
    """Log in through the API and return bearer headers for the new session.

    The cookie jar is cleared so that several identities can share one client.
    """
    async def _login(username: str, password: str = DEFAULT_PASSWORD) -> Dict[str, str]:
        response = await client.post(
            '/api/v1/auth/login',
            json={'username': username, 'password': password},
        )
        assert response.status_code == 200, response.text
        token = response.cookies[settings.SESSION_COOKIE_NAME]
        client.cookies.clear()
        return {'Authorization': f'Bearer {token}'}
    return _login


@pytest.fixture
async def super_admin_headers(login, super_admin: User) -> Dict[str, str]:
    return await login(super_admin.username)


@pytest.fixture
async def admin_headers(login, admin_user: User) -> Dict[str, str]:
    return await login(admin_user.username)


@pytest.fixture
async def user_headers(login, regular_user: User) -> Dict[str, str]:
    return await login(regular_user.username)


@pytest.fixture
async def other_admin_headers(login, other_admin: User) -> Dict[str, str]:
    return await login(other_admin.username)
