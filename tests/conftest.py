"""Pytest configuration and shared fixtures.

Tests run against an in-memory SQLite database through aiosqlite. Each
test gets a fresh schema and a single session whose outer transaction
is rolled back afterwards.
"""

import os


os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BOT_PROTECTION_ENABLED", "false")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs256")

from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from promption.core.auth import issue_token
from promption.core.database import Base, get_db
from promption.core.permissions import WorkspaceRole
from promption.main import create_app

# Import all models to ensure they're registered with Base.metadata
from promption.modules.categories.models import Category  # noqa: F401
from promption.modules.invitations.models import Invitation  # noqa: F401
from promption.modules.notifications.models import Notification  # noqa: F401
from promption.modules.prompts.models import Prompt  # noqa: F401
from promption.modules.users.models import User
from promption.modules.workspaces.models import Membership, Workspace
from promption.modules.workspaces.repos import MembershipRepository, WorkspaceRepository
from promption.modules.workspaces.schemas import WorkspaceCreate
from promption.modules.workspaces.services import WorkspaceService
from tests.factories import UserFactory


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine with the full schema."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; emit BEGIN
    # ourselves and turn on foreign keys for cascades.
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, _connection_record):  # type: ignore[no-untyped-def]
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):  # type: ignore[no-untyped-def]
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a transactional database session for tests.

    Each test runs in its own transaction that is rolled back
    after the test completes, ensuring test isolation.
    """
    session_factory = async_sessionmaker(
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with engine.connect() as conn:
        await conn.begin()

        async with session_factory(bind=conn) as session:
            yield session

        await conn.rollback()


@pytest.fixture(autouse=True)
def enqueue_mock() -> Generator[AsyncMock, None, None]:
    """Keep invitation email jobs off Redis."""
    with patch(
        "promption.modules.invitations.services.enqueue", new_callable=AsyncMock
    ) as mock:
        yield mock


@pytest.fixture
async def app(db: AsyncSession):  # type: ignore[no-untyped-def]
    """Create test application instance."""
    application = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:  # type: ignore[no-untyped-def]
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def anyio_backend() -> str:
    """Specify the async backend for anyio."""
    return "asyncio"


# ============================================================
# User and Workspace Fixtures
# ============================================================


def auth_headers(user: User) -> dict[str, str]:
    """Authorization headers carrying a session token for ``user``."""
    token = issue_token(
        subject=user.auth_subject,
        email=user.email,
        full_name=user.full_name,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for() -> Callable[[User], dict[str, str]]:
    """Expose ``auth_headers`` to tests."""
    return auth_headers


@pytest.fixture
def make_user(db: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory fixture persisting users.

    Usage:
        bob = await make_user(email="bob@example.com")
    """

    async def _make(**kwargs: object) -> User:
        user = UserFactory.build(**kwargs)
        db.add(user)
        await db.flush()
        return user

    return _make


@pytest.fixture
def add_member(db: AsyncSession) -> Callable[..., Awaitable[Membership]]:
    """Factory fixture adding a user to a workspace with a role."""

    async def _add(workspace: Workspace, user: User, role: WorkspaceRole) -> Membership:
        membership = Membership(workspace_id=workspace.id, user_id=user.id, role=role)
        db.add(membership)
        await db.flush()
        await db.refresh(membership)
        return membership

    return _add


@pytest.fixture
async def owner(make_user: Callable[..., Awaitable[User]]) -> User:
    """The Owner of the ``workspace`` fixture."""
    return await make_user(email="alice@example.com", full_name="Alice Owner")


@pytest.fixture
async def workspace(db: AsyncSession, owner: User) -> Workspace:
    """A workspace created through the service, owned by ``owner``."""
    service = WorkspaceService(WorkspaceRepository(db), MembershipRepository(db))
    return await service.create_workspace(owner, WorkspaceCreate(name="Acme Prompts"))


@pytest.fixture
def owner_headers(owner: User) -> dict[str, str]:
    return auth_headers(owner)
