"""
Pytest fixtures for TeamHub tests.

Each test gets its own SQLite file configured the same way as the
application engine, so transactions, locking and rollbacks behave as they
do in the service.
"""

import os
import tempfile
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, List

# Settings are read at import time by teamhub.database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "teamhub_test_app.db"))
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only-32-chars")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from teamhub.config import get_settings

get_settings.cache_clear()

from teamhub.database import configure_sqlite_engine
from teamhub.kernel.cascade.coordinator import TransactionCoordinator
from teamhub.kernel.identity.jwt import JWTManager
from teamhub.kernel.models.base import Base
from teamhub.kernel.models.organization import Organization
from teamhub.kernel.models.user import User
from teamhub.kernel.workspace import WorkspaceService
from teamhub.notifications.dispatcher import NotificationDispatcher


class RecordingSender:
    """Notification sender that keeps every message it is given."""

    def __init__(self):
        self.sent: List[tuple] = []

    async def send(self, recipient: str, subject: str, body: str) -> None:
        self.sent.append((recipient, subject, body))

    @property
    def recipients(self) -> List[str]:
        return [recipient for recipient, _, _ in self.sent]


@dataclass
class Members:
    """Users seeded into one organization."""

    org: Organization
    admin: User
    moderator: User
    leader: User
    member: User
    outsider: User


@pytest_asyncio.fixture(scope="function")
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh SQLite database file for one test."""
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp.name}",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=NullPool,
    )
    configure_sqlite_engine(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()
    for suffix in ("", "-wal", "-shm"):
        try:
            os.unlink(tmp.name + suffix)
        except FileNotFoundError:
            pass


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def dispatcher(sender: RecordingSender) -> NotificationDispatcher:
    return NotificationDispatcher(sender)


@pytest.fixture
def coordinator(session_factory, dispatcher) -> TransactionCoordinator:
    return TransactionCoordinator(
        session_factory,
        dispatcher=dispatcher,
        max_attempts=3,
        timeout_seconds=5.0,
        retry_backoff_seconds=0.0,
    )


@pytest.fixture
def service(coordinator: TransactionCoordinator) -> WorkspaceService:
    return WorkspaceService(coordinator)


async def register(service: WorkspaceService, name: str) -> User:
    """Register a user named ``name`` with a unique address."""
    email = f"{name.lower()}-{uuid.uuid4().hex[:8]}@example.com"
    result = await service.register_user(user_name=name, email=email)
    return result.payload


@pytest.fixture
def make_user(service: WorkspaceService):
    async def build(name: str) -> User:
        return await register(service, name)

    return build


@pytest_asyncio.fixture
async def members(service: WorkspaceService, dispatcher: NotificationDispatcher, sender: RecordingSender) -> Members:
    """
    An organization with one user per role, plus a registered outsider.

    The admin created the organization.
    """
    admin = await register(service, "Alice")
    moderator = await register(service, "Mona")
    leader = await register(service, "Leo")
    member = await register(service, "Bob")
    outsider = await register(service, "Olga")

    result = await service.create_organization(admin.id, "Acme")
    org_id = result.payload.id
    await service.add_member_to_org(admin.id, org_id, moderator.id, "moderator")
    await service.add_member_to_org(admin.id, org_id, leader.id, "leader")
    await service.add_member_to_org(admin.id, org_id, member.id, "member")

    # Start each test with an empty outbox
    await dispatcher.drain()
    sender.sent.clear()

    org = await service.coordinator.read(lambda session: session.get(Organization, org_id))
    return Members(
        org=org,
        admin=admin,
        moderator=moderator,
        leader=leader,
        member=member,
        outsider=outsider,
    )


@pytest.fixture
def jwt_manager() -> JWTManager:
    """Create a JWT manager for tests."""
    return JWTManager(access_token_expire_minutes=30)


@pytest.fixture
def auth_header(jwt_manager: JWTManager):
    """Build an Authorization header for a user."""

    def build(user: User) -> dict:
        token = jwt_manager.create_access_token(user_id=user.id, email=user.email)
        return {"Authorization": f"Bearer {token}"}

    return build
