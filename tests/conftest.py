"""Shared test fixtures for pytest"""
import os

# Settings are read at import time; configure them before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,  # noqa: E402
                                    create_async_engine)
from sqlalchemy.pool import StaticPool  # noqa: E402

from scoped_rbac.application.services.assignment_ledger import AssignmentLedger  # noqa: E402
from scoped_rbac.application.services.authorization_service import \
    AuthorizationService  # noqa: E402
from scoped_rbac.application.services.menu_service import MenuService  # noqa: E402
from scoped_rbac.application.services.role_registry import RoleRegistry  # noqa: E402
from scoped_rbac.infrastructure.persistence.database import (  # noqa: E402
    Base, get_db, get_db_transactional)
from scoped_rbac.infrastructure.persistence.models import (  # noqa: E402
    Location, Project, Role, User)
from scoped_rbac.infrastructure.persistence.repositories import (  # noqa: E402
    LocationRepository, MenuItemRepository, ProjectRepository, RoleRepository,
    UserRepository, UserRoleRepository)
from scoped_rbac.infrastructure.security.jwt import create_access_token  # noqa: E402
from scoped_rbac.shared.utils.datetime import utc_now  # noqa: E402

# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_ROLE_NAME = "Administrador"

EDITOR_PERMISSIONS = {"documents": ["read", "update"], "settings": {"roles": ["read"]}}


@pytest.fixture
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def test_db(test_engine):
    """Create test database session"""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
async def client(test_db):
    """HTTP client for API testing"""
    from main import app

    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_db_transactional] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def location(test_db):
    """Primary test location (L1)"""
    loc = Location(id="loc-1", code="L1", name="Location One")
    test_db.add(loc)
    await test_db.commit()
    return loc


@pytest.fixture
async def second_location(test_db):
    """Second test location (L2)"""
    loc = Location(id="loc-2", code="L2", name="Location Two")
    test_db.add(loc)
    await test_db.commit()
    return loc


@pytest.fixture
async def project(test_db, location):
    """Project P1 at location L1"""
    proj = Project(id="proj-1", code="P1", name="Project One", location_id=location.id)
    test_db.add(proj)
    await test_db.commit()
    return proj


@pytest.fixture
async def second_project(test_db, location):
    """Project P2 at location L1"""
    proj = Project(id="proj-2", code="P2", name="Project Two", location_id=location.id)
    test_db.add(proj)
    await test_db.commit()
    return proj


@pytest.fixture
async def foreign_project(test_db, second_location):
    """Project at location L2"""
    proj = Project(id="proj-l2", code="PL2", name="Remote", location_id=second_location.id)
    test_db.add(proj)
    await test_db.commit()
    return proj


@pytest.fixture
async def test_user(test_db, location):
    """Create test user"""
    user = User(
        id="user-1",
        username="testuser",
        email="test@example.com",
        first_name="Test",
        last_name="User",
        location_id=location.id,
    )
    test_db.add(user)
    await test_db.commit()
    return user


@pytest.fixture
async def admin_user(test_db, location):
    """User that will receive the admin role"""
    user = User(
        id="admin-1",
        username="admin",
        email="admin@example.com",
        first_name="Admin",
        last_name="Sistema",
        location_id=location.id,
    )
    test_db.add(user)
    await test_db.commit()
    return user


@pytest.fixture
def ledger(test_db) -> AssignmentLedger:
    return AssignmentLedger(
        user_repo=UserRepository(test_db),
        role_repo=RoleRepository(test_db),
        location_repo=LocationRepository(test_db),
        project_repo=ProjectRepository(test_db),
        user_role_repo=UserRoleRepository(test_db),
    )


@pytest.fixture
def registry(test_db) -> RoleRegistry:
    return RoleRegistry(RoleRepository(test_db), UserRoleRepository(test_db))


@pytest.fixture
def authz_service(ledger, registry) -> AuthorizationService:
    return AuthorizationService(ledger, registry, admin_role_name=ADMIN_ROLE_NAME)


@pytest.fixture
def menu_service(test_db, ledger, authz_service) -> MenuService:
    return MenuService(MenuItemRepository(test_db), RoleRepository(test_db), ledger, authz_service)


@pytest.fixture
async def editor_role(registry) -> Role:
    """Role 'Editor' granting read/update on documents"""
    return await registry.create_role("Editor", "Edits documents", EDITOR_PERMISSIONS)


@pytest.fixture
async def admin_role(registry) -> Role:
    """System admin role with an empty grid (the bypass must not consult it)"""
    return await registry.create_role(
        ADMIN_ROLE_NAME,
        "Full access",
        {},
        {"all_locations": True, "all_projects": True},
        is_system=True,
    )


@pytest.fixture
def past():
    return utc_now() - timedelta(days=2)


@pytest.fixture
def future():
    return utc_now() + timedelta(days=2)


@pytest.fixture
def auth_headers():
    """Factory for bearer token plus request context headers"""

    def _make(user_id: str, location_id: str, project_id: str | None = None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {create_access_token(data={'sub': user_id})}",
            "X-Location-ID": location_id,
        }
        if project_id:
            headers["X-Project-ID"] = project_id
        return headers

    return _make
