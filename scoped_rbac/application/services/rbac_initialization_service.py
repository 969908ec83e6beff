"""
RBAC initialization service for setting up system roles and bootstrap data.

Called by ``scripts/seed_rbac.py`` on a fresh database. It is idempotent:
roles are upserted by name and existing locations, users and assignments are
left as they are.
- System roles (administrator, manager, employee) with their permission grids
- A default location
- The administrator role assigned to a bootstrap user
- The default navigation menu, when no menu items exist yet
"""
from typing import Any, TypedDict

from scoped_rbac.application.services.assignment_ledger import AssignmentLedger
from scoped_rbac.application.services.menu_service import MenuService
from scoped_rbac.application.services.role_registry import RoleRegistry
from scoped_rbac.infrastructure.config.settings import get_settings
from scoped_rbac.infrastructure.persistence.models.location import Location
from scoped_rbac.infrastructure.persistence.models.user import User
from scoped_rbac.infrastructure.persistence.repositories.location_repo import LocationRepository
from scoped_rbac.infrastructure.persistence.repositories.user_repo import UserRepository
from scoped_rbac.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

CRUD = ["create", "read", "update", "delete"]


class RoleData(TypedDict):
    """Type definition for role configuration"""

    description: str
    permissions: dict[str, Any]
    scope: dict[str, Any]
    sort_order: int


def _settings_grid(actions: list[str]) -> dict[str, list[str]]:
    return {
        sub: list(actions)
        for sub in ("roles", "users", "userRoles", "locations", "projects", "menus")
    }


# Default system roles keyed by name. The administrator entry is renamed to
# the configured admin role name when seeding.
SYSTEM_ROLES: dict[str, RoleData] = {
    "Administrador": {
        "description": "Full access to every module of the system",
        "permissions": {
            "profile": CRUD,
            "job": CRUD,
            "salaryDetails": CRUD,
            "timeOff": CRUD,
            "documents": CRUD,
            "training": CRUD,
            "benefits": CRUD,
            "settings": _settings_grid(CRUD),
        },
        "scope": {"all_locations": True, "all_projects": True},
        "sort_order": 0,
    },
    "Gerente": {
        "description": "Access to most modules; read-only system settings",
        "permissions": {
            "profile": ["read", "update"],
            "job": ["create", "read", "update"],
            "salaryDetails": ["read"],
            "timeOff": ["create", "read", "update"],
            "documents": ["create", "read", "update"],
            "training": ["create", "read", "update"],
            "benefits": ["read"],
            "settings": _settings_grid(["read"]),
        },
        "scope": {"all_locations": True, "all_projects": True},
        "sort_order": 10,
    },
    "Empleado": {
        "description": "Basic access for regular employees",
        "permissions": {
            "profile": ["read", "update"],
            "job": ["read"],
            "salaryDetails": ["read"],
            "timeOff": ["create", "read", "update"],
            "documents": ["read"],
            "training": ["read"],
            "benefits": ["read"],
            "settings": _settings_grid([]),
        },
        "scope": {"all_locations": False, "all_projects": False},
        "sort_order": 20,
    },
}

ADMIN_TEMPLATE = "Administrador"
MANAGER_ROLE = "Gerente"


class InitializationResult(TypedDict):
    """Result of RBAC initialization"""

    roles_created: int
    roles_updated: int
    location_id: str
    admin_user_id: str | None
    admin_role_assigned: bool
    menu_items_created: int


class RbacInitializationService:
    """Service for seeding system roles and the bootstrap administrator"""

    def __init__(
        self,
        registry: RoleRegistry,
        ledger: AssignmentLedger,
        location_repo: LocationRepository,
        user_repo: UserRepository,
        menu_service: MenuService,
    ) -> None:
        self.registry = registry
        self.ledger = ledger
        self.location_repo = location_repo
        self.user_repo = user_repo
        self.menu_service = menu_service
        self.settings = get_settings()

    async def seed_system_roles(self) -> tuple[int, int]:
        """Upsert system roles by name. Returns (created, updated)."""
        created = updated = 0
        for name, data in SYSTEM_ROLES.items():
            if name == ADMIN_TEMPLATE:
                name = self.settings.rbac_admin_role_name

            existing = await self.registry.get_by_name(name)
            if existing:
                await self.registry.update_role(
                    existing.id,
                    description=data["description"],
                    permissions=data["permissions"],
                    scope=data["scope"],
                    is_active=True,
                    sort_order=data["sort_order"],
                )
                if not existing.is_system:
                    existing.is_system = True
                    await self.registry.role_repo.update(existing)
                updated += 1
            else:
                await self.registry.create_role(
                    name,
                    data["description"],
                    data["permissions"],
                    data["scope"],
                    is_system=True,
                    sort_order=data["sort_order"],
                )
                created += 1

        logger.info("System roles seeded: %d created, %d updated", created, updated)
        return created, updated

    async def ensure_default_location(self) -> Location:
        code = self.settings.default_location_code.upper()
        location = await self.location_repo.get_by_code(code)
        if location:
            return location

        location = await self.location_repo.create(Location(code=code, name="Headquarters"))
        logger.info("Created default location %s (%s)", location.code, location.id)
        return location

    async def ensure_admin_user(self, location: Location) -> tuple[User, bool]:
        """Return the bootstrap user and whether it was created"""
        email = self.settings.bootstrap_admin_email.lower()
        user = await self.user_repo.get_by_email(email)
        if user:
            return user, False

        user = await self.user_repo.create(
            User(
                username=email.split("@")[0][:30],
                email=email,
                first_name="Admin",
                last_name="Sistema",
                location_id=location.id,
            )
        )
        logger.info("Created bootstrap administrator %s (%s)", user.email, user.id)
        return user, True

    async def ensure_default_menu(self) -> int:
        """Create the default menu on an empty menu table. Returns items created."""
        if await self.menu_service.menu_repo.count_all():
            return 0

        admin = await self.registry.get_by_name(self.settings.rbac_admin_role_name)
        manager = await self.registry.get_by_name(MANAGER_ROLE)
        admin_ids = [admin.id] if admin else []
        manager_ids = admin_ids + ([manager.id] if manager else [])

        create = self.menu_service.create_item
        await create("Dashboard", "/dashboard", icon="dashboard", sort_order=1)
        await create(
            "Mi Perfil", "/profile", icon="person", sort_order=2, show_in_user_menu=True
        )
        await create("Proyectos", "/projects", icon="folder", sort_order=3, roles=manager_ids)
        settings_menu = await create(
            "Configuración", None, icon="settings", sort_order=100, roles=admin_ids
        )
        children = [
            ("Usuarios", "/settings/users", "people", "settings.users"),
            ("Roles", "/settings/roles", "security", "settings.roles"),
            ("Ubicaciones", "/settings/locations", "location_on", "settings.locations"),
            ("Menú", "/settings/menu", "menu", "settings.menus"),
        ]
        for order, (title, path, icon, module) in enumerate(children, start=1):
            await create(
                title,
                path,
                parent_id=settings_menu.id,
                icon=icon,
                sort_order=order,
                permissions=[{"module": module, "action": "read"}],
            )

        created = 4 + len(children)
        logger.info("Default menu seeded with %d items", created)
        return created

    async def initialize(self, *, with_admin: bool = True) -> InitializationResult:
        """
        Seed roles, the default location and (optionally) the bootstrap
        administrator with the admin role at that location.
        """
        roles_created, roles_updated = await self.seed_system_roles()
        location = await self.ensure_default_location()

        result: InitializationResult = {
            "roles_created": roles_created,
            "roles_updated": roles_updated,
            "location_id": location.id,
            "admin_user_id": None,
            "admin_role_assigned": False,
            "menu_items_created": await self.ensure_default_menu(),
        }
        if not with_admin:
            return result

        admin_user, _ = await self.ensure_admin_user(location)
        result["admin_user_id"] = admin_user.id

        admin_role = await self.registry.get_by_name(self.settings.rbac_admin_role_name)
        assert admin_role is not None
        if not await self.ledger.holds_role_anywhere(admin_user.id, admin_role.id):
            await self.ledger.assign_role(
                admin_user.id,
                admin_role.id,
                location.id,
                None,
                admin_user.id,
                notes="Initial administrator",
            )
            result["admin_role_assigned"] = True

        return result
