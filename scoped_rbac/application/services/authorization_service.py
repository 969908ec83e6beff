from scoped_rbac.application.services.assignment_ledger import AssignmentLedger
from scoped_rbac.application.services.role_registry import RoleRegistry
from scoped_rbac.domain.enums import CrudAction
from scoped_rbac.domain.exceptions import PermissionDeniedError
from scoped_rbac.infrastructure.config.settings import get_settings
from scoped_rbac.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class AuthorizationService:
    """
    Central authorization decision for (user, module, action, location, project).

    Holders of the admin role bypass grid checks entirely. Everyone else is
    granted an action if any role they currently hold in the context allows
    it. Nothing is cached: every call re-reads assignments and roles.

    Lookup failures propagate to the caller; only a genuine absence of
    matching roles yields False.
    """

    def __init__(
        self,
        ledger: AssignmentLedger,
        registry: RoleRegistry,
        admin_role_name: str | None = None,
    ):
        self.ledger = ledger
        self.registry = registry
        self.admin_role_name = admin_role_name or get_settings().rbac_admin_role_name

    async def is_superuser(self, user_id: str) -> bool:
        """Whether the user currently holds the admin role anywhere"""
        admin_role = await self.registry.get_by_name(self.admin_role_name)
        if not admin_role:
            return False
        return await self.ledger.holds_role_anywhere(user_id, admin_role.id)

    async def has_permission(
        self,
        user_id: str,
        module_path: str,
        action: CrudAction | str,
        location_id: str,
        project_id: str | None = None,
    ) -> bool:
        """
        Check if user may perform ``action`` on ``module_path`` in the context.

        Examples:
            - has_permission(user_id, "documents", "update", location_id)
            - has_permission(user_id, "settings.roles", "read", location_id, project_id)
        """
        if await self.is_superuser(user_id):
            logger.debug("Permission %s:%s granted to %s (admin)", module_path, action, user_id)
            return True

        assignments = await self.ledger.get_user_roles(user_id, location_id, project_id)
        for assignment in assignments:
            role = assignment.role
            if role is not None and role.grid.allows(module_path, action):
                logger.debug(
                    "Permission %s:%s granted to %s by role %s",
                    module_path,
                    action,
                    user_id,
                    role.name,
                )
                return True

        logger.debug(
            "Permission %s:%s denied to %s at location %s (project=%s)",
            module_path,
            action,
            user_id,
            location_id,
            project_id,
        )
        return False

    async def require_permission(
        self,
        user_id: str,
        module_path: str,
        action: CrudAction | str,
        location_id: str,
        project_id: str | None = None,
    ) -> None:
        """Raise exception if user lacks permission"""
        allowed = await self.has_permission(
            user_id, module_path, action, location_id, project_id
        )

        if not allowed:
            action_value = action.value if isinstance(action, CrudAction) else action
            raise PermissionDeniedError(
                f"User {user_id} lacks permission {module_path}:{action_value}",
                module=module_path,
                action=action_value,
            )

    async def get_effective_permissions(
        self, user_id: str, location_id: str, project_id: str | None = None
    ) -> dict[str, list[str]]:
        """
        Union of the grids of every role the user holds in the context,
        keyed by module path. Used by clients to build menus; authorization
        decisions must go through has_permission.
        """
        merged: dict[str, list[str]] = {}
        roles = await self.registry.find_by_user_and_context(user_id, location_id, project_id)
        for role in roles:
            grid = role.grid
            for path in grid.module_paths():
                granted = merged.setdefault(path, [])
                for action in grid.actions_for(path) or ():
                    if action.value not in granted:
                        granted.append(action.value)
        return merged
