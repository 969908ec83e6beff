"""Role registry: CRUD and invariant enforcement for roles."""

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from sqlalchemy.exc import IntegrityError

from scoped_rbac.application.interfaces.repositories import (
    IRoleRepository, IUserRoleRepository)
from scoped_rbac.domain.exceptions import (ConflictException,
                                           NotFoundException,
                                           ValidationException)
from scoped_rbac.domain.value_objects import PermissionGrid, RoleScope
from scoped_rbac.infrastructure.persistence.models.role import Role
from scoped_rbac.shared.telemetry.logging import get_logger
from scoped_rbac.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)

MAX_NAME_LENGTH = 50


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationException("Role name is required", field="name")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise ValidationException(
            f"Role name must be at most {MAX_NAME_LENGTH} characters", field="name"
        )
    return cleaned


def _scope_document(scope: RoleScope | Mapping[str, Any] | None) -> dict[str, Any]:
    if isinstance(scope, RoleScope):
        return scope.to_dict()
    return RoleScope.from_dict(scope).to_dict()


class RoleRegistry:
    """Stores roles (grid + scope + system flag) and answers role lookups"""

    def __init__(
        self,
        role_repo: IRoleRepository,
        user_role_repo: IUserRoleRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.role_repo = role_repo
        self.user_role_repo = user_role_repo
        self.clock = clock

    async def create_role(
        self,
        name: str,
        description: str | None = None,
        permissions: Mapping[str, Any] | None = None,
        scope: RoleScope | Mapping[str, Any] | None = None,
        *,
        is_system: bool = False,
        sort_order: int = 0,
        created_by: str | None = None,
    ) -> Role:
        """
        Create a role.

        Raises:
            ValidationException: blank name or malformed permission grid
            ConflictException: a role with this name already exists
        """
        name = _clean_name(name)
        grid = PermissionGrid.from_dict(permissions)

        if await self.role_repo.get_by_name(name):
            raise ConflictException(f"Role name already exists: {name}", {"name": name})

        role = Role(
            name=name,
            description=description,
            permissions=grid.to_dict(),
            scope=_scope_document(scope),
            is_system=is_system,
            is_active=True,
            sort_order=sort_order,
            created_by=created_by,
            updated_by=created_by,
        )
        try:
            created = await self.role_repo.create(role)
        except IntegrityError as e:
            raise ConflictException(f"Role name already exists: {name}", {"name": name}) from e

        logger.info("Created role %s (%s)", created.name, created.id)
        return created

    async def update_role(
        self,
        role_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        permissions: Mapping[str, Any] | None = None,
        scope: RoleScope | Mapping[str, Any] | None = None,
        is_active: bool | None = None,
        sort_order: int | None = None,
        updated_by: str | None = None,
    ) -> Role:
        """
        Update the given fields of a role. Omitted (None) fields are kept.

        Raises:
            NotFoundException: unknown role id
            ValidationException: blank name or malformed permission grid
            ConflictException: the new name belongs to another role
        """
        role = await self.get_role(role_id)

        if name is not None:
            name = _clean_name(name)
            if name != role.name:
                other = await self.role_repo.get_by_name(name)
                if other and other.id != role.id:
                    raise ConflictException(f"Role name already exists: {name}", {"name": name})
                role.name = name
        if description is not None:
            role.description = description
        if permissions is not None:
            role.permissions = PermissionGrid.from_dict(permissions).to_dict()
        if scope is not None:
            role.scope = _scope_document(scope)
        if is_active is not None:
            role.is_active = is_active
        if sort_order is not None:
            role.sort_order = sort_order
        if updated_by is not None:
            role.updated_by = updated_by

        try:
            updated = await self.role_repo.update(role)
        except IntegrityError as e:
            raise ConflictException(
                f"Role name already exists: {role.name}", {"name": role.name}
            ) from e

        logger.info("Updated role %s (%s)", updated.name, updated.id)
        return updated

    async def delete_role(self, role_id: str) -> None:
        """
        Delete a role.

        Raises:
            NotFoundException: unknown role id
            ConflictException: the role is a system role, or any assignment
                (active or revoked) references it
        """
        role = await self.get_role(role_id)

        if role.is_system:
            raise ConflictException(
                f"System role cannot be deleted: {role.name}", {"role_id": role.id}
            )

        assignments = await self.user_role_repo.count_for_role(role.id)
        if assignments > 0:
            raise ConflictException(
                f"Role is referenced by {assignments} assignment(s): {role.name}",
                {"role_id": role.id, "assignments": assignments},
            )

        await self.role_repo.delete(role)
        logger.info("Deleted role %s (%s)", role.name, role.id)

    async def get_role(self, role_id: str) -> Role:
        role = await self.role_repo.get_by_id(role_id)
        if not role:
            raise NotFoundException("Role", role_id)
        return role

    async def get_by_name(self, name: str) -> Role | None:
        return await self.role_repo.get_by_name(name)

    async def list_roles(
        self, skip: int = 0, limit: int = 100, include_inactive: bool = False
    ) -> list[Role]:
        return await self.role_repo.list_roles(skip, limit, include_inactive)

    async def find_by_user_and_context(
        self, user_id: str, location_id: str, project_id: str | None = None
    ) -> list[Role]:
        """Distinct roles a user currently holds in the context, first-seen order"""
        assignments = await self.user_role_repo.find_current(
            user_id, location_id, project_id, ensure_utc(self.clock())
        )

        roles: dict[str, Role] = {}
        for assignment in assignments:
            if assignment.role is not None:
                roles.setdefault(assignment.role.id, assignment.role)
        return list(roles.values())

    async def roles_for_location(self, location_id: str) -> list[Role]:
        """Active roles whose declared scope covers the location"""
        roles = await self.role_repo.list_active()
        return [role for role in roles if role.applies_to_location(location_id)]

    async def roles_for_project(self, project_id: str) -> list[Role]:
        """Active roles whose declared scope covers the project"""
        roles = await self.role_repo.list_active()
        return [role for role in roles if role.applies_to_project(project_id)]
