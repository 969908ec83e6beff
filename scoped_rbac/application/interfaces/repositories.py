"""
Repository interfaces (ports) for the application layer.

Services receive these through their constructors instead of looking models
up globally, so the ledger, the registry and the evaluator can be exercised
against any store.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from scoped_rbac.infrastructure.persistence.models.location import Location
    from scoped_rbac.infrastructure.persistence.models.menu_item import MenuItem
    from scoped_rbac.infrastructure.persistence.models.project import Project
    from scoped_rbac.infrastructure.persistence.models.role import Role
    from scoped_rbac.infrastructure.persistence.models.user import User
    from scoped_rbac.infrastructure.persistence.models.user_role import UserRole


class IUserRepository(Protocol):
    async def get_by_id(self, id: str) -> User | None: ...


class ILocationRepository(Protocol):
    async def get_by_id(self, id: str) -> Location | None: ...


class IProjectRepository(Protocol):
    async def get_by_id(self, id: str) -> Project | None: ...


class IRoleRepository(Protocol):
    async def get_by_id(self, id: str) -> Role | None: ...

    async def get_by_name(self, name: str) -> Role | None: ...

    async def list_roles(
        self, skip: int = 0, limit: int = 100, include_inactive: bool = False
    ) -> list[Role]: ...

    async def list_active(self) -> list[Role]: ...

    async def create(self, obj: Role) -> Role: ...

    async def update(self, obj: Role) -> Role: ...

    async def delete(self, obj: Role) -> None: ...


class IUserRoleRepository(Protocol):
    async def create(self, obj: UserRole) -> UserRole: ...

    async def update(self, obj: UserRole) -> UserRole: ...

    async def find_active_assignment(
        self, user_id: str, role_id: str, location_id: str, project_id: str | None
    ) -> UserRole | None: ...

    async def find_current(
        self, user_id: str, location_id: str, project_id: str | None, now: datetime
    ) -> list[UserRole]: ...

    async def exists_current(
        self,
        user_id: str,
        role_id: str,
        location_id: str,
        project_id: str | None,
        now: datetime,
    ) -> bool: ...

    async def exists_current_anywhere(
        self, user_id: str, role_id: str, now: datetime
    ) -> bool: ...

    async def count_for_role(self, role_id: str) -> int: ...

    async def list_for_user(
        self, user_id: str, include_inactive: bool = False
    ) -> list[UserRole]: ...


class IMenuItemRepository(Protocol):
    async def get_by_id(self, id: str) -> MenuItem | None: ...

    async def list_active(self) -> list[MenuItem]: ...

    async def find_sibling_by_path(
        self, path: str, parent_id: str | None, exclude_id: str | None = None
    ) -> MenuItem | None: ...

    async def count_children(self, item_id: str) -> int: ...

    async def count_all(self) -> int: ...

    async def create(self, obj: MenuItem) -> MenuItem: ...

    async def update(self, obj: MenuItem) -> MenuItem: ...

    async def delete(self, obj: MenuItem) -> None: ...
