""" Repository module for the persistence layer. """

from scoped_rbac.infrastructure.persistence.repositories.base import BaseRepository
from scoped_rbac.infrastructure.persistence.repositories.location_repo import LocationRepository
from scoped_rbac.infrastructure.persistence.repositories.menu_item_repo import MenuItemRepository
from scoped_rbac.infrastructure.persistence.repositories.project_repo import ProjectRepository
from scoped_rbac.infrastructure.persistence.repositories.role_repo import RoleRepository
from scoped_rbac.infrastructure.persistence.repositories.user_repo import UserRepository
from scoped_rbac.infrastructure.persistence.repositories.user_role_repo import UserRoleRepository

__all__ = [
    "BaseRepository",
    "LocationRepository",
    "MenuItemRepository",
    "ProjectRepository",
    "RoleRepository",
    "UserRepository",
    "UserRoleRepository",
]
