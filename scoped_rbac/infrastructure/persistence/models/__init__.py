from scoped_rbac.infrastructure.persistence.models.location import Location
from scoped_rbac.infrastructure.persistence.models.menu_item import MenuItem
# Mixins for model composition
from scoped_rbac.infrastructure.persistence.models.mixins import (
    ActorAuditMixin, CuidMixin, EntityModel, TimestampMixin)
from scoped_rbac.infrastructure.persistence.models.project import Project
from scoped_rbac.infrastructure.persistence.models.role import Role
from scoped_rbac.infrastructure.persistence.models.user import User
from scoped_rbac.infrastructure.persistence.models.user_role import UserRole

__all__ = [
    # Models
    "Location",
    "Project",
    "User",
    "Role",
    "UserRole",
    "MenuItem",
    # Mixins
    "CuidMixin",
    "TimestampMixin",
    "ActorAuditMixin",
    "EntityModel",
]
