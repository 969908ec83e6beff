from typing import Any

from sqlalchemy import JSON, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scoped_rbac.domain.enums import CrudAction
from scoped_rbac.domain.value_objects import PermissionGrid, RoleScope
from scoped_rbac.infrastructure.persistence.database import Base
from scoped_rbac.infrastructure.persistence.models.mixins import (
    ActorAuditMixin, CuidMixin)


def _default_scope() -> dict[str, Any]:
    return RoleScope().to_dict()


class Role(CuidMixin, ActorAuditMixin, Base):
    """
    Named bundle of CRUD permissions with a declared scope.

    Inherits from:
        - CuidMixin: CUID primary key
        - ActorAuditMixin: timestamps plus created_by / updated_by

    ``permissions`` holds the grid document, e.g.
    ``{"documents": ["read"], "settings": {"roles": ["read"]}}``;
    ``scope`` holds ``{"locations": [...], "projects": [...],
    "all_locations": bool, "all_projects": bool}``.
    """

    __tablename__ = "role"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    permissions: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    scope: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=_default_scope
    )
    is_system: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )  # System roles cannot be deleted
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @property
    def grid(self) -> PermissionGrid:
        return PermissionGrid.from_dict(self.permissions)

    @property
    def role_scope(self) -> RoleScope:
        return RoleScope.from_dict(self.scope)

    def has_permission(self, module_path: str, action: CrudAction | str) -> bool:
        return self.grid.allows(module_path, action)

    def applies_to_location(self, location_id: str) -> bool:
        return self.role_scope.applies_to_location(location_id)

    def applies_to_project(self, project_id: str) -> bool:
        return self.role_scope.applies_to_project(project_id)
