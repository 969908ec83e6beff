"""Domain value objects."""

from scoped_rbac.domain.value_objects.permission_grid import (Nested,
                                                              PermissionGrid,
                                                              PermissionNode,
                                                              Terminal)
from scoped_rbac.domain.value_objects.scope import (RoleScope,
                                                    applies_to_location,
                                                    applies_to_project)

__all__ = [
    "PermissionGrid",
    "PermissionNode",
    "Terminal",
    "Nested",
    "RoleScope",
    "applies_to_location",
    "applies_to_project",
]
