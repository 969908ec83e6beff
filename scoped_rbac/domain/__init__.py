"""
Domain layer - Enterprise Business Rules.

Permission grids, role scopes, assignment validity and the domain exceptions.
It has no dependencies on other layers.
"""

from scoped_rbac.domain.entities import AssignmentWindow
from scoped_rbac.domain.enums import CrudAction
from scoped_rbac.domain.exceptions import (AuthenticationException,
                                           ConflictException,
                                           NotFoundException,
                                           PermissionDeniedError,
                                           RbacException,
                                           ReferentialIntegrityException,
                                           ValidationException)
from scoped_rbac.domain.value_objects import (PermissionGrid, RoleScope,
                                              applies_to_location,
                                              applies_to_project)

__all__ = [
    # Entities
    "AssignmentWindow",
    # Value Objects
    "PermissionGrid",
    "RoleScope",
    "applies_to_location",
    "applies_to_project",
    # Enums
    "CrudAction",
    # Exceptions
    "RbacException",
    "ValidationException",
    "NotFoundException",
    "ConflictException",
    "ReferentialIntegrityException",
    "AuthenticationException",
    "PermissionDeniedError",
]
