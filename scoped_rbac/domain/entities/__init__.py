"""Domain entities."""

from scoped_rbac.domain.entities.assignment import AssignmentWindow

__all__ = ["AssignmentWindow"]
