"""Domain enumerations for scoped RBAC."""

from enum import Enum


class CrudAction(str, Enum):
    """Actions a permission grid can grant on a module"""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [action.value for action in cls]
