"""
Domain exceptions for scoped RBAC.

This module defines domain-level exceptions that represent business rule violations
raised by the assignment ledger and the role registry. The permission evaluator
itself never raises them for a plain denial: absence of roles yields False.
"""

from typing import Any


class RbacException(Exception):
    """
    Base exception for all RBAC errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error code for API responses
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(RbacException):
    """Raised when input validation fails (e.g. a malformed permission grid)."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class NotFoundException(RbacException):
    """Raised when a referenced user, role, location, project or assignment is missing."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictException(RbacException):
    """Raised on duplicate names or assignments and on protected deletions."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, "CONFLICT", details)


class ReferentialIntegrityException(RbacException):
    """Raised when a project does not belong to the assignment's location."""

    def __init__(self, project_id: str, location_id: str):
        super().__init__(
            f"Project {project_id} does not belong to location {location_id}",
            "REFERENTIAL_INTEGRITY_ERROR",
            {"project_id": project_id, "location_id": location_id},
        )


class AuthenticationException(RbacException):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, "AUTHENTICATION_ERROR")


class PermissionDeniedError(RbacException):
    """Permission denied - user lacks required permission."""

    def __init__(
        self,
        message: str = "Permission denied",
        module: str | None = None,
        action: str | None = None,
    ):
        details: dict[str, Any] = {}
        if module:
            details["module"] = module
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)
