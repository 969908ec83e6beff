from scoped_rbac.application.services.assignment_ledger import AssignmentLedger
from scoped_rbac.application.services.authorization_service import AuthorizationService
from scoped_rbac.application.services.rbac_initialization_service import RbacInitializationService
from scoped_rbac.application.services.role_registry import RoleRegistry

__all__ = [
    "AssignmentLedger",
    "AuthorizationService",
    "RbacInitializationService",
    "RoleRegistry",
]
