from scoped_rbac.application.interfaces.repositories import (
    ILocationRepository, IProjectRepository, IRoleRepository, IUserRepository,
    IUserRoleRepository)

__all__ = [
    "ILocationRepository",
    "IProjectRepository",
    "IRoleRepository",
    "IUserRepository",
    "IUserRoleRepository",
]
