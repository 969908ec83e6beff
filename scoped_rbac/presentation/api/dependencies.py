from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from scoped_rbac.application.services.assignment_ledger import AssignmentLedger
from scoped_rbac.application.services.authorization_service import AuthorizationService
from scoped_rbac.application.services.menu_service import MenuService
from scoped_rbac.application.services.role_registry import RoleRegistry
from scoped_rbac.domain.enums import CrudAction
from scoped_rbac.domain.exceptions import AuthenticationException, PermissionDeniedError
from scoped_rbac.infrastructure.config.settings import get_settings
from scoped_rbac.infrastructure.persistence.database import get_db, get_db_transactional
from scoped_rbac.infrastructure.persistence.repositories import (
    LocationRepository,
    MenuItemRepository,
    ProjectRepository,
    RoleRepository,
    UserRepository,
    UserRoleRepository,
)
from scoped_rbac.infrastructure.security.jwt import verify_token
from scoped_rbac.presentation.api.errors import to_http_exception
from scoped_rbac.presentation.api.v1.schemas.token import TokenPayload

security = HTTPBearer()


@dataclass(frozen=True)
class RequestContext:
    """Location/project the current request operates in"""

    location_id: str
    project_id: str | None = None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> TokenPayload:
    """
    Validate JWT token and return authenticated user payload.
    Token must contain the 'sub' (user_id) claim.
    """
    try:
        payload = verify_token(credentials.credentials)
        return TokenPayload(**payload)
    except ValueError as e:
        # pydantic.ValidationError is a ValueError too
        raise to_http_exception(
            AuthenticationException(f"Invalid authentication credentials: {e}")
        ) from e


async def get_request_context(request: Request) -> RequestContext:
    """
    Location and optional project of the request, taken from the configured
    headers (X-Location-ID / X-Project-ID by default).
    """
    settings = get_settings()
    location_id = request.headers.get(settings.location_header_name)
    if not location_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing {settings.location_header_name} header",
        )
    project_id = request.headers.get(settings.project_header_name) or None
    return RequestContext(location_id=location_id, project_id=project_id)


def build_ledger(db: AsyncSession) -> AssignmentLedger:
    """Wire the assignment ledger with repositories bound to one session"""
    return AssignmentLedger(
        user_repo=UserRepository(db),
        role_repo=RoleRepository(db),
        location_repo=LocationRepository(db),
        project_repo=ProjectRepository(db),
        user_role_repo=UserRoleRepository(db),
    )


def build_registry(db: AsyncSession) -> RoleRegistry:
    return RoleRegistry(RoleRepository(db), UserRoleRepository(db))


def build_authz_service(db: AsyncSession) -> AuthorizationService:
    return AuthorizationService(build_ledger(db), build_registry(db))


def build_menu_service(db: AsyncSession) -> MenuService:
    ledger = build_ledger(db)
    return MenuService(
        MenuItemRepository(db),
        RoleRepository(db),
        ledger,
        AuthorizationService(ledger, build_registry(db)),
    )


async def get_ledger(db: AsyncSession = Depends(get_db)) -> AssignmentLedger:
    """Assignment ledger dependency"""
    return build_ledger(db)


async def get_registry(db: AsyncSession = Depends(get_db)) -> RoleRegistry:
    """Role registry dependency"""
    return build_registry(db)


# Transactional dependencies for write operations
async def get_ledger_transactional(
    db: AsyncSession = Depends(get_db_transactional),
) -> AssignmentLedger:
    """Assignment ledger dependency with transaction management"""
    return build_ledger(db)


async def get_registry_transactional(
    db: AsyncSession = Depends(get_db_transactional),
) -> RoleRegistry:
    """Role registry dependency with transaction management"""
    return build_registry(db)


async def get_authz_service(db: AsyncSession = Depends(get_db)) -> AuthorizationService:
    """Authorization service for manual permission checks"""
    return build_authz_service(db)


async def get_menu_service(db: AsyncSession = Depends(get_db)) -> MenuService:
    """Menu service dependency"""
    return build_menu_service(db)


async def get_menu_service_transactional(
    db: AsyncSession = Depends(get_db_transactional),
) -> MenuService:
    """Menu service dependency with transaction management"""
    return build_menu_service(db)


def require_permission(module_path: str, action: CrudAction | str):
    """
    Dependency factory for route-level permission checking in the request's
    location/project context.

    Usage:
        @router.post("/roles", dependencies=[Depends(require_permission("settings.roles", "create"))])
        async def create_role(...):
            ...
    """
    action_value = action.value if isinstance(action, CrudAction) else action

    async def permission_checker(
        user: TokenPayload = Depends(get_current_user),
        context: RequestContext = Depends(get_request_context),
        authz_service: AuthorizationService = Depends(get_authz_service),
    ) -> TokenPayload:
        allowed = await authz_service.has_permission(
            user_id=user.sub,
            module_path=module_path,
            action=action_value,
            location_id=context.location_id,
            project_id=context.project_id,
        )

        if not allowed:
            raise to_http_exception(
                PermissionDeniedError(
                    f"Permission denied: {module_path}:{action_value} required",
                    module=module_path,
                    action=action_value,
                )
            )

        return user

    return permission_checker
