from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from scoped_rbac.application.services.assignment_ledger import AssignmentLedger
from scoped_rbac.application.services.authorization_service import AuthorizationService
from scoped_rbac.application.services.role_registry import RoleRegistry
from scoped_rbac.domain.enums import CrudAction
from scoped_rbac.domain.exceptions import RbacException
from scoped_rbac.presentation.api.dependencies import (
    RequestContext,
    get_authz_service,
    get_current_user,
    get_ledger,
    get_ledger_transactional,
    get_registry,
    get_request_context,
    require_permission,
)
from scoped_rbac.presentation.api.errors import to_http_exception
from scoped_rbac.presentation.api.v1.schemas.role import RoleResponse
from scoped_rbac.presentation.api.v1.schemas.token import TokenPayload
from scoped_rbac.presentation.api.v1.schemas.user_role import (
    PermissionCheckResponse,
    UserRoleAssign,
    UserRoleResponse,
)

router = APIRouter()


@router.get("/users/me/roles", response_model=list[RoleResponse])
async def get_my_roles(
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    context: Annotated[RequestContext, Depends(get_request_context)],
    registry: Annotated[RoleRegistry, Depends(get_registry)],
):
    """Roles the current user holds in the request's location/project"""
    roles = await registry.find_by_user_and_context(
        current_user.sub, context.location_id, context.project_id
    )
    return [RoleResponse.model_validate(role) for role in roles]


@router.get("/users/me/permissions", response_model=dict[str, list[str]])
async def get_my_permissions(
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    context: Annotated[RequestContext, Depends(get_request_context)],
    authz_service: Annotated[AuthorizationService, Depends(get_authz_service)],
):
    """Merged permission grid of the current user in the request's context"""
    return await authz_service.get_effective_permissions(
        current_user.sub, context.location_id, context.project_id
    )


@router.get("/users/{user_id}/roles", response_model=list[UserRoleResponse])
async def list_user_roles(
    user_id: str,
    ledger: Annotated[AssignmentLedger, Depends(get_ledger)],
    _: Annotated[TokenPayload, Depends(require_permission("settings.userRoles", "read"))],
    include_inactive: bool = False,
):
    """All role assignments of a user (requires 'settings.userRoles:read')"""
    try:
        assignments = await ledger.list_assignments(user_id, include_inactive)
    except RbacException as e:
        raise to_http_exception(e) from e
    return [UserRoleResponse.model_validate(a) for a in assignments]


@router.post(
    "/users/{user_id}/roles",
    response_model=UserRoleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def assign_role_to_user(
    user_id: str,
    data: UserRoleAssign,
    ledger: Annotated[AssignmentLedger, Depends(get_ledger_transactional)],
    current_user: Annotated[
        TokenPayload, Depends(require_permission("settings.userRoles", "create"))
    ],
):
    """Assign role to user (requires 'settings.userRoles:create')"""
    try:
        assignment = await ledger.assign_role(
            user_id,
            data.role_id,
            data.location_id,
            data.project_id,
            current_user.sub,
            start_date=data.start_date,
            end_date=data.end_date,
            notes=data.notes,
        )
    except RbacException as e:
        raise to_http_exception(e) from e
    return UserRoleResponse.model_validate(assignment)


@router.delete("/users/{user_id}/roles/{role_id}", response_model=UserRoleResponse)
async def revoke_role_from_user(
    user_id: str,
    role_id: str,
    ledger: Annotated[AssignmentLedger, Depends(get_ledger_transactional)],
    current_user: Annotated[
        TokenPayload, Depends(require_permission("settings.userRoles", "delete"))
    ],
    location_id: Annotated[str, Query(description="Location of the assignment")],
    project_id: Annotated[str | None, Query(description="Project of the assignment")] = None,
):
    """Revoke an active assignment; the record is kept (requires 'settings.userRoles:delete')"""
    try:
        assignment = await ledger.revoke_role(
            user_id, role_id, location_id, project_id, current_user.sub
        )
    except RbacException as e:
        raise to_http_exception(e) from e
    return UserRoleResponse.model_validate(assignment)


@router.get("/users/{user_id}/permissions/check", response_model=PermissionCheckResponse)
async def check_user_permission(
    user_id: str,
    module: str,
    action: CrudAction,
    location_id: str,
    authz_service: Annotated[AuthorizationService, Depends(get_authz_service)],
    _: Annotated[TokenPayload, Depends(require_permission("settings.userRoles", "read"))],
    project_id: str | None = None,
):
    """Evaluate a permission for any user (requires 'settings.userRoles:read')"""
    allowed = await authz_service.has_permission(
        user_id, module, action, location_id, project_id
    )
    return PermissionCheckResponse(
        user_id=user_id,
        module=module,
        action=action.value,
        location_id=location_id,
        project_id=project_id,
        allowed=allowed,
    )
