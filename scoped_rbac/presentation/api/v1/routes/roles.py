from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from scoped_rbac.application.services.role_registry import RoleRegistry
from scoped_rbac.domain.exceptions import RbacException
from scoped_rbac.presentation.api.dependencies import (
    get_registry,
    get_registry_transactional,
    require_permission,
)
from scoped_rbac.presentation.api.errors import to_http_exception
from scoped_rbac.presentation.api.v1.schemas.role import RoleCreate, RoleResponse, RoleUpdate
from scoped_rbac.presentation.api.v1.schemas.token import TokenPayload

router = APIRouter()


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    registry: Annotated[RoleRegistry, Depends(get_registry)],
    _: Annotated[TokenPayload, Depends(require_permission("settings.roles", "read"))],
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
    include_inactive: bool = False,
):
    """List roles (requires 'settings.roles:read')"""
    roles = await registry.list_roles(skip, limit, include_inactive)
    return [RoleResponse.model_validate(role) for role in roles]


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: str,
    registry: Annotated[RoleRegistry, Depends(get_registry)],
    _: Annotated[TokenPayload, Depends(require_permission("settings.roles", "read"))],
):
    """Get a role by ID (requires 'settings.roles:read')"""
    try:
        role = await registry.get_role(role_id)
    except RbacException as e:
        raise to_http_exception(e) from e
    return RoleResponse.model_validate(role)


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    data: RoleCreate,
    registry: Annotated[RoleRegistry, Depends(get_registry_transactional)],
    current_user: Annotated[TokenPayload, Depends(require_permission("settings.roles", "create"))],
):
    """Create a role (requires 'settings.roles:create')"""
    try:
        role = await registry.create_role(
            data.name,
            data.description,
            data.permissions,
            data.scope.model_dump(),
            sort_order=data.sort_order,
            created_by=current_user.sub,
        )
    except RbacException as e:
        raise to_http_exception(e) from e
    return RoleResponse.model_validate(role)


@router.patch("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: str,
    data: RoleUpdate,
    registry: Annotated[RoleRegistry, Depends(get_registry_transactional)],
    current_user: Annotated[TokenPayload, Depends(require_permission("settings.roles", "update"))],
):
    """Update a role (requires 'settings.roles:update')"""
    try:
        role = await registry.update_role(
            role_id,
            name=data.name,
            description=data.description,
            permissions=data.permissions,
            scope=data.scope.model_dump() if data.scope else None,
            is_active=data.is_active,
            sort_order=data.sort_order,
            updated_by=current_user.sub,
        )
    except RbacException as e:
        raise to_http_exception(e) from e
    return RoleResponse.model_validate(role)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: str,
    registry: Annotated[RoleRegistry, Depends(get_registry_transactional)],
    _: Annotated[TokenPayload, Depends(require_permission("settings.roles", "delete"))],
):
    """Delete a non-system, unreferenced role (requires 'settings.roles:delete')"""
    try:
        await registry.delete_role(role_id)
    except RbacException as e:
        raise to_http_exception(e) from e
