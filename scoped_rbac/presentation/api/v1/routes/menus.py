from typing import Annotated

from fastapi import APIRouter, Depends, status

from scoped_rbac.application.services.menu_service import MenuService
from scoped_rbac.domain.exceptions import RbacException
from scoped_rbac.presentation.api.dependencies import (
    RequestContext,
    get_current_user,
    get_menu_service,
    get_menu_service_transactional,
    get_request_context,
    require_permission,
)
from scoped_rbac.presentation.api.errors import to_http_exception
from scoped_rbac.presentation.api.v1.schemas.menu import (
    MenuDisplaySchema,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    MenuNodeResponse,
)
from scoped_rbac.presentation.api.v1.schemas.token import TokenPayload

router = APIRouter()

_DISPLAY_FIELDS = set(MenuDisplaySchema.model_fields)


@router.get("/users/me/menu", response_model=list[MenuNodeResponse])
async def get_my_menu(
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    context: Annotated[RequestContext, Depends(get_request_context)],
    menu_service: Annotated[MenuService, Depends(get_menu_service)],
):
    """Menu tree the current user may see in the request's location/project"""
    nodes = await menu_service.get_menu_for_user(
        current_user.sub, context.location_id, context.project_id
    )
    return [MenuNodeResponse.model_validate(node) for node in nodes]


@router.get("/menus", response_model=list[MenuItemResponse])
async def list_menu_items(
    menu_service: Annotated[MenuService, Depends(get_menu_service)],
    _: Annotated[TokenPayload, Depends(require_permission("settings.menus", "read"))],
):
    """All active menu items, flat (requires 'settings.menus:read')"""
    items = await menu_service.list_items()
    return [MenuItemResponse.model_validate(item) for item in items]


@router.post("/menus", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
async def create_menu_item(
    data: MenuItemCreate,
    menu_service: Annotated[MenuService, Depends(get_menu_service_transactional)],
    current_user: Annotated[TokenPayload, Depends(require_permission("settings.menus", "create"))],
):
    """Create a menu item (requires 'settings.menus:create')"""
    display = data.model_dump(include=_DISPLAY_FIELDS, exclude_none=True)
    try:
        item = await menu_service.create_item(
            data.title,
            data.path,
            parent_id=data.parent_id,
            roles=data.roles,
            permissions=[p.model_dump(mode="json") for p in data.permissions],
            created_by=current_user.sub,
            **display,
        )
    except RbacException as e:
        raise to_http_exception(e) from e
    return MenuItemResponse.model_validate(item)


@router.patch("/menus/{item_id}", response_model=MenuItemResponse)
async def update_menu_item(
    item_id: str,
    data: MenuItemUpdate,
    menu_service: Annotated[MenuService, Depends(get_menu_service_transactional)],
    current_user: Annotated[TokenPayload, Depends(require_permission("settings.menus", "update"))],
):
    """Update a menu item (requires 'settings.menus:update')"""
    display = data.model_dump(include=_DISPLAY_FIELDS | {"is_active"}, exclude_none=True)
    permissions = None
    if data.permissions is not None:
        permissions = [p.model_dump(mode="json") for p in data.permissions]
    try:
        item = await menu_service.update_item(
            item_id,
            title=data.title,
            path=data.path,
            parent_id=data.parent_id,
            move_to_root=data.move_to_root,
            roles=data.roles,
            permissions=permissions,
            updated_by=current_user.sub,
            **display,
        )
    except RbacException as e:
        raise to_http_exception(e) from e
    return MenuItemResponse.model_validate(item)


@router.delete("/menus/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_menu_item(
    item_id: str,
    menu_service: Annotated[MenuService, Depends(get_menu_service_transactional)],
    _: Annotated[TokenPayload, Depends(require_permission("settings.menus", "delete"))],
):
    """Delete a menu item without children (requires 'settings.menus:delete')"""
    try:
        await menu_service.delete_item(item_id)
    except RbacException as e:
        raise to_http_exception(e) from e
