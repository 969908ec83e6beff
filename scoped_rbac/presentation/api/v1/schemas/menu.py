from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from scoped_rbac.domain.enums import CrudAction


class MenuPermissionSchema(BaseModel):
    """One permission requirement, e.g. {'module': 'settings.roles', 'action': 'read'}"""

    module: str = Field(..., min_length=1)
    action: CrudAction


class MenuDisplaySchema(BaseModel):
    """Display flags shared by create and update"""

    icon: str | None = Field(None, max_length=50)
    component: str | None = Field(None, max_length=100)
    auth_required: bool | None = None
    guest_only: bool | None = None
    enabled: bool | None = None
    show_in_sidebar: bool | None = None
    show_in_topbar: bool | None = None
    show_in_user_menu: bool | None = None
    divider: bool | None = None
    class_name: str | None = Field(None, max_length=100)
    sort_order: int | None = None


class MenuItemCreate(MenuDisplaySchema):
    """Schema for creating a menu item"""

    title: str = Field(..., min_length=1, max_length=50)
    path: str | None = Field(None, max_length=200)
    parent_id: str | None = None
    roles: list[str] = Field(default_factory=list, description="Role IDs that may see the item")
    permissions: list[MenuPermissionSchema] = Field(default_factory=list)


class MenuItemUpdate(MenuDisplaySchema):
    """Schema for updating a menu item; omitted fields are kept"""

    title: str | None = Field(None, min_length=1, max_length=50)
    path: str | None = Field(None, max_length=200)
    parent_id: str | None = None
    move_to_root: bool = False
    roles: list[str] | None = None
    permissions: list[MenuPermissionSchema] | None = None
    is_active: bool | None = None


class MenuItemResponse(BaseModel):
    """Stored menu item, access requirements included"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    path: str | None
    icon: str | None
    component: str | None
    parent_id: str | None
    roles: list[str]
    permissions: list[MenuPermissionSchema]
    auth_required: bool
    guest_only: bool
    enabled: bool
    show_in_sidebar: bool
    show_in_topbar: bool
    show_in_user_menu: bool
    divider: bool
    class_name: str | None
    sort_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class MenuNodeResponse(BaseModel):
    """Entry of the current user's menu tree"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    path: str | None
    icon: str | None
    component: str | None
    enabled: bool
    show_in_sidebar: bool
    show_in_topbar: bool
    show_in_user_menu: bool
    divider: bool
    class_name: str | None
    sort_order: int
    children: list["MenuNodeResponse"] = Field(default_factory=list)
