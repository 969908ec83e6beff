from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RoleScopeSchema(BaseModel):
    """Locations/projects a role applies to"""

    locations: list[str] = Field(default_factory=list)
    projects: list[str] = Field(default_factory=list)
    all_locations: bool = False
    all_projects: bool = False


# Role Schemas
class RoleBase(BaseModel):
    """Base role schema"""

    name: str = Field(..., min_length=1, max_length=50, description="Unique role name")
    description: str | None = Field(None, max_length=500, description="Role description")


class RoleCreate(RoleBase):
    """Schema for creating a role"""

    permissions: dict[str, Any] = Field(
        default_factory=dict,
        description="Permission grid, e.g. {'documents': ['read'], 'settings': {'roles': ['read']}}",
    )
    scope: RoleScopeSchema = Field(default_factory=RoleScopeSchema)
    sort_order: int = 0


class RoleUpdate(BaseModel):
    """Schema for updating a role"""

    name: str | None = Field(None, min_length=1, max_length=50)
    description: str | None = Field(None, max_length=500)
    permissions: dict[str, Any] | None = None
    scope: RoleScopeSchema | None = None
    is_active: bool | None = None
    sort_order: int | None = None


class RoleResponse(RoleBase):
    """Schema for role response"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    permissions: dict[str, Any]
    scope: RoleScopeSchema
    is_system: bool
    is_active: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime
