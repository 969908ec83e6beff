from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserRoleAssign(BaseModel):
    """Schema for assigning a role to a user"""

    role_id: str = Field(..., description="Role ID to assign")
    location_id: str = Field(..., description="Location the assignment is bound to")
    project_id: str | None = Field(None, description="Optional project within the location")
    start_date: datetime | None = Field(None, description="Defaults to now")
    end_date: datetime | None = Field(None, description="Optional expiration time")
    notes: str | None = Field(None, max_length=500)


class UserRoleResponse(BaseModel):
    """Schema for user-role assignment response"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    role_id: str
    location_id: str
    project_id: str | None
    start_date: datetime | None
    end_date: datetime | None
    is_active: bool
    notes: str | None
    assigned_by: str
    revoked_at: datetime | None
    revoked_by: str | None


class PermissionCheckResponse(BaseModel):
    """Outcome of a single permission check"""

    user_id: str
    module: str
    action: str
    location_id: str
    project_id: str | None
    allowed: bool
