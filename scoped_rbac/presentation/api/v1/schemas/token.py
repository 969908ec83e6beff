from pydantic import BaseModel, ConfigDict, Field


class TokenPayload(BaseModel):
    """JWT token payload schema"""

    model_config = ConfigDict(
        json_schema_extra={"example": {"sub": "user_123", "exp": 1234567890}}
    )

    sub: str = Field(..., description="User ID (subject)")
    exp: int = Field(..., description="Token expiration timestamp")
