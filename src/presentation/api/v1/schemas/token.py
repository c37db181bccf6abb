from pydantic import BaseModel, ConfigDict, Field


class TokenPayload(BaseModel):
    """JWT token payload schema with tenant and user information"""

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "sub": "user_123",
                "tenant_id": "tenant_abc",
                "exp": 1234567890,
            }
        },
    )

    sub: str = Field(..., description="User ID (subject)")
    tenant_id: str = Field(..., description="Tenant ID the user belongs to")
    exp: int = Field(..., description="Token expiration timestamp")
