"""
Pydantic schemas for authentication endpoints.
"""
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from app.schemas.common import EnvelopeResponse


class UserLogin(BaseModel):
    """Schema for user login request."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    department_id: Optional[int] = None

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class TokenResponse(EnvelopeResponse):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
