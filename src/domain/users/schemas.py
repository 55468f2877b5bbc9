"""Response shapes produced by the authentication service."""

import uuid

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    """Public view of a user; never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(..., description="User id")
    username: str = Field(..., description="Unique user name")
    email: str = Field(..., description="Unique email address")


class AuthResponse(BaseModel):
    """Result of a successful registration or login."""

    token: str = Field(..., description="Signed bearer token")
    user: UserResponse = Field(..., description="The authenticated user")
