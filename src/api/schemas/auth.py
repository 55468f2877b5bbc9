"""Request bodies of the authentication endpoints."""

from pydantic import BaseModel, EmailStr, Field

from src.core.constants import BCRYPT_MAX_PASSWORD_BYTES


class RegisterRequest(BaseModel):
    """Body of ``POST /api/v1/auth/register``."""

    username: str = Field(..., min_length=3, max_length=100, examples=["alice"])
    email: EmailStr = Field(..., max_length=255, examples=["alice@example.com"])
    # bcrypt only reads the first 72 bytes of its input
    password: str = Field(
        ..., min_length=6, max_length=BCRYPT_MAX_PASSWORD_BYTES, examples=["pw123456"]
    )


class LoginRequest(BaseModel):
    """Body of ``POST /api/v1/auth/login``."""

    email: EmailStr = Field(..., examples=["alice@example.com"])
    password: str = Field(..., min_length=1, examples=["pw123456"])
