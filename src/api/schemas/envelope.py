"""Response envelope shared by every API endpoint.

Clients branch on ``status`` first, then read either ``data`` or the
``error`` code. ``errors`` carries per-field messages for validation
failures and is omitted otherwise.
"""

from pydantic import BaseModel, Field

from src.core.types import FieldErrors


class SuccessResponse[T](BaseModel):
    """Envelope for successful responses."""

    status: bool = Field(default=True, description="Always true on success")
    status_code: int = Field(..., description="HTTP status code", examples=[200])
    message: str = Field(
        ..., description="Human-readable outcome", examples=["Success get task"]
    )
    data: T | None = Field(default=None, description="Response payload")


class ErrorResponse(BaseModel):
    """Envelope for error responses."""

    status: bool = Field(default=False, description="Always false on error")
    status_code: int = Field(..., description="HTTP status code", examples=[404])
    error: str = Field(
        ...,
        description="Machine-readable error code",
        examples=["not_found", "validation_error", "unauthorized"],
    )
    message: str = Field(
        ..., description="Human-readable error message", examples=["task not found"]
    )
    errors: FieldErrors | None = Field(
        default=None,
        description="Field name to message map for validation failures",
        examples=[{"title": "This field is required"}],
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": False,
                    "status_code": 400,
                    "error": "validation_error",
                    "message": "Validation failed",
                    "errors": {
                        "email": "This field must be a valid email",
                        "password": "This field must be at least 6 characters",
                    },
                },
                {
                    "status": False,
                    "status_code": 401,
                    "error": "unauthorized",
                    "message": "Invalid or expired token",
                },
            ]
        }
    }
