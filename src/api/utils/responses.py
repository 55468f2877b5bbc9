"""JSON responses and the response envelope.

``ORJSONResponse`` is the application's default response class; it handles
datetime, UUID and Pydantic models natively. Every endpoint answers
with one of two envelope shapes; routes return ``SuccessResponse`` models and
error paths go through ``error_response``:

- success: ``{status: true, status_code, message, data}``
- error: ``{status: false, status_code, error, message, errors?}``
"""

from collections.abc import Mapping
from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.api.schemas.envelope import ErrorResponse
from src.core.types import FieldErrors


class ORJSONResponse(JSONResponse):
    """FastAPI Response class using orjson for JSON serialization.

    Attributes:
        media_type: The media type for the response.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401
        """Render the content as JSON using orjson.

        Args:
            content: The content to serialize to JSON.

        Returns:
            bytes: The JSON-encoded bytes.
        """
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json")

        return orjson.dumps(content)


def error_response(
    status_code: int,
    error: str,
    message: str,
    errors: FieldErrors | None = None,
    headers: Mapping[str, str] | None = None,
) -> ORJSONResponse:
    """Render the error envelope.

    Args:
        status_code: HTTP status of the response.
        error: Machine-readable error code.
        message: Client-facing message.
        errors: Optional field name to message map.
        headers: Extra response headers.

    Returns:
        ORJSONResponse: The envelope; ``errors`` is omitted when empty.
    """
    body = ErrorResponse(
        status_code=status_code,
        error=error,
        message=message,
        errors=errors or None,
    )
    return ORJSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=dict(headers) if headers else None,
    )
