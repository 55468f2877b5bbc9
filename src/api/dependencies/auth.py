"""Bearer token authentication for protected routes.

The dependency reads ``Authorization: Bearer <token>``, validates the token
and returns the user id it carries. All failures are 401 with a fixed
message; the precise token failure reason is only logged.
"""

import uuid
from typing import Annotated

from fastapi import Depends, Header
from loguru import logger

from src.api.dependencies.services import get_token_manager
from src.core.context import RequestContext
from src.core.exceptions import UnauthorizedError
from src.infrastructure.security.tokens import TokenError, TokenManager

MISSING_HEADER_MESSAGE = "Authorization header is required"
MALFORMED_HEADER_MESSAGE = (
    "Authorization header must be in the format: Bearer <token>"
)
INVALID_TOKEN_MESSAGE = "Invalid or expired token"
INVALID_USER_ID_MESSAGE = "Invalid user ID in token"

BEARER_SCHEME = "Bearer"


async def get_current_user_id(
    tokens: Annotated[TokenManager, Depends(get_token_manager)],
    authorization: Annotated[str | None, Header()] = None,
) -> uuid.UUID:
    """Authenticate the request and return the caller's user id.

    Raises:
        UnauthorizedError: If the header is missing or malformed, or the
            token is invalid, expired or carries a non-UUID subject.
    """
    if not authorization:
        raise UnauthorizedError(MISSING_HEADER_MESSAGE)

    scheme, _, token = authorization.partition(" ")
    if scheme != BEARER_SCHEME or not token:
        raise UnauthorizedError(MALFORMED_HEADER_MESSAGE)

    try:
        payload = tokens.validate(token)
    except TokenError as e:
        raise UnauthorizedError(
            INVALID_TOKEN_MESSAGE, context={"reason": e.reason.value}, cause=e
        ) from e

    try:
        user_id = uuid.UUID(payload.auth_id)
    except ValueError as e:
        raise UnauthorizedError(
            INVALID_USER_ID_MESSAGE, context={"reason": "invalid_subject"}, cause=e
        ) from e

    RequestContext.set_user_id(user_id)
    logger.debug("Authenticated request", user_id=str(user_id))
    return user_id


CurrentUserId = Annotated[uuid.UUID, Depends(get_current_user_id)]
