"""Request context management utilities for correlation IDs and request tracking."""

import uuid
from contextvars import ContextVar

# Context variables for storing request-scoped values across async boundaries
_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_user_id_var: ContextVar[uuid.UUID | None] = ContextVar("user_id", default=None)


class RequestContext:
    """Manages request context using contextvars for async-safe storage.

    This class provides async-safe storage for request-scoped data: the
    correlation ID set by the request context middleware and the
    authenticated user id set by the auth dependency.
    """

    @staticmethod
    def set_correlation_id(correlation_id: str) -> None:
        """Set the correlation ID for the current context.

        Args:
            correlation_id: The correlation ID to store in the context.
        """
        _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        """Get the correlation ID from the current context.

        Returns:
            str | None: The correlation ID if set, None otherwise.
        """
        return _correlation_id_var.get()

    @staticmethod
    def set_user_id(user_id: uuid.UUID) -> None:
        """Set the authenticated user id for the current context."""
        _user_id_var.set(user_id)

    @staticmethod
    def get_user_id() -> uuid.UUID | None:
        """Get the authenticated user id, if the request carried a valid token."""
        return _user_id_var.get()

    @staticmethod
    def clear() -> None:
        """Clear all context variables.

        This should typically be called at the end of a request to ensure
        clean state for the next request.
        """
        _correlation_id_var.set(None)
        _user_id_var.set(None)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracking.

    Returns:
        str: A string representation of a UUID4.
    """
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a unique request ID for individual request tracking.

    Request IDs are unique per request, while correlation IDs can span
    multiple services in a distributed system.

    Returns:
        str: A prefixed UUID4 string in format 'req-<uuid4>'.
    """
    return f"req-{uuid.uuid4()}"
