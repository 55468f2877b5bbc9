"""Helpers for reading client metadata from incoming requests."""

from starlette.requests import Request

from src.api.constants import MAX_USER_AGENT_LENGTH


def get_client_ip(request: Request, *, trust_proxy_headers: bool) -> str:
    """Extract the client IP, optionally honouring proxy headers.

    Args:
        request: The incoming request.
        trust_proxy_headers: Whether ``X-Forwarded-For`` and ``X-Real-IP``
            may be trusted. Only true behind a known proxy (production).

    Returns:
        str: The client IP address, or ``"unknown"``.
    """
    if trust_proxy_headers:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            # First hop is the original client
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip.strip()

    if request.client:
        return request.client.host
    return "unknown"


def get_user_agent(request: Request) -> str:
    """Return the user agent, truncated to keep log lines bounded."""
    ua = request.headers.get("user-agent", "")
    return ua[:MAX_USER_AGENT_LENGTH] if ua else "unknown"
