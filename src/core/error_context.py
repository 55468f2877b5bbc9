"""Sensitive data sanitization for secure error logging.

Prevents passwords, hashes, tokens and similar values from reaching log
output. Field names are matched against a default pattern and against the
configured ``LOG_SENSITIVE_FIELDS`` list; matching values are replaced with
``[REDACTED]``. Sanitization is applied to logged copies only, the original
data is never modified.
"""

from __future__ import annotations

import re
from functools import lru_cache
from re import Pattern
from typing import Any, Final

from src.core.config import get_settings
from src.core.constants import REDACTED

# Type alias for values we can sanitize
SanitizableValue = (
    str | int | float | bool | None | dict[str, Any] | list[Any] | tuple[Any, ...]
)

DEFAULT_SENSITIVE_PATTERN: Final[Pattern[str]] = re.compile(
    r"(password|passwd|pwd|secret|token|api[_-]?key|authorization|"
    r"credential|private[_-]?key|hash|cookie|connection[_-]?string)",
    re.IGNORECASE,
)

# Maximum depth for nested structure sanitization
MAX_DEPTH: Final[int] = 10


@lru_cache(maxsize=1)
def _get_sensitive_fields() -> list[str]:
    """Get the configured sensitive fields from settings."""
    settings = get_settings()
    return settings.log_config.sensitive_fields


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data.

    Args:
        field_name: The field name to check.

    Returns:
        bool: True if the field appears to contain sensitive data.
    """
    if DEFAULT_SENSITIVE_PATTERN.search(field_name):
        return True

    field_lower = field_name.lower()
    return any(
        sensitive_field.lower() in field_lower
        for sensitive_field in _get_sensitive_fields()
    )


def sanitize_value(
    value: SanitizableValue, field_name: str = "", depth: int = 0
) -> SanitizableValue:
    """Sanitize a value if it appears to be sensitive.

    Nested dicts, lists and tuples are walked recursively up to MAX_DEPTH.

    Args:
        value: The value to potentially sanitize.
        field_name: The field name for context.
        depth: Current recursion depth.

    Returns:
        SanitizableValue: Sanitized value or original if not sensitive.
    """
    if depth > MAX_DEPTH:
        return REDACTED

    if field_name and is_sensitive_field(field_name):
        return REDACTED

    if isinstance(value, dict):
        return {k: sanitize_value(v, k, depth + 1) for k, v in value.items()}

    if isinstance(value, list):
        return [sanitize_value(item, "", depth + 1) for item in value]

    if isinstance(value, tuple):
        return tuple(sanitize_value(item, "", depth + 1) for item in value)

    return value


def sanitize_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with sensitive fields redacted."""
    return {key: sanitize_value(value, key) for key, value in data.items()}


def sanitize_error_context(
    error: Exception, context: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Create sanitized error context for logging.

    Args:
        error: The exception to create context for.
        context: Additional context to include (will be sanitized).

    Returns:
        dict[str, Any]: Sanitized error context safe for logging.
    """
    error_context: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if context:
        error_context.update(sanitize_dict(context))

    # Stack traces are logged through loguru's exception support instead
    skipped = {"stack_trace", "cause"}
    error_attrs = {
        k: v
        for k, v in getattr(error, "__dict__", {}).items()
        if not k.startswith("_") and k not in skipped
    }
    if error_attrs:
        error_context["error_attributes"] = sanitize_dict(error_attrs)

    return error_context


def sanitize_sql_params(params: object) -> object:
    """Sanitize SQL query parameters for safe logging.

    Named parameters are sanitized by key; positional parameters cannot be
    classified and are returned unchanged; any other shape is redacted.
    """
    if params is None:
        return None

    if isinstance(params, dict):
        return sanitize_dict(params)
    if isinstance(params, (list, tuple)):
        return params

    return REDACTED
