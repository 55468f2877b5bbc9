"""Structured logging built on Loguru.

Two output formats are supported, selected by ``LOG_FORMAT``:

- **text**: Human-readable console lines with inline context (development)
- **json**: One JSON object per line for log aggregation

Request-scoped context (correlation id, request id, method, path) is bound
with ``logger.contextualize`` by the middleware and appears in every line
emitted while the request is being handled. Standard library loggers
(uvicorn, SQLAlchemy, alembic) are intercepted and routed through Loguru.
Fields whose names look secret are redacted in both formats.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING, Any, Final, cast

from loguru import logger

from src.core.constants import REDACTED
from src.core.error_context import is_sensitive_field, sanitize_dict

if TYPE_CHECKING:
    from src.core.config import Settings


class _LoggingState:
    """Simple state holder to track if logging has been configured."""

    def __init__(self) -> None:
        self.configured = False


_state = _LoggingState()

DEFAULT_LOG_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)
CORRELATION_ID_DISPLAY_LENGTH: Final[int] = 8
MAX_FIELD_VALUE_LENGTH: Final[int] = 100

PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "correlation_id",
    "request_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
    "client_ip",
    "user_agent",
)


def _escape(value: object) -> str:
    """Escape braces so loguru does not treat values as format fields."""
    return str(value).replace("{", "{{").replace("}", "}}")


def _format_priority_field(field: str, value: object) -> str:
    """Format a priority field for display."""
    if field == "correlation_id" and len(str(value)) > CORRELATION_ID_DISPLAY_LENGTH:
        value = str(value)[:CORRELATION_ID_DISPLAY_LENGTH]
    elif field == "duration_ms":
        value = f"{value}ms"
    elif field == "status_code":
        status_str = str(value)
        if status_str.startswith("2"):
            value = f"<green>{value}</green>"
        elif status_str.startswith("3"):
            value = f"<yellow>{value}</yellow>"
        elif status_str.startswith("4"):
            value = f"<red>{value}</red>"
        elif status_str.startswith("5"):
            value = f"<red><bold>{value}</bold></red>"
        return str(value)
    return _escape(value)


def _format_extra_field(key: str, value: object) -> str:
    """Format an extra field as ``key=value``, redacting secrets."""
    if is_sensitive_field(key):
        str_value = REDACTED
    else:
        str_value = str(value)
        if len(str_value) > MAX_FIELD_VALUE_LENGTH:
            str_value = str_value[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    return f"{_escape(key)}={_escape(str_value)}"


def _format_context_fields(extra: dict[str, Any]) -> list[str]:
    """Format all context fields from extra data, priority fields first."""
    context_parts = [
        f"<yellow>{_format_priority_field(field, extra[field])}</yellow>"
        for field in PRIORITY_FIELDS
        if extra.get(field) is not None
    ]
    context_parts.extend(
        f"<dim>{_format_extra_field(key, value)}</dim>"
        for key, value in extra.items()
        if key not in PRIORITY_FIELDS and not key.startswith("_") and value is not None
    )
    return context_parts


def format_console_with_context(record: dict[str, Any]) -> str:
    """Format log record for console with all context fields visible.

    Args:
        record: Loguru record to format.

    Returns:
        str: Loguru format template for this record.
    """
    try:
        parts = [
            f"<green>{record['time'].strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]}</green>",
            f"<level>{record['level'].name: <8}</level>",
            f"<cyan>{record['name']}:{record['function']}:{record['line']}</cyan>",
        ]

        context_parts = _format_context_fields(record.get("extra", {}))
        if context_parts:
            parts.append(" ".join(f"[{part}]" for part in context_parts))

        parts.append(_escape(record.get("message", "")))

        if record.get("exception"):
            parts.append("\n{exception}")

        return " | ".join(parts) + "\n"
    except (AttributeError, TypeError, ValueError, KeyError):
        return DEFAULT_LOG_FORMAT + "\n"


def serialize_for_json(record: dict[str, Any]) -> str:
    """Format log record as one JSON object.

    Args:
        record: Loguru record to format.

    Returns:
        str: JSON-formatted log entry with newline.
    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    if extra := record.get("extra", {}):
        filtered_extra = {k: v for k, v in extra.items() if not k.startswith("_")}
        log_entry.update(sanitize_dict(filtered_extra))

    if exc := record.get("exception"):
        log_entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return json.dumps(log_entry, default=str) + "\n"


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Forward log record to Loguru.

        Args:
            record: Standard library LogRecord to forward.
        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        try:
            frame, depth = sys._getframe(6), 6
            while frame and frame.f_code.co_filename == logging.__file__:
                if frame.f_back is None:
                    break
                frame = frame.f_back
                depth += 1
        except ValueError:
            # _getframe can fail if there aren't enough frames
            depth = 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _json_sink(message: object) -> None:
    """Write a structured log line to stdout."""
    record = cast("Any", message).record
    sys.stdout.write(serialize_for_json(record))
    sys.stdout.flush()


def setup_logging(settings: Settings) -> None:
    """Configure Loguru and route standard library logging through it.

    Args:
        settings: Application settings containing log configuration.

    Note:
        This function ensures it's only called once using module state.
    """
    if _state.configured:
        return

    logger.remove()

    log_config = settings.log_config
    formatter_type = log_config.formatter_type

    if formatter_type == "console":
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=log_config.level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )
    else:
        logger.add(
            _json_sink,
            level=log_config.level,
            enqueue=True,
            diagnose=False,
            backtrace=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False

    # The access log middleware already records every request
    logging.getLogger("uvicorn.access").disabled = True

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        log_level=log_config.level,
    )

    _state.configured = True
