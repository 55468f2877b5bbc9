"""Core infrastructure package for shared application functionality.

This package provides the foundational components used across all layers
of the Taskhub application:

- **config**: Centralized configuration management with environment support
- **context**: Request context (correlation ID, authenticated user)
- **exceptions**: Structured exception hierarchy with error codes
- **error_context**: Sensitive data sanitization for safe logging
- **logging**: Structured logging with loguru
- **observability**: Distributed tracing with OpenTelemetry
- **types**: Type aliases for better code clarity
"""
