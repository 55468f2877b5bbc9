"""HTTP API layer with FastAPI for the Taskhub service.

Key components:
- **main**: Application factory and lifecycle management
- **middleware**: Cross-cutting concerns for all requests
  - Request context with correlation ID tracking
  - Access logging and recovery from unhandled exceptions
  - CORS and security headers
  - Per-IP rate limiting
  - Centralized error handling rendering the error envelope
- **dependencies**: Bearer authentication and service wiring
- **routers**: ``/api/v1/auth`` and ``/api/v1/tasks`` endpoints
- **schemas**: Request bodies and the response envelope
- **utils**: orjson responses and request metadata helpers
"""
