"""Infrastructure layer for persistence, caching and security primitives.

This package provides the concrete integrations the domain services rely on:

- **database**: Async PostgreSQL with SQLAlchemy 2.0, repositories, migrations
- **cache**: Redis client lifecycle, task list cache and rate limiter
- **security**: bcrypt password hashing and JWT bearer tokens

Nothing here knows about HTTP; the API layer maps failures raised here onto
responses.
"""
