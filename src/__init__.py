"""Taskhub - multi-tenant task management service.

Architecture Overview:
- **API Layer**: FastAPI routes, middleware and request/response schemas
- **Core Layer**: Configuration, logging, errors and other cross-cutting concerns
- **Domain Layer**: Users and tasks, with their repositories and services
- **Infrastructure Layer**: PostgreSQL, Redis, tokens and password hashing

Every task read and write is scoped by the authenticated user's id, list
queries are served through a short-lived Redis cache that each write
invalidates, and a fixed-window limiter guards the edge.
"""
