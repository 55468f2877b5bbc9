"""HTTP routers mounted under ``/api/v1``."""

from src.api.routers import auth, tasks

__all__ = ["auth", "tasks"]
