"""bcrypt password hashing.

Hashing and verification are CPU-bound and intentionally slow, so the async
helpers run them in a worker thread to keep the event loop responsive.
"""

import asyncio

import bcrypt

from src.core.constants import BCRYPT_MAX_PASSWORD_BYTES


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


def hash_password_sync(password: str, cost: int) -> str:
    """Hash ``password`` with a fresh salt at the given work factor."""
    hashed = bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=cost))
    return hashed.decode("ascii")


def verify_password_sync(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored hash in constant time."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("ascii"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


async def hash_password(password: str, cost: int) -> str:
    return await asyncio.to_thread(hash_password_sync, password, cost)


async def verify_password(password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(verify_password_sync, password, password_hash)
