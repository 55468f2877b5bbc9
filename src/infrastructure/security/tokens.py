"""Signed bearer tokens carrying the authenticated user id.

Tokens are HS256 JWTs with the payload ``{"auth_id": "<uuid>", "exp": <epoch>}``.
Validation failures are reported as ``TokenError`` with one of three reasons;
the API layer turns all of them into the same 401 and logs the reason.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum

import jwt

from src.core.config import JwtConfig


class TokenErrorReason(StrEnum):
    """Why a token was rejected."""

    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"
    MALFORMED = "malformed"


class TokenError(Exception):
    """Raised when a token cannot be accepted."""

    def __init__(self, reason: TokenErrorReason) -> None:
        super().__init__(reason.value)
        self.reason = reason


@dataclass(frozen=True, slots=True)
class TokenPayload:
    """Decoded claims of a valid token."""

    auth_id: str
    exp: int


class TokenManager:
    """Issue and verify bearer tokens.

    Args:
        secret: HMAC signing secret.
        algorithm: JWT signing algorithm.
        ttl_seconds: Lifetime of issued tokens.
    """

    def __init__(
        self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 86400
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(seconds=ttl_seconds)

    @classmethod
    def from_config(cls, config: JwtConfig) -> "TokenManager":
        return cls(config.secret, config.algorithm, config.ttl_seconds)

    def generate(self, user_id: object) -> str:
        """Issue a token for ``user_id`` that expires after the configured TTL."""
        expires_at = datetime.now(UTC) + self._ttl
        payload = {"auth_id": str(user_id), "exp": int(expires_at.timestamp())}
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def validate(self, token: str) -> TokenPayload:
        """Verify signature and expiry and return the claims.

        Raises:
            TokenError: With reason ``expired``, ``invalid_signature`` or
                ``malformed``.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "auth_id"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenError(TokenErrorReason.EXPIRED) from e
        except jwt.InvalidSignatureError as e:
            raise TokenError(TokenErrorReason.INVALID_SIGNATURE) from e
        except jwt.InvalidTokenError as e:
            raise TokenError(TokenErrorReason.MALFORMED) from e

        auth_id = claims.get("auth_id")
        if not isinstance(auth_id, str) or not auth_id.strip():
            raise TokenError(TokenErrorReason.MALFORMED)

        return TokenPayload(auth_id=auth_id, exp=int(claims["exp"]))
