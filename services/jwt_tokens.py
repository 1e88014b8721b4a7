"""Signing and verification of access and refresh JWTs.

Both kinds share one claim layout (the one Flask-JWT-Extended reads, so an
access token signed here passes ``@jwt_required()``) but each kind has its
own secret and lifetime. A token signed for one kind never verifies as the
other.
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Mapping

import jwt

ALGORITHM = "HS256"


class TokenKind(str, enum.Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class TokenInvalid(Exception):
    """The token is malformed, badly signed, expired or of the wrong kind."""


class TokenExpired(TokenInvalid):
    """The token was well formed and correctly signed but has expired."""


@dataclass(frozen=True)
class TokenSettings:
    secret: str
    ttl: timedelta


class JwtIssuer:
    """Sign and verify JWTs for each ``TokenKind``."""

    def __init__(self, settings: Mapping[TokenKind, TokenSettings]):
        missing = [kind.value for kind in TokenKind if kind not in settings]
        if missing:
            raise ValueError(f"Missing token settings for: {', '.join(missing)}")
        self._settings = dict(settings)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "JwtIssuer":
        return cls(
            {
                TokenKind.ACCESS: TokenSettings(
                    secret=config["ACCESS_TOKEN_SECRET"],
                    ttl=config["ACCESS_TOKEN_EXPIRY"],
                ),
                TokenKind.REFRESH: TokenSettings(
                    secret=config["REFRESH_TOKEN_SECRET"],
                    ttl=config["REFRESH_TOKEN_EXPIRY"],
                ),
            }
        )

    def sign(self, kind: TokenKind, claims: Mapping[str, Any]) -> str:
        """Return a signed token; ``claims`` must carry the subject as ``sub``."""

        if claims.get("sub") is None:
            raise ValueError("Token claims require a subject.")
        settings = self._settings[kind]
        now = datetime.now(UTC)
        payload = dict(claims)
        payload.update(
            {
                "sub": str(claims["sub"]),
                "type": kind.value,
                "fresh": False,
                "jti": str(uuid.uuid4()),
                "iat": now,
                "nbf": now,
                "exp": now + settings.ttl,
            }
        )
        return jwt.encode(payload, settings.secret, algorithm=ALGORITHM)

    def verify(self, kind: TokenKind, token: str | None) -> dict[str, Any]:
        """Return the decoded claims or raise ``TokenInvalid``/``TokenExpired``."""

        if not token:
            raise TokenInvalid("Token is missing.")
        settings = self._settings[kind]
        try:
            claims = jwt.decode(
                token,
                settings.secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "sub", "type"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired("Token has expired.") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid(str(exc)) from exc

        if claims.get("type") != kind.value:
            raise TokenInvalid(f"Expected a {kind.value} token.")
        return claims


def access_claims(user) -> dict[str, Any]:
    return {"sub": str(user.id), "email": user.email, "username": user.username}


def refresh_claims(user) -> dict[str, Any]:
    return {"sub": str(user.id)}
