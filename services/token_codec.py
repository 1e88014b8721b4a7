"""Single-use secret tokens for email verification and password reset.

The plain token travels to the user out of band (an emailed link) and is
never persisted; only its SHA-256 digest and an expiry are stored, so a copy
of the database alone does not yield usable tokens.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from utils.clock import utcnow

TOKEN_BYTES = 20
DEFAULT_TTL = timedelta(minutes=20)


@dataclass(frozen=True)
class IssuedToken:
    plain_token: str
    token_hash: str
    expires_at: datetime


def hash_token(plain_token: str) -> str:
    """Return the hex SHA-256 digest stored in place of ``plain_token``."""

    return hashlib.sha256(plain_token.encode("utf-8")).hexdigest()


class SecretTokenCodec:
    """Issue and check time-boxed secret tokens."""

    def __init__(self, ttl: timedelta = DEFAULT_TTL, clock=utcnow):
        self.ttl = ttl
        self._clock = clock

    def issue(self) -> IssuedToken:
        plain_token = secrets.token_hex(TOKEN_BYTES)
        return IssuedToken(
            plain_token=plain_token,
            token_hash=hash_token(plain_token),
            expires_at=self._clock() + self.ttl,
        )

    def verify(
        self,
        presented_plain_token: str | None,
        stored_hash: str | None,
        stored_expiry: datetime | None,
    ) -> bool:
        """True iff the presented token hashes to ``stored_hash`` and has not expired."""

        if not presented_plain_token or not stored_hash or stored_expiry is None:
            return False
        matches = hmac.compare_digest(hash_token(presented_plain_token), stored_hash)
        return matches and stored_expiry > self._clock()
