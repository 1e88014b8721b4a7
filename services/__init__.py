"""Authentication services and their wiring into the Flask app."""

from __future__ import annotations

from datetime import timedelta

from flask import Flask, current_app

from storage import SqlUserStore
from utils.mail import AccountMailer

from .auth_service import AuthService, LoginResult, TokenPair
from .jwt_tokens import JwtIssuer, TokenExpired, TokenInvalid, TokenKind
from .token_codec import IssuedToken, SecretTokenCodec, hash_token

EXTENSION_KEY = "auth_service"


def init_auth_service(app: Flask) -> AuthService:
    """Build the ``AuthService`` for ``app`` from its configuration."""

    service = AuthService(
        store=SqlUserStore(),
        codec=SecretTokenCodec(
            ttl=timedelta(minutes=int(app.config["TEMPORARY_TOKEN_TTL_MINUTES"]))
        ),
        issuer=JwtIssuer.from_config(app.config),
        mailer=AccountMailer(),
        conceal_account_existence=bool(app.config.get("CONCEAL_ACCOUNT_EXISTENCE")),
    )
    app.extensions[EXTENSION_KEY] = service
    return service


def get_auth_service() -> AuthService:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    "AuthService",
    "IssuedToken",
    "JwtIssuer",
    "LoginResult",
    "SecretTokenCodec",
    "TokenExpired",
    "TokenInvalid",
    "TokenKind",
    "TokenPair",
    "get_auth_service",
    "hash_token",
    "init_auth_service",
]
