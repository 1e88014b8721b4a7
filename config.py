"""Application configuration module."""

import os
from datetime import timedelta


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y"}


class Config:
    """Base configuration for the Flask application."""

    # Core
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///app.db")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MAX_CONTENT_LENGTH = 16 * 1024
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Tokens
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", SECRET_KEY)
    ACCESS_TOKEN_EXPIRY = timedelta(
        minutes=int(os.getenv("ACCESS_TOKEN_EXPIRY_MINUTES", str(24 * 60)))
    )
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", SECRET_KEY + "-refresh")
    REFRESH_TOKEN_EXPIRY = timedelta(
        days=int(os.getenv("REFRESH_TOKEN_EXPIRY_DAYS", "10"))
    )
    TEMPORARY_TOKEN_TTL_MINUTES = int(os.getenv("TEMPORARY_TOKEN_TTL_MINUTES", "20"))

    # Flask-JWT-Extended guards requests carrying an access token; its key and
    # lifetime are copied from the ACCESS_TOKEN_* values in create_app.
    JWT_TOKEN_LOCATION = ["headers", "cookies"]
    JWT_ACCESS_COOKIE_NAME = "accessToken"
    JWT_REFRESH_COOKIE_NAME = "refreshToken"
    JWT_COOKIE_SECURE = True
    JWT_COOKIE_CSRF_PROTECT = False
    JWT_COOKIE_SAMESITE = os.getenv("JWT_COOKIE_SAMESITE", "Lax")

    # CORS
    _raw_origins = os.getenv("CORS_ORIGIN", "http://localhost:5173")
    if _raw_origins.strip() == "*":
        CORS_ORIGINS = "*"
    else:
        CORS_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]

    # Mail
    MAIL_SERVER = os.getenv("MAIL_SERVER", "localhost")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = _env_bool("MAIL_USE_TLS", True)
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "no-reply@example.com")
    MAIL_PRODUCT_NAME = os.getenv("MAIL_PRODUCT_NAME", "Auth Service")

    # Account flows
    FORGOT_PASSWORD_REDIRECT_URL = os.getenv("FORGOT_PASSWORD_REDIRECT_URL")
    CONCEAL_ACCOUNT_EXISTENCE = _env_bool("CONCEAL_ACCOUNT_EXISTENCE", False)
