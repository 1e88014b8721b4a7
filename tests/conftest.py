"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import re
import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from services import AuthService, JwtIssuer, SecretTokenCodec  # noqa: E402
from storage import SqlUserStore  # noqa: E402
from utils.mail import mail  # noqa: E402

VERIFY_LINK = re.compile(r"/auth/verify-email/([0-9a-f]+)")
RESET_LINK = re.compile(r"/reset-password/([0-9a-f]+)")


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ACCESS_TOKEN_SECRET = "test-access-secret-0123456789abcdef"
    REFRESH_TOKEN_SECRET = "test-refresh-secret-0123456789abcdef"
    MAIL_SUPPRESS_SEND = True
    MAIL_DEFAULT_SENDER = "no-reply@example.com"
    FORGOT_PASSWORD_REDIRECT_URL = None
    CONCEAL_ACCOUNT_EXISTENCE = False


class RecordingMailer:
    """Collects the tokens the auth service would have emailed."""

    def __init__(self):
        self.verifications: list[tuple[str, str]] = []
        self.resets: list[tuple[str, str]] = []

    def send_email_verification(self, user, token: str) -> bool:
        self.verifications.append((user.email, token))
        return True

    def send_password_reset(self, user, token: str) -> bool:
        self.resets.append((user.email, token))
        return True


def build_app(**overrides) -> Flask:
    class TestConfig(_BaseTestConfig):
        pass

    for key, value in overrides.items():
        setattr(TestConfig, key, value)

    return create_app(TestConfig)


@pytest.fixture()
def app() -> Flask:
    """Create a Flask application instance for tests."""

    application = build_app()

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def outbox(app: Flask):
    """Capture every email the app dispatches."""

    with mail.record_messages() as messages:
        yield messages


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture()
def auth_service(app: Flask, mailer: RecordingMailer) -> AuthService:
    """An ``AuthService`` bound to the test database inside an app context."""

    with app.app_context():
        yield AuthService(
            store=SqlUserStore(),
            codec=SecretTokenCodec(),
            issuer=JwtIssuer.from_config(app.config),
            mailer=mailer,
        )


def extract_token(pattern: re.Pattern, message) -> str:
    match = pattern.search(message.body)
    assert match, f"no token link in email body: {message.body!r}"
    return match.group(1)


def register(client: FlaskClient, email: str = "a@x.com", username: str = "alice", password: str = "pw123456"):
    return client.post(
        "/auth/register",
        json={"email": email, "username": username, "password": password},
    )


def login(client: FlaskClient, email: str = "a@x.com", password: str = "pw123456"):
    return client.post("/auth/login", json={"email": email, "password": password})


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
