"""User model definition."""

from __future__ import annotations

import enum
import re
from datetime import datetime
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash

from utils.clock import utcnow
from utils.errors import ValidationFailed

from . import db


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USERNAME_MIN_LENGTH = 3


class UserRole(str, enum.Enum):
    """Roles are recorded on the account but grant nothing on their own."""

    USER = "user"
    ADMIN = "admin"


class User(db.Model):
    """Represents an account and every credential attached to it."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(
            UserRole,
            name="user_role",
            native_enum=False,
            length=16,
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
        default=UserRole.USER,
    )
    is_email_verified = db.Column(db.Boolean, nullable=False, default=False)
    refresh_token = db.Column(db.Text, nullable=True)
    email_verification_token_hash = db.Column(db.String(64), nullable=True, index=True)
    email_verification_expiry = db.Column(db.DateTime, nullable=True)
    forgot_password_token_hash = db.Column(db.String(64), nullable=True, index=True)
    forgot_password_expiry = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        if not self.password_hash or password is None:
            return False
        return check_password_hash(self.password_hash, password)

    def set_email_verification(self, token_hash: str, expires_at: datetime) -> None:
        self.email_verification_token_hash = token_hash
        self.email_verification_expiry = expires_at

    def clear_email_verification(self) -> None:
        self.email_verification_token_hash = None
        self.email_verification_expiry = None

    def set_forgot_password(self, token_hash: str, expires_at: datetime) -> None:
        self.forgot_password_token_hash = token_hash
        self.forgot_password_expiry = expires_at

    def clear_forgot_password(self) -> None:
        self.forgot_password_token_hash = None
        self.forgot_password_expiry = None

    def mark_email_verified(self) -> None:
        """Consume the pending verification token and flag the address as verified."""

        self.clear_email_verification()
        self.is_email_verified = True

    def revoke_refresh_token(self) -> None:
        self.refresh_token = None

    def validate(self) -> None:
        """Raise ``ValidationFailed`` listing every field that breaks the schema."""

        errors: list[dict[str, str]] = []
        username = self.username or ""
        if len(username) < USERNAME_MIN_LENGTH:
            errors.append(
                {"username": f"Username must be at least {USERNAME_MIN_LENGTH} characters!"}
            )
        elif username != username.lower():
            errors.append({"username": "Username must be in lowercase!"})

        email = self.email or ""
        if not EMAIL_PATTERN.match(email):
            errors.append({"email": "Email is invalid!"})
        elif email != email.lower():
            errors.append({"email": "Email must be in lowercase!"})

        if not self.password_hash:
            errors.append({"password": "Password is required!"})

        if errors:
            raise ValidationFailed(errors=errors)

    def to_dict(self) -> dict[str, Any]:
        """Sanitized projection: no password hash, refresh token or pending tokens."""

        role = self.role or UserRole.USER
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": UserRole(role).value,
            "isEmailVerified": bool(self.is_email_verified),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.username}>"
