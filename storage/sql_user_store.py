"""SQLAlchemy-backed credential store."""

from __future__ import annotations

import logging

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.user import User, UserRole
from utils.clock import utcnow
from utils.errors import Conflict, InternalError

from .abstract_user_store import AbstractUserStore

logger = logging.getLogger(__name__)


def _normalize_email(raw_email: str | None) -> str:
    return (raw_email or "").strip().lower()


class SqlUserStore(AbstractUserStore):
    """Persist users through the application's Flask-SQLAlchemy session."""

    def find_by_email_or_username(self, email: str, username: str) -> User | None:
        email = _normalize_email(email)
        username = (username or "").strip()
        return (
            User.query.filter(
                or_(func.lower(User.email) == email, User.username == username)
            )
            .order_by(User.id)
            .first()
        )

    def create(
        self,
        username: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        user = User(
            username=(username or "").strip(),
            email=_normalize_email(email),
            role=UserRole(role),
            is_email_verified=False,
        )
        user.set_password(password)
        user.validate()

        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            raise Conflict("User email or username already exists.") from exc
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Failed to create user %s", user.username)
            raise InternalError("Something went wrong while registering the user.") from exc
        return user

    def find_by_id(self, user_id: int | str) -> User | None:
        try:
            key = int(user_id)
        except (TypeError, ValueError):
            return None
        return db.session.get(User, key)

    def find_by_email(self, email: str) -> User | None:
        email = _normalize_email(email)
        if not email:
            return None
        return User.query.filter(func.lower(User.email) == email).first()

    def find_by_verification_hash(self, token_hash: str) -> User | None:
        if not token_hash:
            return None
        return User.query.filter(
            User.email_verification_token_hash == token_hash,
            User.email_verification_expiry > utcnow(),
        ).first()

    def find_by_reset_hash(self, token_hash: str) -> User | None:
        if not token_hash:
            return None
        return User.query.filter(
            User.forgot_password_token_hash == token_hash,
            User.forgot_password_expiry > utcnow(),
        ).first()

    def save(self, user: User, *, skip_validation: bool = False) -> None:
        if not skip_validation:
            user.validate()

        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            raise Conflict("User email or username already exists.") from exc
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Failed to persist user %s", user.id)
            raise InternalError("Something went wrong while saving the user.") from exc
