"""Credential store abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod

from models.user import User, UserRole


class AbstractUserStore(ABC):
    """Interface for persisting users and the credentials attached to them."""

    @abstractmethod
    def find_by_email_or_username(self, email: str, username: str) -> User | None:
        """Return a user whose email or username matches either argument."""

    @abstractmethod
    def create(
        self,
        username: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Create and persist a new, unverified user."""

    @abstractmethod
    def find_by_id(self, user_id: int | str) -> User | None:
        """Return the user with the given primary key."""

    @abstractmethod
    def find_by_email(self, email: str) -> User | None:
        """Return the user registered under ``email``."""

    @abstractmethod
    def find_by_verification_hash(self, token_hash: str) -> User | None:
        """Return the user holding this unexpired email verification hash."""

    @abstractmethod
    def find_by_reset_hash(self, token_hash: str) -> User | None:
        """Return the user holding this unexpired password reset hash."""

    @abstractmethod
    def save(self, user: User, *, skip_validation: bool = False) -> None:
        """Persist pending changes on ``user``."""
