"""Authentication flows: registration, sessions, verification and password reset."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from werkzeug.exceptions import BadRequest

from models.user import User, UserRole
from storage.abstract_user_store import AbstractUserStore
from utils.errors import (
    Conflict,
    InternalError,
    InvalidCredentials,
    InvalidOrExpired,
    InvalidToken,
    NotFound,
    Unauthorized,
)

from .jwt_tokens import JwtIssuer, TokenInvalid, TokenKind, access_claims, refresh_claims
from .token_codec import SecretTokenCodec, hash_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class LoginResult:
    user: User
    tokens: TokenPair


class AuthService:
    """Coordinates the credential store, secret tokens, JWTs and account email."""

    def __init__(
        self,
        store: AbstractUserStore,
        codec: SecretTokenCodec,
        issuer: JwtIssuer,
        mailer,
        *,
        conceal_account_existence: bool = False,
    ) -> None:
        self._store = store
        self._codec = codec
        self._issuer = issuer
        self._mailer = mailer
        self._conceal_account_existence = conceal_account_existence

    def register(self, email: str, username: str, password: str) -> User:
        """Create an unverified account with the default ``user`` role."""

        if self._store.find_by_email_or_username(email, username) is not None:
            raise Conflict("User email or username already exists.")

        user = self._store.create(username, email, password, UserRole.USER)
        token = self._start_email_verification(user)
        logger.info("Registered user %s (%s)", user.username, user.id)
        self._mailer.send_email_verification(user, token)
        return user

    def login(self, email: str, password: str) -> LoginResult:
        user = self._store.find_by_email(email)
        if user is None:
            raise NotFound("User does not exist.")
        if not user.check_password(password):
            raise InvalidCredentials("Invalid credentials.")

        tokens = self._issue_session(user)
        logger.info("Login: %s (%s)", user.username, user.id)
        return LoginResult(user=user, tokens=tokens)

    def logout(self, user_id: int | str) -> None:
        user = self._store.find_by_id(user_id)
        if user is None:
            raise NotFound("User does not exist.")
        user.revoke_refresh_token()
        self._store.save(user, skip_validation=True)
        logger.info("Logout: %s (%s)", user.username, user.id)

    def refresh_access_token(self, presented_refresh_token: str | None) -> TokenPair:
        if not presented_refresh_token:
            raise Unauthorized("Unauthorized request.")

        try:
            claims = self._issuer.verify(TokenKind.REFRESH, presented_refresh_token)
        except TokenInvalid as exc:
            raise Unauthorized("Refresh token expired or invalid.") from exc

        user = self._store.find_by_id(claims.get("sub"))
        if user is None:
            raise InvalidToken("Invalid refresh token.")
        if presented_refresh_token != user.refresh_token:
            logger.warning("Rejected superseded refresh token for user %s", user.id)
            raise InvalidToken("Refresh token is expired or used.")

        tokens = self._issue_session(user)
        logger.info("Rotated refresh token for user %s", user.id)
        return tokens

    def verify_email(self, presented_token: str | None) -> User:
        if not presented_token:
            raise BadRequest("Email verification token is missing.")

        user = self._store.find_by_verification_hash(hash_token(presented_token))
        if user is None or not self._codec.verify(
            presented_token,
            user.email_verification_token_hash,
            user.email_verification_expiry,
        ):
            raise InvalidOrExpired("Token is invalid or expired.")

        user.mark_email_verified()
        self._store.save(user, skip_validation=True)
        logger.info("Verified email for user %s", user.id)
        return user

    def resend_email_verification(self, user_id: int | str) -> User:
        user = self._store.find_by_id(user_id)
        if user is None:
            raise NotFound("User does not exist.")
        if user.is_email_verified:
            raise Conflict("Email is already verified.")

        token = self._start_email_verification(user)
        self._mailer.send_email_verification(user, token)
        return user

    def forgot_password_request(self, email: str) -> User | None:
        user = self._store.find_by_email(email)
        if user is None:
            if self._conceal_account_existence:
                logger.info("Password reset requested for unknown email")
                return None
            raise NotFound("User does not exist.")

        issued = self._codec.issue()
        user.set_forgot_password(issued.token_hash, issued.expires_at)
        self._store.save(user, skip_validation=True)
        self._mailer.send_password_reset(user, issued.plain_token)
        return user

    def reset_password(self, presented_token: str | None, new_password: str) -> User:
        user = None
        if presented_token:
            user = self._store.find_by_reset_hash(hash_token(presented_token))
        if user is None or not self._codec.verify(
            presented_token, user.forgot_password_token_hash, user.forgot_password_expiry
        ):
            raise InvalidOrExpired("Token is invalid or expired.")

        user.clear_forgot_password()
        user.set_password(new_password)
        user.revoke_refresh_token()
        self._store.save(user, skip_validation=True)
        logger.info("Password reset for user %s", user.id)
        return user

    def change_password(
        self, user_id: int | str, old_password: str, new_password: str
    ) -> User:
        user = self._store.find_by_id(user_id)
        if user is None:
            raise NotFound("User does not exist.")
        if not user.check_password(old_password):
            raise InvalidCredentials("Invalid old password.")

        user.set_password(new_password)
        user.revoke_refresh_token()
        self._store.save(user, skip_validation=True)
        logger.info("Password changed for user %s", user.id)
        return user

    def get_current_user(self, user: User) -> User:
        return user

    def _start_email_verification(self, user: User) -> str:
        issued = self._codec.issue()
        user.set_email_verification(issued.token_hash, issued.expires_at)
        self._store.save(user, skip_validation=True)
        return issued.plain_token

    def _issue_session(self, user: User) -> TokenPair:
        try:
            tokens = TokenPair(
                access_token=self._issuer.sign(TokenKind.ACCESS, access_claims(user)),
                refresh_token=self._issuer.sign(TokenKind.REFRESH, refresh_claims(user)),
            )
        except Exception as exc:
            logger.exception("Token generation failed for user %s", user.id)
            raise InternalError("Something went wrong while generating tokens.") from exc

        user.refresh_token = tokens.refresh_token
        self._store.save(user, skip_validation=True)
        return tokens
