"""Authentication blueprint: accounts, sessions, email verification and passwords."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, request
from flask_jwt_extended import (
    current_user,
    jwt_required,
    set_access_cookies,
    set_refresh_cookies,
    unset_jwt_cookies,
)

from services import TokenPair, get_auth_service
from utils.request_validation import (
    validate_change_password,
    validate_forgot_password,
    validate_json_request,
    validate_login,
    validate_register,
    validate_reset_password,
)
from utils.responses import api_response

auth_bp = Blueprint("auth", __name__)


def _attach_session_cookies(response, tokens: TokenPair) -> None:
    set_access_cookies(response, tokens.access_token)
    set_refresh_cookies(response, tokens.refresh_token)


def _presented_refresh_token() -> str | None:
    payload = request.get_json(silent=True) if request.is_json else None
    if isinstance(payload, dict):
        value = payload.get("refreshToken")
        if isinstance(value, str) and value:
            return value
    cookie_name = current_app.config.get("JWT_REFRESH_COOKIE_NAME", "refreshToken")
    return request.cookies.get(cookie_name) or None


@auth_bp.route("/register", methods=["POST"])
def register():
    """Register a new user and email them a verification link."""

    payload = validate_json_request(request, validate_register)
    user = get_auth_service().register(
        email=payload["email"].strip(),
        username=payload["username"].strip(),
        password=payload["password"],
    )
    return api_response(
        {"user": user.to_dict()},
        "User registered successfully and verification email has been sent on your email.",
        HTTPStatus.CREATED,
    )


@auth_bp.route("/login", methods=["POST"])
def login():
    """Authenticate with email and password; issue access and refresh tokens."""

    payload = validate_json_request(request, validate_login)
    result = get_auth_service().login(payload["email"].strip(), payload["password"])

    response, status = api_response(
        {
            "user": result.user.to_dict(),
            "accessToken": result.tokens.access_token,
            "refreshToken": result.tokens.refresh_token,
        },
        "User logged in successfully.",
    )
    _attach_session_cookies(response, result.tokens)
    return response, status


@auth_bp.route("/logout", methods=["POST"])
@jwt_required()
def logout():
    get_auth_service().logout(current_user.id)
    response, status = api_response({}, "User logged out.")
    unset_jwt_cookies(response)
    return response, status


@auth_bp.route("/verify-email/<token>", methods=["GET"])
def verify_email(token: str):
    get_auth_service().verify_email(token)
    return api_response({"isEmailVerified": True}, "Email is verified.")


@auth_bp.route("/resend-email-verification", methods=["POST"])
@jwt_required()
def resend_email_verification():
    get_auth_service().resend_email_verification(current_user.id)
    return api_response({}, "Verification email has been sent to your email.")


@auth_bp.route("/refresh-token", methods=["POST"])
def refresh_token():
    """Exchange a refresh token for a new access/refresh pair (rotation)."""

    tokens = get_auth_service().refresh_access_token(_presented_refresh_token())
    response, status = api_response(
        {"accessToken": tokens.access_token, "refreshToken": tokens.refresh_token},
        "Access token refreshed.",
    )
    _attach_session_cookies(response, tokens)
    return response, status


@auth_bp.route("/forgot-password", methods=["POST"])
def forgot_password():
    payload = validate_json_request(request, validate_forgot_password)
    get_auth_service().forgot_password_request(payload["email"].strip())
    return api_response({}, "Password reset mail has been sent on your email.")


@auth_bp.route("/reset-password/<token>", methods=["POST"])
def reset_password(token: str):
    payload = validate_json_request(request, validate_reset_password)
    get_auth_service().reset_password(token, payload["newPassword"])
    return api_response({}, "Password reset successfully.")


@auth_bp.route("/change-password", methods=["POST"])
@jwt_required()
def change_password():
    payload = validate_json_request(request, validate_change_password)
    get_auth_service().change_password(
        current_user.id, payload["oldPassword"], payload["newPassword"]
    )
    return api_response({}, "Password changed successfully.")


@auth_bp.route("/current-user", methods=["GET"])
@jwt_required()
def get_current_user():
    user = get_auth_service().get_current_user(current_user)
    return api_response(user.to_dict(), "Current user fetched successfully.")
