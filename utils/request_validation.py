"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

from typing import Callable

from flask import Request
from werkzeug.exceptions import BadRequest

from models.user import EMAIL_PATTERN, USERNAME_MIN_LENGTH
from utils.errors import ValidationFailed

FieldErrors = list[dict[str, str]]


def parse_json_request(req: Request, *, allow_empty: bool = False) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=False)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    return data


def _text(payload: dict, key: str, *, strip: bool = True) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        return ""
    return value.strip() if strip else value


def _check_email(payload: dict, errors: FieldErrors, *, required: bool = True) -> None:
    email = _text(payload, "email")
    if not email:
        if required:
            errors.append({"email": "Email is required!"})
        return
    if not EMAIL_PATTERN.match(email):
        errors.append({"email": "Email is invalid!"})


def _check_required(payload: dict, errors: FieldErrors, key: str, message: str) -> None:
    if not _text(payload, key, strip=False).strip():
        errors.append({key: message})


def validate_register(payload: dict, errors: FieldErrors) -> None:
    _check_email(payload, errors)

    username = _text(payload, "username")
    if not username:
        errors.append({"username": "Username is required!"})
    else:
        if username != username.lower():
            errors.append({"username": "Username must be in lowercase!"})
        if len(username) < USERNAME_MIN_LENGTH:
            errors.append(
                {"username": f"Username must be at least {USERNAME_MIN_LENGTH} characters!"}
            )

    _check_required(payload, errors, "password", "Password is required!")


def validate_login(payload: dict, errors: FieldErrors) -> None:
    _check_email(payload, errors)
    _check_required(payload, errors, "password", "Password is required!")


def validate_change_password(payload: dict, errors: FieldErrors) -> None:
    _check_required(payload, errors, "oldPassword", "Old password is required!")
    _check_required(payload, errors, "newPassword", "New password is required!")


def validate_forgot_password(payload: dict, errors: FieldErrors) -> None:
    _check_email(payload, errors)


def validate_reset_password(payload: dict, errors: FieldErrors) -> None:
    _check_required(payload, errors, "newPassword", "Password is required!")


def validate_json_request(
    req: Request, validator: Callable[[dict, FieldErrors], None]
) -> dict:
    """Parse the JSON body and run ``validator``; raise 422 with every field error."""

    payload = parse_json_request(req, allow_empty=True)
    errors: FieldErrors = []
    validator(payload, errors)
    if errors:
        raise ValidationFailed("Received data is not valid.", errors=errors)
    return payload
