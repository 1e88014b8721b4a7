"""HTTP error types raised by the authentication flows."""

from __future__ import annotations

from typing import Any

from werkzeug.exceptions import HTTPException


class ApiError(HTTPException):
    """Base class for errors that carry a list of detail entries."""

    code = 500
    name = "Internal Server Error"
    description = "Something went wrong."

    def __init__(self, description: str | None = None, errors: list[Any] | None = None):
        super().__init__(description)
        self.errors = list(errors or [])


class ValidationFailed(ApiError):
    code = 422
    name = "Unprocessable Entity"
    description = "Received data is not valid."


class Unauthorized(ApiError):
    code = 401
    name = "Unauthorized"
    description = "Unauthorized request."


class InvalidToken(ApiError):
    code = 401
    name = "Invalid Token"
    description = "Invalid refresh token."


class InvalidCredentials(ApiError):
    code = 401
    name = "Invalid Credentials"
    description = "Invalid credentials."


class Conflict(ApiError):
    code = 409
    name = "Conflict"
    description = "Resource already exists."


class NotFound(ApiError):
    code = 404
    name = "Not Found"
    description = "User does not exist."


class InvalidOrExpired(ApiError):
    code = 400
    name = "Invalid Or Expired Token"
    description = "Token is invalid or expired."


class InternalError(ApiError):
    """Unexpected persistence or token-generation failure."""
