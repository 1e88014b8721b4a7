"""JSON response envelopes shared by every endpoint."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from flask import Response, jsonify


def api_response(
    data: Any = None,
    message: str = "Success",
    status_code: int = HTTPStatus.OK,
) -> tuple[Response, int]:
    """Wrap ``data`` in the success envelope."""

    payload = {
        "statusCode": int(status_code),
        "data": data,
        "message": message,
        "success": int(status_code) < 400,
    }
    return jsonify(payload), int(status_code)


def error_payload(
    status_code: int,
    message: str,
    errors: list[Any] | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Build the error envelope body."""

    payload: dict[str, Any] = {
        "statusCode": int(status_code),
        "data": None,
        "message": message,
        "success": False,
        "errors": list(errors or []),
    }
    if request_id:
        payload["requestId"] = request_id
    return payload
