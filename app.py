"""Application factory."""

import json
import logging
import os
import uuid

from flask import Flask, current_app, g, jsonify, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from routes.auth import auth_bp
from services import init_auth_service
from storage import SqlUserStore
from utils.mail import mail
from utils.responses import error_payload

migrate = Migrate()
jwt = JWTManager()


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Access tokens are signed by services.jwt_tokens; the guard must use the same key.
    app.config["JWT_SECRET_KEY"] = app.config["ACCESS_TOKEN_SECRET"]
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = app.config["ACCESS_TOKEN_EXPIRY"]
    app.config["JWT_REFRESH_TOKEN_EXPIRES"] = app.config["REFRESH_TOKEN_EXPIRY"]
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    mail.init_app(app)
    init_auth_service(app)

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
        allow_headers=["Authorization", "Content-Type"],
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    )

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/auth")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    # Errors
    _register_jwt_callbacks()
    _register_error_handlers(app)

    return app


def _request_id() -> str:
    return g.get("request_id") or str(uuid.uuid4())


def _unauthorized(message: str):
    request_id = _request_id()
    response = jsonify(error_payload(401, message, request_id=request_id))
    response.status_code = 401
    response.headers.setdefault("X-Request-ID", request_id)
    return response


def _register_jwt_callbacks() -> None:
    """Resolve the authenticated user and render access-token failures as JSON."""

    store = SqlUserStore()

    @jwt.user_lookup_loader
    def _load_user(_jwt_header, jwt_data):
        return store.find_by_id(jwt_data["sub"])

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        current_app.logger.debug("Rejected request without access token: %s", reason)
        return _unauthorized("Unauthorized request.")

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        current_app.logger.debug("Rejected invalid access token: %s", reason)
        return _unauthorized("Invalid access token.")

    @jwt.expired_token_loader
    def _expired_token(_jwt_header, _jwt_data):
        return _unauthorized("Access token has expired.")

    @jwt.user_lookup_error_loader
    def _unknown_user(_jwt_header, _jwt_data):
        return _unauthorized("Invalid access token.")


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():  # pragma: no cover
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):  # pragma: no cover
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        request_id = _request_id()
        response = error.get_response()
        payload = error_payload(
            error.code or 500,
            error.description or getattr(error, "name", "Error"),
            errors=getattr(error, "errors", None),
            request_id=request_id,
        )
        response.data = json.dumps(payload)
        response.content_type = "application/json"
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        request_id = _request_id()
        app.logger.exception("Unhandled application error", exc_info=error)
        payload = error_payload(
            500, "An unexpected error occurred.", request_id=request_id
        )
        response = jsonify(payload)
        response.status_code = 500
        response.headers.setdefault("X-Request-ID", request_id)
        return response


if __name__ == "__main__":
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
