"""Outgoing account emails (verification and password reset).

Delivery is best-effort: a failure to reach the mail server is logged and
never fails the request that triggered the email.
"""

from __future__ import annotations

import logging

from flask import current_app, render_template, url_for
from flask_mail import Mail, Message

from models.user import User

logger = logging.getLogger(__name__)

mail = Mail()


def verification_url(token: str) -> str:
    return url_for("auth.verify_email", token=token, _external=True)


def password_reset_url(token: str) -> str:
    redirect_base = current_app.config.get("FORGOT_PASSWORD_REDIRECT_URL")
    if redirect_base:
        return f"{redirect_base.rstrip('/')}/{token}"
    return url_for("auth.reset_password", token=token, _external=True)


def send_email(recipient: str, subject: str, template: str, **context) -> bool:
    """Render ``template`` (html + txt) and send it; return whether it was sent."""

    context.setdefault("product_name", current_app.config.get("MAIL_PRODUCT_NAME"))
    context.setdefault(
        "expires_minutes", current_app.config.get("TEMPORARY_TOKEN_TTL_MINUTES")
    )
    message = Message(
        subject=subject,
        recipients=[recipient],
        body=render_template(f"email/{template}.txt", **context),
        html=render_template(f"email/{template}.html", **context),
    )
    try:
        mail.send(message)
    except Exception:
        logger.exception(
            "Email delivery failed",
            extra={"email_recipient": recipient, "email_template": template},
        )
        return False
    logger.info("Sent %s email to %s", template, recipient)
    return True


class AccountMailer:
    """Sends the account emails the authentication flows need."""

    def send_email_verification(self, user: User, token: str) -> bool:
        return send_email(
            user.email,
            "Please verify your email.",
            "verify_email",
            username=user.username,
            action_url=verification_url(token),
        )

    def send_password_reset(self, user: User, token: str) -> bool:
        return send_email(
            user.email,
            "Password reset request.",
            "forgot_password",
            username=user.username,
            action_url=password_reset_url(token),
        )
