"""Seed a verified administrator account for local development."""

import os

from app import create_app
from models import db
from models.user import User, UserRole

ADMIN_USERNAME = os.getenv("SEED_ADMIN_USERNAME", "admin")
ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "AdminPass123")


def main() -> None:
    app = create_app()
    with app.app_context():
        admin = User.query.filter_by(email=ADMIN_EMAIL).first()
        if admin is None:
            admin = User(username=ADMIN_USERNAME, email=ADMIN_EMAIL)
            db.session.add(admin)
            action = "created"
        else:
            action = "updated"
        admin.role = UserRole.ADMIN
        admin.is_email_verified = True
        admin.clear_email_verification()
        admin.set_password(ADMIN_PASSWORD)
        admin.revoke_refresh_token()
        admin.validate()
        db.session.commit()
        print(f"Admin user {action}: {ADMIN_EMAIL}")


if __name__ == "__main__":
    main()
