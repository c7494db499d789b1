"""Command-line maintenance tasks.

    python -m signingconnect.cli init-db
    python -m signingconnect.cli upsert-admin --email admin@example.com --password ...
    python -m signingconnect.cli check-login --email admin@example.com [--password ...]
"""
import argparse
import logging
import sys

from sqlalchemy.orm import Session

from signingconnect.config import settings
from signingconnect.database import SessionLocal, init_db, utcnow
from signingconnect.errors import ValidationFailed
from signingconnect.models.user import USER_TYPES, User
from signingconnect.services.auth_service import normalize_email
from signingconnect.utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)


def upsert_admin(db: Session, email: str, password: str) -> tuple[User, bool]:
    """Create the admin account, or reset its password and reactivate it.

    Returns ``(user, created)``.
    """
    email = normalize_email(email)
    if not email or not password:
        raise ValidationFailed("Email and password are required")
    if len(password) < settings.min_password_length:
        raise ValidationFailed(f"Password must be at least {settings.min_password_length} characters long")

    now = utcnow()
    user = db.query(User).filter(User.email == email).first()
    created = user is None
    if created:
        user = User(
            email=email,
            user_type="admin",
            profile={"firstName": "Admin", "lastName": "User"},
            created_at=now,
        )
        db.add(user)
    elif user.user_type != "admin":
        raise ValidationFailed(f"{email} already belongs to a {user.user_type} account")

    user.password_hash = hash_password(password)
    user.status = "active"
    user.updated_at = now
    db.commit()
    db.refresh(user)
    return user, created


def check_login(db: Session, email: str, password: str | None = None) -> dict[str, bool]:
    """Which portals would accept ``email`` (and ``password``, when given)."""
    email = normalize_email(email)
    portals = {}
    for user_type in USER_TYPES:
        user = db.query(User).filter(User.email == email, User.user_type == user_type).first()
        ok = user is not None and user.status == "active"
        if ok and password is not None:
            ok = verify_password(user.password_hash, password)
        portals[user_type] = ok
    return portals


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="signingconnect", description="SigningConnect maintenance commands")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create database tables")

    admin = sub.add_parser("upsert-admin", help="Create or update an admin account")
    admin.add_argument("--email", required=True)
    admin.add_argument("--password", required=True)

    check = sub.add_parser("check-login", help="Show which portals an account can log into")
    check.add_argument("--email", required=True)
    check.add_argument("--password", help="Also verify this password")

    args = parser.parse_args(argv)
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "init-db":
        init_db()
        print("Database initialised")
        return 0

    init_db()
    db = SessionLocal()
    try:
        if args.command == "upsert-admin":
            try:
                user, created = upsert_admin(db, args.email, args.password)
            except ValidationFailed as exc:
                logger.error("%s", exc.message)
                return 1
            print(f"Admin {user.email} {'created' if created else 'updated'} (id={user.id})")
            return 0

        portals = check_login(db, args.email, args.password)
        for user_type, ok in portals.items():
            print(f"{user_type:8} {'yes' if ok else 'no'}")
        return 0 if any(portals.values()) else 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
