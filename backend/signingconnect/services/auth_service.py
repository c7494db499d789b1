import logging
from datetime import datetime, timedelta, timezone

from fastapi import Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from signingconnect.config import settings
from signingconnect.database import TIMESTAMP_FORMAT, utcnow
from signingconnect.errors import AuthenticationFailed, Conflict, ValidationFailed
from signingconnect.models.user import User
from signingconnect.schemas.auth import RegisterRequest
from signingconnect.services.audit import record_audit
from signingconnect.services.notifications import deliver_safely, notifier
from signingconnect.utils.security import (
    create_access_token,
    generate_reset_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

DUPLICATE_ACCOUNT = "An account with this email already exists"
INVALID_CREDENTIALS = "Invalid email or password"
ACCOUNT_INACTIVE = "Account is inactive. Please contact support."
RESET_REQUESTED = "If an account with this email exists, password reset instructions have been sent."

# Profile keys a user may edit on their own account.
EDITABLE_PROFILE_KEYS = {
    "company": {"companyName", "contactName", "phone", "address"},
    "agent": {"firstName", "lastName", "phone", "businessName", "serviceRadius"},
    "admin": {"firstName", "lastName", "phone"},
}


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class AuthService:
    def _check_password_length(self, password: str, label: str = "Password") -> None:
        if len(password) < settings.min_password_length:
            raise ValidationFailed(
                f"{label} must be at least {settings.min_password_length} characters long"
            )

    def register(self, db: Session, req: RegisterRequest, request: Request | None = None) -> tuple[User, str]:
        if req.user_type != "company":
            raise ValidationFailed("Only company accounts can register directly")
        email = normalize_email(req.email)
        if not email or not req.password or not req.company_name or not req.contact_name or not req.phone:
            raise ValidationFailed("All required fields must be provided")
        self._check_password_length(req.password)

        if db.query(User.id).filter(User.email == email).first():
            raise Conflict(DUPLICATE_ACCOUNT)

        now = utcnow()
        user = User(
            email=email,
            password_hash=hash_password(req.password),
            user_type="company",
            status="active",
            profile={
                "companyName": req.company_name,
                "contactName": req.contact_name,
                "phone": req.phone,
                "address": req.address,
                "verified": False,
                "createdAt": now,
            },
            created_at=now,
            updated_at=now,
        )
        try:
            db.add(user)
            db.flush()
            record_audit(db, "user.registered", "user", user.id, user_id=user.id, request=request)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict(DUPLICATE_ACCOUNT)
        except Exception:
            db.rollback()
            raise
        db.refresh(user)

        logger.info("New company registered: %s", email)
        return user, create_access_token(user.id, user.email, user.user_type)

    def login(self, db: Session, email: str | None, password: str | None, user_type: str | None) -> tuple[User, str]:
        email = normalize_email(email)
        if not email or not password:
            raise ValidationFailed("Email and password are required")

        # Scoped by the claimed portal: the same email never matches another user type.
        user = db.query(User).filter(User.email == email, User.user_type == user_type).first()
        if user is None:
            raise AuthenticationFailed(INVALID_CREDENTIALS)
        if user.status != "active":
            raise AuthenticationFailed(ACCOUNT_INACTIVE)
        if not verify_password(user.password_hash, password):
            raise AuthenticationFailed(INVALID_CREDENTIALS)

        user.last_login = utcnow()
        db.commit()
        db.refresh(user)

        logger.info("User logged in: %s (%s)", email, user_type)
        return user, create_access_token(user.id, user.email, user.user_type)

    def get_active_user(self, db: Session, user_id) -> User | None:
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            return None
        return db.query(User).filter(User.id == user_id, User.status == "active").first()

    def forgot_password(self, db: Session, email: str | None, request: Request | None = None) -> str:
        email = normalize_email(email)
        if not email:
            raise ValidationFailed("Email address is required")

        user = db.query(User).filter(User.email == email).first()
        if user is None:
            logger.info("Password reset requested for unknown email")
            return RESET_REQUESTED

        token = generate_reset_token()
        expiry = datetime.now(timezone.utc) + timedelta(seconds=settings.reset_token_ttl_seconds)
        user.reset_token = token
        user.reset_token_expiry = expiry.strftime(TIMESTAMP_FORMAT)
        user.updated_at = utcnow()
        record_audit(db, "user.password_reset_requested", "user", user.id, user_id=user.id, request=request)
        db.commit()

        logger.info("Password reset token issued for user %s", user.id)
        deliver_safely(notifier.password_reset_requested, user.email, token)
        return RESET_REQUESTED

    def reset_password(self, db: Session, token: str | None, new_password: str | None) -> None:
        if not token or not new_password:
            raise ValidationFailed("Reset token and new password are required")
        self._check_password_length(new_password)

        user = (
            db.query(User)
            .filter(User.reset_token == token)
            .filter(User.reset_token_expiry > utcnow())
            .first()
        )
        if user is None:
            raise ValidationFailed("Invalid or expired reset token")

        user.password_hash = hash_password(new_password)
        user.reset_token = None
        user.reset_token_expiry = None
        user.updated_at = utcnow()
        record_audit(db, "user.password_reset", "user", user.id, user_id=user.id)
        db.commit()
        logger.info("Password reset completed for user %s", user.id)

    def change_password(self, db: Session, user: User, current_password: str | None, new_password: str | None) -> None:
        if not current_password or not new_password:
            raise ValidationFailed("Current password and new password are required")
        self._check_password_length(new_password, label="New password")
        if not verify_password(user.password_hash, current_password):
            raise AuthenticationFailed("Current password is incorrect")

        user.password_hash = hash_password(new_password)
        user.updated_at = utcnow()
        record_audit(db, "user.password_changed", "user", user.id, user_id=user.id)
        db.commit()

    def update_profile(self, db: Session, user: User, changes: dict) -> User:
        allowed = EDITABLE_PROFILE_KEYS.get(user.user_type, set())
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationFailed(f"Profile fields not editable: {', '.join(sorted(unknown))}")

        old_profile = dict(user.profile or {})
        # Reassign so SQLAlchemy notices the JSON change.
        user.profile = {**old_profile, **changes}
        user.updated_at = utcnow()
        record_audit(
            db, "user.profile_updated", "user", user.id,
            user_id=user.id,
            old_values={k: old_profile.get(k) for k in changes},
            new_values=changes,
        )
        db.commit()
        db.refresh(user)
        return user


auth_service = AuthService()
