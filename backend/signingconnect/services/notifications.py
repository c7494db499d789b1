import logging

from sqlalchemy.orm import Session

from signingconnect.database import utcnow
from signingconnect.models.notification import Notification
from signingconnect.models.user import User

logger = logging.getLogger(__name__)

STATUS_SUBJECTS = {
    "pending": "Your application is pending",
    "under_review": "Your application is under review",
    "approved": "Your application has been approved",
    "rejected": "Update on your application",
}


class Notifier:
    """Outbound messages. Email/SMS delivery is a logged placeholder."""

    def send_email(self, to: str, subject: str, body: str) -> None:
        logger.info("[EMAIL] to=%s subject=%r\n%s", to, subject, body)

    def notify_user(
        self,
        db: Session,
        user: User,
        type: str,
        title: str,
        message: str,
        email: bool = True,
        job_id: int | None = None,
        application_id: int | None = None,
    ) -> Notification:
        """Store an in-app notification and mirror it by email (best effort). Caller commits."""
        note = Notification(
            user_id=user.id,
            type=type,
            title=title,
            message=message,
            job_id=job_id,
            application_id=application_id,
            created_at=utcnow(),
        )
        if email:
            note.email_sent = deliver_safely(self.send_email, user.email, title, message)
        db.add(note)
        return note

    def application_received(self, email: str, application_id: str) -> None:
        self.send_email(
            email,
            "We received your SigningConnect application",
            f"Thank you for applying. Your application ID is {application_id}. "
            "Use it to check your application status at any time.",
        )

    def application_status_changed(
        self,
        email: str,
        first_name: str,
        application_id: str,
        status: str,
        rejection_reason: str | None = None,
    ) -> None:
        body = f"Hi {first_name}, the status of application {application_id} is now '{status}'."
        if rejection_reason:
            body += f"\nReason: {rejection_reason}"
        self.send_email(email, STATUS_SUBJECTS.get(status, "Application update"), body)

    def password_reset_requested(self, email: str, reset_token: str) -> None:
        self.send_email(
            email,
            "Reset your SigningConnect password",
            f"Use this token to reset your password within one hour: {reset_token}",
        )

    def agent_welcome_email(self, email: str, temp_password: str) -> None:
        # The temporary password only travels by email, never in a stored row.
        self.send_email(
            email,
            "Welcome to SigningConnect",
            "Your signing agent account is ready.\n"
            f"Email: {email}\nTemporary password: {temp_password}\n"
            "Please change your password after your first login.",
        )


notifier = Notifier()


def deliver_safely(send, *args, **kwargs) -> bool:
    """Run a best-effort side effect; failures are logged, never raised."""
    try:
        send(*args, **kwargs)
        return True
    except Exception:
        logger.exception("Notification delivery failed: %s", getattr(send, "__name__", send))
        return False
