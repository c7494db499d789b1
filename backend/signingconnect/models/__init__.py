from signingconnect.models.application import Application
from signingconnect.models.user import User
from signingconnect.models.job import Job, JobApplication
from signingconnect.models.document import Document
from signingconnect.models.review import Review
from signingconnect.models.notification import AuditLog, Notification, OutboxEvent

__all__ = [
    "Application",
    "User",
    "Job",
    "JobApplication",
    "Document",
    "Review",
    "Notification",
    "AuditLog",
    "OutboxEvent",
]
