from fastapi import Request
from sqlalchemy.orm import Session

from signingconnect.database import utcnow
from signingconnect.models.notification import AuditLog


def record_audit(
    db: Session,
    action: str,
    entity_type: str,
    entity_id: int,
    user_id: int | None = None,
    old_values: dict | None = None,
    new_values: dict | None = None,
    request: Request | None = None,
) -> AuditLog:
    """Append an audit entry to the caller's transaction."""
    entry = AuditLog(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        old_values=old_values,
        new_values=new_values,
        created_at=utcnow(),
    )
    if request is not None:
        entry.ip_address = request.client.host if request.client else None
        entry.user_agent = request.headers.get("user-agent")
    db.add(entry)
    return entry
