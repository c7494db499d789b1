"""Transactional outbox.

Side effects of a state change are recorded as ``OutboxEvent`` rows in the
same transaction as the change, then delivered to their handler after the
commit. A handler runs inside the dispatcher's transaction; the event is
marked processed in that same commit, so a handler's writes and the
processed flag land together or not at all.
"""
import logging
from typing import Callable

from sqlalchemy.orm import Session

from signingconnect.database import utcnow
from signingconnect.models.notification import OutboxEvent
from signingconnect.services.notifications import deliver_safely

logger = logging.getLogger(__name__)

APPLICATION_APPROVED = "application.approved"

# handler(db, payload) -> optional callable to run once the commit succeeded
Handler = Callable[[Session, dict], Callable[[], None] | None]


class OutboxDispatcher:
    def __init__(self):
        self._handlers: dict[str, Handler] = {}

    def register(self, event_type: str, handler: Handler) -> None:
        self._handlers[event_type] = handler

    def record(self, db: Session, event_type: str, payload: dict) -> OutboxEvent:
        """Add an event to the caller's transaction. Caller commits."""
        event = OutboxEvent(event_type=event_type, payload=payload, created_at=utcnow(), attempts=0)
        db.add(event)
        db.flush()
        return event

    def pending(self, db: Session, event_ids: list[int] | None = None) -> list[OutboxEvent]:
        query = db.query(OutboxEvent).filter(OutboxEvent.processed_at.is_(None))
        if event_ids is not None:
            query = query.filter(OutboxEvent.id.in_(event_ids))
        return query.order_by(OutboxEvent.id.asc()).all()

    def dispatch_pending(self, db: Session, event_ids: list[int] | None = None) -> list[OutboxEvent]:
        delivered = []
        for event in self.pending(db, event_ids):
            if self._dispatch(db, event):
                delivered.append(event)
        return delivered

    def _dispatch(self, db: Session, event: OutboxEvent) -> bool:
        event_id = event.id
        handler = self._handlers.get(event.event_type)
        if handler is None:
            logger.warning("No handler registered for outbox event %s (%s)", event_id, event.event_type)
            return False

        try:
            after_commit = handler(db, dict(event.payload))
            event.attempts += 1
            event.processed_at = utcnow()
            event.last_error = None
            db.commit()
        except Exception as exc:
            db.rollback()
            logger.exception("Outbox event %s (%s) failed", event_id, event.event_type)
            failed = db.get(OutboxEvent, event_id)
            failed.attempts += 1
            failed.last_error = str(exc)
            db.commit()
            return False

        if after_commit is not None:
            deliver_safely(after_commit)
        logger.info("Outbox event %s (%s) delivered", event_id, event.event_type)
        return True


outbox = OutboxDispatcher()
