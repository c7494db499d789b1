from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from signingconnect.database import get_db, utcnow
from signingconnect.dependencies import get_current_user
from signingconnect.models.notification import Notification
from signingconnect.models.user import User
from signingconnect.schemas.notification import (
    NotificationListResponse,
    NotificationOut,
    NotificationResponse,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_response(note: Notification) -> NotificationOut:
    return NotificationOut(**{field: getattr(note, field) for field in NotificationOut.model_fields})


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    query = db.query(Notification).filter(Notification.user_id == user.id)
    unread = query.filter(Notification.read.is_(False)).count()
    if unread_only:
        query = query.filter(Notification.read.is_(False))
    notes = query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()
    return NotificationListResponse(
        unread=unread,
        notifications=[_notification_to_response(note) for note in notes],
    )


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    note = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user.id)
        .first()
    )
    if not note:
        raise HTTPException(status_code=404, detail="Notification not found")
    if not note.read:
        note.read = True
        note.read_at = utcnow()
        db.commit()
        db.refresh(note)
    return NotificationResponse(notification=_notification_to_response(note))
