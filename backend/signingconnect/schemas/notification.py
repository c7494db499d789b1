from signingconnect.schemas.common import CamelModel


class NotificationOut(CamelModel):
    id: int
    type: str
    title: str
    message: str
    read: bool
    email_sent: bool
    sms_sent: bool
    job_id: int | None = None
    application_id: int | None = None
    created_at: str
    read_at: str | None = None


class NotificationResponse(CamelModel):
    success: bool = True
    notification: NotificationOut


class NotificationListResponse(CamelModel):
    success: bool = True
    unread: int
    notifications: list[NotificationOut]
