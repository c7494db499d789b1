from pydantic import Field

from signingconnect.schemas.common import CamelModel, Pagination


class AuditEntryOut(CamelModel):
    id: int
    user_id: int | None = None
    action: str
    entity_type: str
    entity_id: int
    old_values: dict | None = None
    new_values: dict | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: str


class AuditLogResponse(CamelModel):
    success: bool = True
    entries: list[AuditEntryOut]
    pagination: Pagination


class OutboxEventOut(CamelModel):
    id: int
    event_type: str
    attempts: int
    processed_at: str | None = None
    last_error: str | None = None


class OutboxDispatchResponse(CamelModel):
    success: bool = True
    delivered: int
    pending: list[OutboxEventOut] = Field(default_factory=list)
