from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from signingconnect.database import get_db
from signingconnect.dependencies import require_admin
from signingconnect.models.user import User
from signingconnect.schemas.admin import (
    AuditEntryOut,
    AuditLogResponse,
    OutboxDispatchResponse,
    OutboxEventOut,
)
from signingconnect.schemas.application import (
    ApplicationDetailResponse,
    ApplicationListResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from signingconnect.services.application_service import status_out
from signingconnect.services.outbox import outbox
from signingconnect.services.review_service import application_detail, review_service

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


@router.get("/applications", response_model=ApplicationListResponse)
async def list_applications(
    status: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    applications, pagination = review_service.list_applications(db, status, page, limit)
    return ApplicationListResponse(applications=applications, pagination=pagination)


@router.get("/applications/{application_pk}", response_model=ApplicationDetailResponse)
async def get_application(application_pk: int, db: Session = Depends(get_db)):
    application = review_service.get_application(db, application_pk)
    return ApplicationDetailResponse(application=application_detail(application))


@router.patch("/applications/{application_pk}/status", response_model=StatusUpdateResponse)
async def update_application_status(
    application_pk: int,
    req: StatusUpdateRequest,
    request: Request,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    application, provisioned = review_service.update_status(db, application_pk, req, admin, request=request)
    return StatusUpdateResponse(
        message=f"Application {application.status.replace('_', ' ')}",
        application=status_out(application),
        account_provisioned=provisioned,
    )


@router.get("/audit-log", response_model=AuditLogResponse)
async def list_audit_log(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    entries, pagination = review_service.list_audit_log(db, page, limit)
    return AuditLogResponse(
        entries=[
            AuditEntryOut(**{field: getattr(entry, field) for field in AuditEntryOut.model_fields})
            for entry in entries
        ],
        pagination=pagination,
    )


@router.post("/outbox/dispatch", response_model=OutboxDispatchResponse)
async def dispatch_outbox(db: Session = Depends(get_db)):
    delivered = outbox.dispatch_pending(db)
    remaining = outbox.pending(db)
    return OutboxDispatchResponse(
        delivered=len(delivered),
        pending=[
            OutboxEventOut(
                id=event.id,
                event_type=event.event_type,
                attempts=event.attempts,
                processed_at=event.processed_at,
                last_error=event.last_error,
            )
            for event in remaining
        ],
    )
