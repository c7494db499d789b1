import logging
import math

from fastapi import Request
from sqlalchemy.orm import Session

from signingconnect.database import utcnow
from signingconnect.errors import NotFound
from signingconnect.models.application import FEE_FIELDS, Application
from signingconnect.models.notification import AuditLog
from signingconnect.models.user import User
from signingconnect.schemas.application import (
    ApplicationDetail,
    ApplicationSummary,
    StatusUpdateRequest,
)
from signingconnect.schemas.common import Pagination
from signingconnect.services import provisioning  # noqa: F401  registers the approval handler
from signingconnect.services.audit import record_audit
from signingconnect.services.notifications import deliver_safely, notifier
from signingconnect.services.outbox import APPLICATION_APPROVED, outbox
from signingconnect.services.workflow import (
    ApplicationStatus,
    parse_application_status,
    validate_application_transition,
)
from signingconnect.utils.money import from_cents

logger = logging.getLogger(__name__)

_DETAIL_FIELDS = set(ApplicationDetail.model_fields) - set(FEE_FIELDS) - {"agent_user_id"}


def paginate(total: int, page: int, limit: int) -> Pagination:
    return Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


def application_detail(application: Application) -> ApplicationDetail:
    data = {field: getattr(application, field) for field in _DETAIL_FIELDS}
    data.update({field: from_cents(getattr(application, field)) for field in FEE_FIELDS})
    data["agent_user_id"] = application.agent.id if application.agent else None
    return ApplicationDetail(**data)


class ReviewService:
    def list_applications(
        self, db: Session, status: str | None, page: int, limit: int
    ) -> tuple[list[ApplicationSummary], Pagination]:
        query = db.query(Application)
        if status:
            query = query.filter(Application.status == parse_application_status(status).value)

        total = query.count()
        rows = (
            query.order_by(Application.created_at.desc(), Application.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        summaries = [
            ApplicationSummary(**{field: getattr(row, field) for field in ApplicationSummary.model_fields})
            for row in rows
        ]
        return summaries, paginate(total, page, limit)

    def get_application(self, db: Session, application_pk: int) -> Application:
        application = db.get(Application, application_pk)
        if application is None:
            raise NotFound("Application not found")
        return application

    def update_status(
        self,
        db: Session,
        application_pk: int,
        req: StatusUpdateRequest,
        reviewer: User,
        request: Request | None = None,
    ) -> tuple[Application, bool | None]:
        """Apply a reviewer decision.

        Returns the application and, for approvals, whether an agent account
        exists afterwards (None for any other status).
        """
        target = parse_application_status(req.status)
        application = self.get_application(db, application_pk)
        current = ApplicationStatus(application.status)
        validate_application_transition(current, target)

        old_values = {
            "status": application.status,
            "rejectionReason": application.rejection_reason,
            "notes": application.notes,
        }
        now = utcnow()
        application.status = target.value
        application.rejection_reason = req.rejection_reason
        application.notes = req.notes
        application.reviewed_by = reviewer.id
        application.reviewed_at = now
        application.updated_at = now
        record_audit(
            db, "application.status_updated", "application", application.id,
            user_id=reviewer.id,
            old_values=old_values,
            new_values={"status": target.value, "rejectionReason": req.rejection_reason, "notes": req.notes},
            request=request,
        )

        event = None
        if target is ApplicationStatus.APPROVED:
            event = outbox.record(
                db,
                APPLICATION_APPROVED,
                {"applicationId": application.id, "reviewerId": reviewer.id},
            )
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(application)
        logger.info(
            "Application %s moved %s -> %s by user %s",
            application.application_id, current.value, target.value, reviewer.id,
        )

        deliver_safely(
            notifier.application_status_changed,
            application.email,
            application.first_name,
            application.application_id,
            target.value,
            req.rejection_reason,
        )

        provisioned = None
        if event is not None:
            outbox.dispatch_pending(db, event_ids=[event.id])
            db.refresh(application)
            provisioned = application.agent is not None
        return application, provisioned

    def list_audit_log(self, db: Session, page: int, limit: int) -> tuple[list[AuditLog], Pagination]:
        query = db.query(AuditLog)
        total = query.count()
        rows = query.order_by(AuditLog.id.desc()).offset((page - 1) * limit).limit(limit).all()
        return rows, paginate(total, page, limit)


review_service = ReviewService()
