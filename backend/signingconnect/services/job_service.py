import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from signingconnect.database import utcnow
from signingconnect.errors import Conflict, InvalidTransition, NotFound, ValidationFailed
from signingconnect.models.job import JOB_PRIORITIES, Job, JobApplication
from signingconnect.models.notification import Notification
from signingconnect.models.review import Review
from signingconnect.models.user import User
from signingconnect.schemas.common import Pagination
from signingconnect.schemas.job import (
    JobApplicationCreate,
    JobApplicationOut,
    JobCreate,
    JobOut,
    JobUpdate,
    ReviewCreate,
)
from signingconnect.services.audit import record_audit
from signingconnect.services.notifications import deliver_safely, notifier
from signingconnect.services.review_service import paginate
from signingconnect.services.workflow import (
    JobStatus,
    PaymentStatus,
    parse_job_status,
    parse_payment_status,
    validate_job_transition,
)
from signingconnect.utils.money import from_cents, to_cents

logger = logging.getLogger(__name__)

REQUIRED_JOB_FIELDS = [
    ("title", "Signing type"),
    ("location", "Appointment address"),
    ("appointment_date", "Appointment date"),
    ("appointment_time", "Appointment time"),
    ("fee", "Fee amount"),
]
DETAIL_FIELDS = {
    "title", "document_type", "location", "appointment_date", "appointment_time",
    "estimated_duration", "special_instructions", "requires_scan_back",
    "requires_id_verification", "max_distance_miles",
}
NON_NULL_DETAILS = {
    "title", "location", "appointment_date", "appointment_time",
    "requires_scan_back", "requires_id_verification",
}
CLOSED_STATUSES = {JobStatus.COMPLETED.value, JobStatus.CANCELLED.value}


def job_out(job: Job) -> JobOut:
    return JobOut(
        id=job.id,
        company_id=job.company_id,
        assigned_agent_id=job.assigned_agent_id,
        title=job.title,
        document_type=job.document_type,
        location=job.location,
        appointment_date=job.appointment_date,
        appointment_time=job.appointment_time,
        estimated_duration=job.estimated_duration,
        fee_amount=from_cents(job.fee_amount),
        travel_fee=from_cents(job.travel_fee),
        total_amount=from_cents(job.total_amount),
        status=job.status,
        priority=job.priority,
        special_instructions=job.special_instructions,
        requires_scan_back=job.requires_scan_back,
        requires_id_verification=job.requires_id_verification,
        max_distance_miles=job.max_distance_miles,
        payment_status=job.payment_status,
        created_at=job.created_at,
        updated_at=job.updated_at,
        assigned_at=job.assigned_at,
        completed_at=job.completed_at,
        paid_at=job.paid_at,
        application_count=len(job.applications),
    )


def job_application_out(bid: JobApplication) -> JobApplicationOut:
    return JobApplicationOut(
        id=bid.id,
        job_id=bid.job_id,
        agent_id=bid.agent_id,
        proposed_fee=from_cents(bid.proposed_fee),
        availability_confirmed=bid.availability_confirmed,
        estimated_travel_time=bid.estimated_travel_time,
        additional_notes=bid.additional_notes,
        status=bid.status,
        applied_at=bid.applied_at,
        responded_at=bid.responded_at,
    )


def _apply_total(job: Job) -> None:
    job.total_amount = job.fee_amount + (job.travel_fee or 0)


class JobService:
    # --- company side ---

    def create_job(self, db: Session, company: User, req: JobCreate) -> Job:
        missing = [label for field, label in REQUIRED_JOB_FIELDS if getattr(req, field) in (None, "")]
        if missing:
            raise ValidationFailed(f"Missing required fields: {', '.join(missing)}")
        if req.priority not in JOB_PRIORITIES:
            raise ValidationFailed(f"Invalid priority. Must be one of: {', '.join(JOB_PRIORITIES)}")

        now = utcnow()
        job = Job(
            company_id=company.id,
            title=req.title,
            document_type=req.document_type,
            location=req.location,
            appointment_date=req.appointment_date,
            appointment_time=req.appointment_time,
            estimated_duration=req.estimated_duration,
            fee_amount=to_cents(req.fee, field="fee"),
            travel_fee=to_cents(req.travel_fee, 0, field="travelFee"),
            status=JobStatus.OPEN.value,
            priority=req.priority,
            special_instructions=req.special_instructions,
            requires_scan_back=req.requires_scan_back,
            requires_id_verification=req.requires_id_verification,
            max_distance_miles=req.max_distance_miles,
            payment_status=PaymentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        _apply_total(job)
        db.add(job)
        db.flush()
        record_audit(db, "job.created", "job", job.id, user_id=company.id)
        db.commit()
        db.refresh(job)
        logger.info("Company %s posted job %s", company.id, job.id)
        return job

    def list_company_jobs(
        self, db: Session, company: User, status: str | None, page: int, limit: int
    ) -> tuple[list[Job], Pagination]:
        query = db.query(Job).filter(Job.company_id == company.id)
        if status:
            query = query.filter(Job.status == parse_job_status(status).value)
        total = query.count()
        jobs = query.order_by(Job.created_at.desc(), Job.id.desc()).offset((page - 1) * limit).limit(limit).all()
        return jobs, paginate(total, page, limit)

    def get_job(self, db: Session, job_id: int, user: User) -> Job:
        job = db.get(Job, job_id)
        if job is None or not self._can_view(job, user):
            raise NotFound("Job not found")
        return job

    def _can_view(self, job: Job, user: User) -> bool:
        if user.user_type == "admin":
            return True
        if user.user_type == "company":
            return job.company_id == user.id
        return job.status == JobStatus.OPEN.value or job.assigned_agent_id == user.id

    def _owned_job(self, db: Session, job_id: int, company: User) -> Job:
        job = db.get(Job, job_id)
        if job is None or job.company_id != company.id:
            raise NotFound("Job not found")
        return job

    def update_job(self, db: Session, job_id: int, company: User, req: JobUpdate) -> Job:
        job = self._owned_job(db, job_id, company)
        changes = req.model_dump(exclude_unset=True)
        old_values = {"status": job.status, "assignedAgentId": job.assigned_agent_id, "paymentStatus": job.payment_status}
        now = utcnow()

        details = {k: v for k, v in changes.items() if k in DETAIL_FIELDS}
        if details or "fee" in changes or "travel_fee" in changes or "priority" in changes:
            if job.status in CLOSED_STATUSES:
                raise InvalidTransition(f"A {job.status} job can no longer be edited")
            for key, value in details.items():
                if value is None and key in NON_NULL_DETAILS:
                    raise ValidationFailed(f"{key} cannot be empty")
                setattr(job, key, value)
            if "priority" in changes:
                if changes["priority"] not in JOB_PRIORITIES:
                    raise ValidationFailed(f"Invalid priority. Must be one of: {', '.join(JOB_PRIORITIES)}")
                job.priority = changes["priority"]
            if "fee" in changes:
                job.fee_amount = to_cents(changes["fee"], field="fee")
            if "travel_fee" in changes:
                job.travel_fee = to_cents(changes["travel_fee"], 0, field="travelFee")
            _apply_total(job)

        assignment = None
        if "assigned_agent_id" in changes:
            assignment = self._assign(db, job, changes["assigned_agent_id"], now)

        if changes.get("status") is not None:
            self._transition(db, job, parse_job_status(changes["status"]), now)

        if changes.get("payment_status") is not None:
            payment = parse_payment_status(changes["payment_status"])
            job.payment_status = payment.value
            if payment is PaymentStatus.PAID and job.paid_at is None:
                job.paid_at = now

        job.updated_at = now
        record_audit(
            db, "job.updated", "job", job.id,
            user_id=company.id,
            old_values=old_values,
            new_values={"status": job.status, "assignedAgentId": job.assigned_agent_id, "paymentStatus": job.payment_status},
        )
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise

        if assignment is not None:
            agent, note = assignment
            if deliver_safely(notifier.send_email, agent.email, note.title, note.message):
                note.email_sent = True
                db.commit()
        db.refresh(job)
        return job

    def _assign(self, db: Session, job: Job, agent_id: int | None, now: str) -> tuple[User, Notification] | None:
        """Set or clear the assignee. Returns the new agent and its unsent notification."""
        current = JobStatus(job.status)
        if current not in (JobStatus.OPEN, JobStatus.FILLED):
            raise InvalidTransition(f"Cannot change the agent on a {job.status} job")
        if agent_id is None:
            if job.assigned_agent_id is not None:
                validate_job_transition(current, JobStatus.OPEN)
                job.status = JobStatus.OPEN.value
            self._release(job, now)
            return None

        agent = db.get(User, agent_id)
        if agent is None or agent.user_type != "agent" or agent.status != "active":
            raise ValidationFailed("Assigned agent must be an active signing agent")
        if current is JobStatus.OPEN:
            validate_job_transition(current, JobStatus.FILLED)
            job.status = JobStatus.FILLED.value
        elif job.assigned_agent_id == agent.id:
            return None
        else:
            self._release(job, now)

        job.assigned_agent_id = agent.id
        job.assigned_at = now
        for bid in job.applications:
            if bid.status == "applied":
                bid.status = "accepted" if bid.agent_id == agent.id else "rejected"
                bid.responded_at = now
        note = notifier.notify_user(
            db, agent,
            type="job_assigned",
            title="You have been assigned a signing",
            message=f"{job.title} on {job.appointment_date} at {job.appointment_time}, {job.location}",
            email=False,
            job_id=job.id,
        )
        return agent, note

    def _release(self, job: Job, now: str) -> None:
        """Drop the assignee and put bids settled by the assignment back in play."""
        job.assigned_agent_id = None
        job.assigned_at = None
        for bid in job.applications:
            if bid.status in ("accepted", "rejected"):
                bid.status = "applied"
                bid.responded_at = now

    def _transition(self, db: Session, job: Job, target: JobStatus, now: str) -> None:
        current = JobStatus(job.status)
        validate_job_transition(current, target)
        if target in (JobStatus.FILLED, JobStatus.IN_PROGRESS, JobStatus.COMPLETED) and job.assigned_agent_id is None:
            raise ValidationFailed(f"A job must have an assigned agent to be {target.value}")
        if target is JobStatus.OPEN:
            self._release(job, now)
        if target is JobStatus.COMPLETED and current is not JobStatus.COMPLETED:
            job.completed_at = now
            agent = db.get(User, job.assigned_agent_id)
            agent.total_jobs_completed = (agent.total_jobs_completed or 0) + 1
            agent.total_earnings = (agent.total_earnings or 0) + (job.agent_payout or job.total_amount)
        job.status = target.value

    # --- agent side ---

    def list_open_jobs(self, db: Session, page: int, limit: int) -> tuple[list[Job], Pagination]:
        query = db.query(Job).filter(Job.status == JobStatus.OPEN.value)
        total = query.count()
        jobs = (
            query.order_by(Job.appointment_date.asc(), Job.appointment_time.asc(), Job.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return jobs, paginate(total, page, limit)

    def list_assigned_jobs(self, db: Session, agent: User) -> list[Job]:
        return (
            db.query(Job)
            .filter(Job.assigned_agent_id == agent.id)
            .order_by(Job.appointment_date.asc(), Job.appointment_time.asc())
            .all()
        )

    def apply_to_job(self, db: Session, job_id: int, agent: User, req: JobApplicationCreate) -> JobApplication:
        job = db.get(Job, job_id)
        if job is None:
            raise NotFound("Job not found")
        if job.status != JobStatus.OPEN.value:
            raise InvalidTransition("This job is no longer accepting applications")
        if db.query(JobApplication.id).filter_by(job_id=job.id, agent_id=agent.id).first():
            raise Conflict("You have already applied to this job")

        bid = JobApplication(
            job_id=job.id,
            agent_id=agent.id,
            proposed_fee=None if req.proposed_fee is None else to_cents(req.proposed_fee, field="proposedFee"),
            availability_confirmed=req.availability_confirmed,
            estimated_travel_time=req.estimated_travel_time,
            additional_notes=req.additional_notes,
            status="applied",
            applied_at=utcnow(),
        )
        try:
            db.add(bid)
            db.flush()
            notifier.notify_user(
                db, job.company,
                type="job_application",
                title="New applicant for your signing",
                message=f"An agent applied to '{job.title}' on {job.appointment_date}.",
                email=False,
                job_id=job.id,
            )
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("You have already applied to this job")
        db.refresh(bid)
        return bid

    def list_job_applications(self, db: Session, job_id: int, company: User) -> list[JobApplication]:
        job = self._owned_job(db, job_id, company)
        return db.query(JobApplication).filter(JobApplication.job_id == job.id).order_by(JobApplication.applied_at.asc()).all()

    def withdraw_application(self, db: Session, job_id: int, agent: User) -> JobApplication:
        bid = db.query(JobApplication).filter_by(job_id=job_id, agent_id=agent.id).first()
        if bid is None:
            raise NotFound("Job application not found")
        if bid.status != "applied":
            raise InvalidTransition(f"Cannot withdraw an application that is {bid.status}")
        bid.status = "withdrawn"
        bid.responded_at = utcnow()
        db.commit()
        db.refresh(bid)
        return bid

    # --- reviews ---

    def create_review(self, db: Session, job_id: int, reviewer: User, req: ReviewCreate) -> Review:
        job = db.get(Job, job_id)
        if job is None or reviewer.id not in (job.company_id, job.assigned_agent_id):
            raise NotFound("Job not found")
        if job.status != JobStatus.COMPLETED.value:
            raise InvalidTransition("Only completed jobs can be reviewed")
        reviewee_id = job.assigned_agent_id if reviewer.id == job.company_id else job.company_id
        if db.query(Review.id).filter_by(job_id=job.id, reviewer_id=reviewer.id).first():
            raise Conflict("You have already reviewed this job")

        review = Review(
            job_id=job.id,
            reviewer_id=reviewer.id,
            reviewee_id=reviewee_id,
            rating=req.rating,
            review_text=req.review_text,
            would_work_again=req.would_work_again,
            professionalism_rating=req.professionalism_rating,
            punctuality_rating=req.punctuality_rating,
            quality_rating=req.quality_rating,
            created_at=utcnow(),
        )
        db.add(review)
        db.flush()

        average = db.query(func.avg(Review.rating)).filter(Review.reviewee_id == reviewee_id).scalar()
        reviewee = db.get(User, reviewee_id)
        reviewee.average_rating = round(float(average), 2)
        db.commit()
        db.refresh(review)
        return review


job_service = JobService()
