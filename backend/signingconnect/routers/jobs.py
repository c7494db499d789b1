from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from signingconnect.database import get_db
from signingconnect.dependencies import get_current_user, require_agent, require_company
from signingconnect.models.review import Review
from signingconnect.models.user import User
from signingconnect.schemas.job import (
    JobApplicationCreate,
    JobApplicationListResponse,
    JobApplicationResponse,
    JobCreate,
    JobListResponse,
    JobResponse,
    JobUpdate,
    ReviewCreate,
    ReviewOut,
    ReviewResponse,
)
from signingconnect.services.job_service import job_application_out, job_out, job_service

router = APIRouter(prefix="/jobs", tags=["jobs"])


def _review_to_response(review: Review) -> ReviewOut:
    return ReviewOut(**{field: getattr(review, field) for field in ReviewOut.model_fields})


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(req: JobCreate, company: User = Depends(require_company), db: Session = Depends(get_db)):
    return JobResponse(job=job_out(job_service.create_job(db, company, req)))


@router.get("", response_model=JobListResponse)
async def list_jobs(
    status: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    company: User = Depends(require_company),
    db: Session = Depends(get_db),
):
    jobs, pagination = job_service.list_company_jobs(db, company, status, page, limit)
    return JobListResponse(jobs=[job_out(job) for job in jobs], pagination=pagination)


@router.get("/open", response_model=JobListResponse)
async def list_open_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    agent: User = Depends(require_agent),
    db: Session = Depends(get_db),
):
    jobs, pagination = job_service.list_open_jobs(db, page, limit)
    return JobListResponse(jobs=[job_out(job) for job in jobs], pagination=pagination)


@router.get("/assigned", response_model=JobListResponse)
async def list_assigned_jobs(agent: User = Depends(require_agent), db: Session = Depends(get_db)):
    jobs = job_service.list_assigned_jobs(db, agent)
    return JobListResponse(jobs=[job_out(job) for job in jobs])


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return JobResponse(job=job_out(job_service.get_job(db, job_id, user)))


@router.patch("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: int,
    req: JobUpdate,
    company: User = Depends(require_company),
    db: Session = Depends(get_db),
):
    return JobResponse(job=job_out(job_service.update_job(db, job_id, company, req)))


@router.post("/{job_id}/applications", response_model=JobApplicationResponse, status_code=201)
async def apply_to_job(
    job_id: int,
    req: JobApplicationCreate,
    agent: User = Depends(require_agent),
    db: Session = Depends(get_db),
):
    bid = job_service.apply_to_job(db, job_id, agent, req)
    return JobApplicationResponse(application=job_application_out(bid))


@router.get("/{job_id}/applications", response_model=JobApplicationListResponse)
async def list_job_applications(job_id: int, company: User = Depends(require_company), db: Session = Depends(get_db)):
    bids = job_service.list_job_applications(db, job_id, company)
    return JobApplicationListResponse(applications=[job_application_out(bid) for bid in bids])


@router.post("/{job_id}/applications/withdraw", response_model=JobApplicationResponse)
async def withdraw_application(job_id: int, agent: User = Depends(require_agent), db: Session = Depends(get_db)):
    bid = job_service.withdraw_application(db, job_id, agent)
    return JobApplicationResponse(application=job_application_out(bid))


@router.post("/{job_id}/reviews", response_model=ReviewResponse, status_code=201)
async def create_review(
    job_id: int,
    req: ReviewCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ReviewResponse(review=_review_to_response(job_service.create_review(db, job_id, user, req)))
