from pydantic import Field

from signingconnect.schemas.common import CamelModel, Pagination

Amount = str | int | float | None


class JobCreate(CamelModel):
    title: str | None = None
    document_type: str | None = None
    location: str | None = None
    appointment_date: str | None = None
    appointment_time: str | None = None
    estimated_duration: int | None = None
    fee: Amount = None
    travel_fee: Amount = None
    priority: str = "normal"
    special_instructions: str | None = None
    requires_scan_back: bool = True
    requires_id_verification: bool = True
    max_distance_miles: int = 25


class JobUpdate(CamelModel):
    title: str | None = None
    document_type: str | None = None
    location: str | None = None
    appointment_date: str | None = None
    appointment_time: str | None = None
    estimated_duration: int | None = None
    fee: Amount = None
    travel_fee: Amount = None
    priority: str | None = None
    special_instructions: str | None = None
    requires_scan_back: bool | None = None
    requires_id_verification: bool | None = None
    max_distance_miles: int | None = None
    status: str | None = None
    assigned_agent_id: int | None = None
    payment_status: str | None = None


class JobOut(CamelModel):
    id: int
    company_id: int
    assigned_agent_id: int | None = None
    title: str
    document_type: str | None = None
    location: str
    appointment_date: str
    appointment_time: str
    estimated_duration: int | None = None
    fee_amount: float | int
    travel_fee: float | int
    total_amount: float | int
    status: str
    priority: str
    special_instructions: str | None = None
    requires_scan_back: bool
    requires_id_verification: bool
    max_distance_miles: int | None = None
    payment_status: str
    created_at: str
    updated_at: str
    assigned_at: str | None = None
    completed_at: str | None = None
    paid_at: str | None = None
    application_count: int = 0


class JobResponse(CamelModel):
    success: bool = True
    job: JobOut


class JobListResponse(CamelModel):
    success: bool = True
    jobs: list[JobOut]
    pagination: Pagination | None = None


class JobApplicationCreate(CamelModel):
    proposed_fee: Amount = None
    availability_confirmed: bool = True
    estimated_travel_time: int | None = None
    additional_notes: str | None = None


class JobApplicationOut(CamelModel):
    id: int
    job_id: int
    agent_id: int
    proposed_fee: float | int | None = None
    availability_confirmed: bool
    estimated_travel_time: int | None = None
    additional_notes: str | None = None
    status: str
    applied_at: str
    responded_at: str | None = None


class JobApplicationResponse(CamelModel):
    success: bool = True
    application: JobApplicationOut


class JobApplicationListResponse(CamelModel):
    success: bool = True
    applications: list[JobApplicationOut]


class ReviewCreate(CamelModel):
    rating: int = Field(ge=1, le=5)
    review_text: str | None = None
    would_work_again: bool | None = None
    professionalism_rating: int | None = Field(None, ge=1, le=5)
    punctuality_rating: int | None = Field(None, ge=1, le=5)
    quality_rating: int | None = Field(None, ge=1, le=5)


class ReviewOut(CamelModel):
    id: int
    job_id: int
    reviewer_id: int
    reviewee_id: int
    rating: int
    review_text: str | None = None
    would_work_again: bool | None = None
    professionalism_rating: int | None = None
    punctuality_rating: int | None = None
    quality_rating: int | None = None
    created_at: str


class ReviewResponse(CamelModel):
    success: bool = True
    review: ReviewOut
