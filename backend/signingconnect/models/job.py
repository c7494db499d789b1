from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from signingconnect.database import Base

JOB_STATUSES = ("open", "filled", "in_progress", "completed", "cancelled")
JOB_PRIORITIES = ("normal", "urgent", "emergency")
PAYMENT_STATUSES = ("pending", "held", "paid", "disputed")
JOB_APPLICATION_STATUSES = ("applied", "accepted", "rejected", "withdrawn")


class Job(Base):
    __tablename__ = "jobs"
    __table_args__ = (
        CheckConstraint(
            "status IN ('open','filled','in_progress','completed','cancelled')",
            name="ck_jobs_status",
        ),
        CheckConstraint("priority IN ('normal','urgent','emergency')", name="ck_jobs_priority"),
        CheckConstraint(
            "payment_status IN ('pending','held','paid','disputed')",
            name="ck_jobs_payment_status",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    assigned_agent_id = Column(Integer, ForeignKey("users.id"), index=True)

    title = Column(String(255), nullable=False)
    document_type = Column(String(255))
    location = Column(Text, nullable=False)
    appointment_date = Column(Text, nullable=False, index=True)
    appointment_time = Column(Text, nullable=False)
    estimated_duration = Column(Integer)

    # Amounts in cents; total_amount == fee_amount + travel_fee
    fee_amount = Column(Integer, nullable=False)
    travel_fee = Column(Integer, nullable=False, default=0)
    total_amount = Column(Integer, nullable=False)

    status = Column(String(20), nullable=False, default="open", index=True)
    priority = Column(String(10), nullable=False, default="normal")
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
    assigned_at = Column(Text)
    completed_at = Column(Text)

    special_instructions = Column(Text)
    requires_scan_back = Column(Boolean, nullable=False, default=True)
    requires_id_verification = Column(Boolean, nullable=False, default=True)
    max_distance_miles = Column(Integer, default=25)

    payment_status = Column(String(20), nullable=False, default="pending")
    platform_fee = Column(Integer)
    agent_payout = Column(Integer)
    paid_at = Column(Text)

    company = relationship("User", foreign_keys=[company_id])
    assigned_agent = relationship("User", foreign_keys=[assigned_agent_id])
    applications = relationship("JobApplication", back_populates="job", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="job")


class JobApplication(Base):
    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint("job_id", "agent_id", name="uq_job_applications_job_agent"),
        CheckConstraint(
            "status IN ('applied','accepted','rejected','withdrawn')",
            name="ck_job_applications_status",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False)
    agent_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    proposed_fee = Column(Integer)
    availability_confirmed = Column(Boolean, default=True)
    estimated_travel_time = Column(Integer)
    additional_notes = Column(Text)

    status = Column(String(20), nullable=False, default="applied")
    applied_at = Column(Text, nullable=False)
    responded_at = Column(Text)

    job = relationship("Job", back_populates="applications")
    agent = relationship("User")
