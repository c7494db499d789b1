from sqlalchemy import JSON, Boolean, CheckConstraint, Column, Integer, String, Text
from sqlalchemy.orm import relationship

from signingconnect.database import Base

APPLICATION_STATUSES = ("pending", "under_review", "approved", "rejected")

# Service type -> default fee in cents.
FEE_DEFAULTS = {
    "refinance_with_insurance": 12500,
    "refinance_without_insurance": 10000,
    "home_equity_heloc": 15000,
    "purchase_closings": 17500,
    "reverse_mortgage": 20000,
    "loan_modification": 12500,
    "commercial_closing": 25000,
    "ron_signings": 15000,
    "travel_fee_per_mile": 65,
}
FEE_FIELDS = tuple(FEE_DEFAULTS)


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending','under_review','approved','rejected')",
            name="ck_applications_status",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(String(20), unique=True, nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    created_at = Column(Text, nullable=False, index=True)
    updated_at = Column(Text, nullable=False)

    # Personal information
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(20), nullable=False)
    cell_phone = Column(String(20))
    address = Column(Text)
    city = Column(String(100))
    state = Column(String(2), default="FL")
    zip_code = Column(String(10))
    business_name = Column(String(255))
    website = Column(String(255))
    years_experience = Column(String(10), nullable=False)
    monthly_volume = Column(String(20), nullable=False)

    # Professional credentials
    notary_license = Column(String(100), nullable=False)
    license_expiration = Column(Text, nullable=False)
    notary_states = Column(JSON)
    eo_insurance = Column(String(100), nullable=False)
    insurance_amount = Column(Integer, nullable=False)
    background_check = Column(String(100))
    digital_notary_services = Column(Boolean, default=False)
    bilingual_services = Column(Boolean, default=False)

    # Service coverage
    primary_counties = Column(Text)
    additional_counties = Column(Text)
    service_radius = Column(Integer, default=25)
    max_travel_distance = Column(Integer, default=50)
    weekdays_available = Column(Boolean, default=True)
    evenings_available = Column(Boolean, default=False)
    weekends_available = Column(Boolean, default=False)
    holidays_available = Column(Boolean, default=False)
    emergency_services = Column(Boolean, default=False)

    # Fee schedule, cents
    refinance_with_insurance = Column(Integer, default=FEE_DEFAULTS["refinance_with_insurance"])
    refinance_without_insurance = Column(Integer, default=FEE_DEFAULTS["refinance_without_insurance"])
    home_equity_heloc = Column(Integer, default=FEE_DEFAULTS["home_equity_heloc"])
    purchase_closings = Column(Integer, default=FEE_DEFAULTS["purchase_closings"])
    reverse_mortgage = Column(Integer, default=FEE_DEFAULTS["reverse_mortgage"])
    loan_modification = Column(Integer, default=FEE_DEFAULTS["loan_modification"])
    commercial_closing = Column(Integer, default=FEE_DEFAULTS["commercial_closing"])
    ron_signings = Column(Integer, default=FEE_DEFAULTS["ron_signings"])
    travel_fee_per_mile = Column(Integer, default=FEE_DEFAULTS["travel_fee_per_mile"])

    # Legal agreements
    independent_contractor_agreed = Column(Boolean, default=False)
    privacy_policy_agreed = Column(Boolean, default=False)
    code_of_conduct_agreed = Column(Boolean, default=False)
    service_level_agreed = Column(Boolean, default=False)
    electronic_signature_agreed = Column(Boolean, default=False)
    agreements_signed_at = Column(Text)

    # Review
    reviewed_by = Column(Integer)
    reviewed_at = Column(Text)
    rejection_reason = Column(Text)
    notes = Column(Text)

    agent = relationship(
        "User",
        back_populates="application",
        foreign_keys="User.application_id",
        uselist=False,
    )
    documents = relationship("Document", back_populates="application")
