from pydantic import Field

from signingconnect.schemas.common import CamelModel, Pagination

Amount = str | int | float | None


class PersonalInfo(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    cell_phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    business_name: str | None = None
    website: str | None = None
    years_experience: str | int | None = None
    monthly_volume: str | int | None = None


class Credentials(CamelModel):
    notary_license: str | None = None
    license_expiration: str | None = None
    notary_states: list[str] | None = None
    eo_insurance: str | None = None
    insurance_amount: Amount = None
    background_check: str | None = None
    digital_notary_services: bool | None = None
    bilingual_services: bool | None = None


class AvailabilitySchedule(CamelModel):
    weekdays: bool | None = None
    evenings: bool | None = None
    weekends: bool | None = None
    holidays: bool | None = None


class Coverage(CamelModel):
    primary_counties: str | list[str] | None = None
    additional_counties: str | list[str] | None = None
    service_radius: str | int | None = None
    travel_willingness: str | int | None = None
    availability_schedule: AvailabilitySchedule | None = None
    emergency_services: bool | None = None


class Fees(CamelModel):
    """Decimal currency amounts in major units, e.g. "125.00"."""

    refinance_with_insurance: Amount = None
    refinance_without_insurance: Amount = None
    home_equity_heloc: Amount = Field(None, alias="homeEquityHELOC")
    purchase_closings: Amount = None
    reverse_mortgage: Amount = None
    loan_modification: Amount = None
    commercial_closing: Amount = None
    ron_signings: Amount = None
    travel_fee_per_mile: Amount = None


class Agreements(CamelModel):
    independent_contractor: bool | None = None
    privacy_policy: bool | None = None
    code_of_conduct: bool | None = None
    service_level: bool | None = None
    electronic_signature: bool | None = None


class ApplicationSubmit(CamelModel):
    personal_info: PersonalInfo | None = None
    credentials: Credentials = Field(default_factory=Credentials)
    coverage: Coverage = Field(default_factory=Coverage)
    fees: Fees = Field(default_factory=Fees)
    agreements: Agreements = Field(default_factory=Agreements)


class ApplicationSubmitResponse(CamelModel):
    success: bool = True
    application_id: str
    message: str


class ApplicationStatusOut(CamelModel):
    id: str
    status: str
    submitted_at: str
    last_updated: str
    reviewed_at: str | None = None
    rejection_reason: str | None = None


class ApplicationStatusResponse(CamelModel):
    success: bool = True
    application: ApplicationStatusOut


class ApplicationSummary(CamelModel):
    id: int
    application_id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    status: str
    years_experience: str | None = None
    monthly_volume: str | None = None
    created_at: str
    updated_at: str


class ApplicationListResponse(CamelModel):
    success: bool = True
    applications: list[ApplicationSummary]
    pagination: Pagination


class FeeSchedule(CamelModel):
    """Fees in major units (dollars)."""

    refinance_with_insurance: float | int | None = None
    refinance_without_insurance: float | int | None = None
    home_equity_heloc: float | int | None = Field(None, alias="homeEquityHELOC")
    purchase_closings: float | int | None = None
    reverse_mortgage: float | int | None = None
    loan_modification: float | int | None = None
    commercial_closing: float | int | None = None
    ron_signings: float | int | None = None
    travel_fee_per_mile: float | int | None = None


class ApplicationDetail(ApplicationSummary, FeeSchedule):
    cell_phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    business_name: str | None = None
    website: str | None = None

    notary_license: str
    license_expiration: str
    notary_states: list[str] | None = None
    eo_insurance: str
    insurance_amount: int
    background_check: str | None = None
    digital_notary_services: bool = False
    bilingual_services: bool = False

    primary_counties: str | None = None
    additional_counties: str | None = None
    service_radius: int | None = None
    max_travel_distance: int | None = None
    weekdays_available: bool = True
    evenings_available: bool = False
    weekends_available: bool = False
    holidays_available: bool = False
    emergency_services: bool = False

    independent_contractor_agreed: bool = False
    privacy_policy_agreed: bool = False
    code_of_conduct_agreed: bool = False
    service_level_agreed: bool = False
    electronic_signature_agreed: bool = False
    agreements_signed_at: str | None = None

    reviewed_by: int | None = None
    reviewed_at: str | None = None
    rejection_reason: str | None = None
    notes: str | None = None
    agent_user_id: int | None = None


class ApplicationDetailResponse(CamelModel):
    success: bool = True
    application: ApplicationDetail


class StatusUpdateRequest(CamelModel):
    status: str | None = None
    rejection_reason: str | None = None
    notes: str | None = None


class StatusUpdateResponse(CamelModel):
    success: bool = True
    message: str
    application: ApplicationStatusOut
    account_provisioned: bool | None = None
