import logging
import secrets
import time

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from signingconnect.config import settings
from signingconnect.database import utcnow
from signingconnect.errors import Conflict, NotFound, ValidationFailed
from signingconnect.models.application import FEE_DEFAULTS, Application
from signingconnect.schemas.application import ApplicationStatusOut, ApplicationSubmit
from signingconnect.services.notifications import deliver_safely, notifier
from signingconnect.utils.money import to_cents, to_int, to_whole

logger = logging.getLogger(__name__)

DUPLICATE_APPLICATION = "An application with this email already exists"

REQUIRED_FIELDS = [
    ("personal_info", "first_name", "First name"),
    ("personal_info", "last_name", "Last name"),
    ("personal_info", "email", "Email"),
    ("personal_info", "phone", "Phone"),
    ("personal_info", "years_experience", "Years of experience"),
    ("personal_info", "monthly_volume", "Monthly volume"),
    ("credentials", "notary_license", "Notary license"),
    ("credentials", "license_expiration", "License expiration"),
    ("credentials", "eo_insurance", "E&O insurance"),
    ("credentials", "insurance_amount", "Insurance amount"),
]

_ID_ATTEMPTS = 5


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _join(value) -> str | None:
    if isinstance(value, list):
        return ", ".join(v.strip() for v in value if v and v.strip()) or None
    return value or None


class ApplicationService:
    def generate_application_id(self, db: Session) -> str:
        """``SC`` plus the last 8 digits of the millisecond clock.

        Falls back to a random 8-digit suffix when that id is taken, which
        happens for submissions inside the same truncated window.
        """
        prefix = settings.application_id_prefix
        candidate = prefix + str(int(time.time() * 1000))[-8:]
        for _ in range(_ID_ATTEMPTS):
            taken = db.query(Application.id).filter(Application.application_id == candidate).first()
            if not taken:
                return candidate
            candidate = prefix + f"{secrets.randbelow(10**8):08d}"
        raise Conflict("Could not allocate an application ID, please retry")

    def _email_taken(self, db: Session, email: str) -> bool:
        return db.query(Application.id).filter(Application.email == email).first() is not None

    def _validate(self, req: ApplicationSubmit) -> None:
        if req.personal_info is None:
            raise ValidationFailed("Personal information is required")
        missing = [
            label
            for section, field, label in REQUIRED_FIELDS
            if _is_blank(getattr(getattr(req, section), field))
        ]
        if missing:
            raise ValidationFailed(f"Missing required fields: {', '.join(missing)}")

    def submit(self, db: Session, req: ApplicationSubmit) -> Application:
        self._validate(req)
        personal, creds, coverage, fees, agreements = (
            req.personal_info, req.credentials, req.coverage, req.fees, req.agreements,
        )
        email = personal.email.strip().lower()
        schedule = coverage.availability_schedule
        now = utcnow()

        fee_values = {
            field: to_cents(getattr(fees, field), FEE_DEFAULTS[field], field=field)
            for field in FEE_DEFAULTS
        }

        application = Application(
            application_id=self.generate_application_id(db),
            status="pending",
            created_at=now,
            updated_at=now,
            first_name=personal.first_name.strip(),
            last_name=personal.last_name.strip(),
            email=email,
            phone=personal.phone,
            cell_phone=personal.cell_phone or None,
            address=personal.address or None,
            city=personal.city or None,
            state=(personal.state or "FL").upper(),
            zip_code=personal.zip_code or None,
            business_name=personal.business_name or None,
            website=personal.website or None,
            years_experience=str(personal.years_experience),
            monthly_volume=str(personal.monthly_volume),
            notary_license=creds.notary_license.strip(),
            license_expiration=creds.license_expiration,
            notary_states=creds.notary_states or ["FL"],
            eo_insurance=creds.eo_insurance,
            insurance_amount=to_whole(creds.insurance_amount, "Insurance amount"),
            background_check=creds.background_check or None,
            digital_notary_services=bool(creds.digital_notary_services),
            bilingual_services=bool(creds.bilingual_services),
            primary_counties=_join(coverage.primary_counties),
            additional_counties=_join(coverage.additional_counties),
            service_radius=to_int(coverage.service_radius, 25),
            max_travel_distance=to_int(coverage.travel_willingness, 50),
            weekdays_available=True if schedule is None or schedule.weekdays is None else schedule.weekdays,
            evenings_available=bool(schedule and schedule.evenings),
            weekends_available=bool(schedule and schedule.weekends),
            holidays_available=bool(schedule and schedule.holidays),
            emergency_services=bool(coverage.emergency_services),
            independent_contractor_agreed=bool(agreements.independent_contractor),
            privacy_policy_agreed=bool(agreements.privacy_policy),
            code_of_conduct_agreed=bool(agreements.code_of_conduct),
            service_level_agreed=bool(agreements.service_level),
            electronic_signature_agreed=bool(agreements.electronic_signature),
            agreements_signed_at=now,
            **fee_values,
        )

        if self._email_taken(db, email):
            raise Conflict(DUPLICATE_APPLICATION)
        for _ in range(_ID_ATTEMPTS):
            try:
                db.add(application)
                db.commit()
                break
            except IntegrityError:
                db.rollback()
                if self._email_taken(db, email):
                    raise Conflict(DUPLICATE_APPLICATION)
                # A concurrent submission claimed the same application id.
                logger.warning("Application id %s collided, drawing another", application.application_id)
                application.application_id = self.generate_application_id(db)
            except Exception:
                db.rollback()
                raise
        else:
            raise Conflict("Could not allocate an application ID, please retry")
        db.refresh(application)

        logger.info("Application %s saved for %s", application.application_id, email)
        deliver_safely(notifier.application_received, email, application.application_id)
        return application

    def get_status(self, db: Session, application_id: str) -> ApplicationStatusOut:
        application = db.query(Application).filter(Application.application_id == application_id).first()
        if application is None:
            raise NotFound("Application not found")
        return status_out(application)


def status_out(application: Application) -> ApplicationStatusOut:
    return ApplicationStatusOut(
        id=application.application_id,
        status=application.status,
        submitted_at=application.created_at,
        last_updated=application.updated_at,
        reviewed_at=application.reviewed_at,
        rejection_reason=application.rejection_reason,
    )


application_service = ApplicationService()
