import logging

from sqlalchemy.orm import Session

from signingconnect.database import utcnow
from signingconnect.errors import Conflict, NotFound
from signingconnect.models.application import Application
from signingconnect.models.user import User
from signingconnect.services.audit import record_audit
from signingconnect.services.notifications import notifier
from signingconnect.services.outbox import APPLICATION_APPROVED, outbox
from signingconnect.utils.money import from_cents
from signingconnect.utils.security import generate_temporary_password, hash_password

logger = logging.getLogger(__name__)

PROFILE_FEES = {
    "refinanceWithInsurance": "refinance_with_insurance",
    "refinanceWithoutInsurance": "refinance_without_insurance",
    "homeEquityHELOC": "home_equity_heloc",
    "purchaseClosings": "purchase_closings",
    "reverseMortgage": "reverse_mortgage",
    "loanModification": "loan_modification",
    "commercialClosing": "commercial_closing",
    "ronSignings": "ron_signings",
    "travelFeePerMile": "travel_fee_per_mile",
}


def agent_profile(application: Application) -> dict:
    return {
        "firstName": application.first_name,
        "lastName": application.last_name,
        "phone": application.phone,
        "businessName": application.business_name,
        "notaryLicense": application.notary_license,
        "licenseExpiration": application.license_expiration,
        "notaryStates": application.notary_states,
        "serviceRadius": application.service_radius,
        "ronCertified": bool(application.digital_notary_services),
        "fees": {key: from_cents(getattr(application, column)) for key, column in PROFILE_FEES.items()},
    }


def provision_agent_account(db: Session, application_pk: int) -> tuple[User, str | None]:
    """Create the agent user for an approved application.

    Returns ``(user, temp_password)``; ``temp_password`` is None when the
    application already had an account, in which case nothing changes.
    Does not commit.
    """
    application = db.get(Application, application_pk)
    if application is None:
        raise NotFound(f"Application {application_pk} not found")

    existing = db.query(User).filter(User.application_id == application.id).first()
    if existing is not None:
        logger.info("Application %s already provisioned as user %s", application.application_id, existing.id)
        return existing, None

    if db.query(User.id).filter(User.email == application.email).first():
        raise Conflict(f"A user with email {application.email} already exists")

    temp_password = generate_temporary_password()
    now = utcnow()
    user = User(
        email=application.email,
        password_hash=hash_password(temp_password),
        user_type="agent",
        status="active",
        application_id=application.id,
        profile=agent_profile(application),
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    db.flush()
    record_audit(
        db, "user.provisioned", "user", user.id,
        new_values={"applicationId": application.application_id, "userType": "agent"},
    )
    logger.info("Created agent account %s for application %s", user.id, application.application_id)
    return user, temp_password


def handle_application_approved(db: Session, payload: dict):
    user, temp_password = provision_agent_account(db, payload["applicationId"])
    if temp_password is None:
        return None
    notifier.notify_user(
        db,
        user,
        type="account_created",
        title="Welcome to SigningConnect",
        message="Your signing agent account is ready. Check your email for login details.",
        email=False,
        application_id=user.application_id,
    )
    email = user.email
    return lambda: notifier.agent_welcome_email(email, temp_password)


outbox.register(APPLICATION_APPROVED, handle_application_approved)
