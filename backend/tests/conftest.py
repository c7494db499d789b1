import re

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from signingconnect.config import settings
from signingconnect.database import get_db, init_db, utcnow
from signingconnect.limiter import limiter
from signingconnect.main import app
from signingconnect.models.user import User
from signingconnect.services.notifications import notifier
from signingconnect.utils.security import hash_password

ADMIN_EMAIL = "admin@signingconnect.com"
ADMIN_PASSWORD = "admin-pass-123"


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def test_db(tmp_path):
    db_path = tmp_path / "db.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    init_db(bind=engine)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def relaxed_limits():
    """Lift the rate limits so ordinary tests can make many calls."""
    original = (settings.auth_rate_limit, settings.application_rate_limit)
    settings.auth_rate_limit = "1000/minute"
    settings.application_rate_limit = "1000/minute"
    limiter.reset()
    yield
    settings.auth_rate_limit, settings.application_rate_limit = original
    limiter.reset()


class Outbox:
    """Placeholder emails captured instead of logged."""

    def __init__(self):
        self.sent = []

    def __call__(self, to, subject, body):
        self.sent.append({"to": to, "subject": subject, "body": body})

    def to(self, address):
        return [mail for mail in self.sent if mail["to"] == address]

    def temp_password(self, address):
        for mail in reversed(self.to(address)):
            match = re.search(r"Temporary password: (\S+)", mail["body"])
            if match:
                return match.group(1)
        return None

    def reset_token(self, address):
        for mail in reversed(self.to(address)):
            match = re.search(r"\b([0-9a-f]{64})\b", mail["body"])
            if match:
                return match.group(1)
        return None


@pytest.fixture
def mailbox(monkeypatch):
    box = Outbox()
    monkeypatch.setattr(notifier, "send_email", box)
    return box


@pytest.fixture
def client(test_db, relaxed_limits, mailbox):
    return TestClient(app)


@pytest.fixture
def admin_user(test_db):
    db = test_db()
    now = utcnow()
    user = User(
        email=ADMIN_EMAIL,
        password_hash=hash_password(ADMIN_PASSWORD),
        user_type="admin",
        status="active",
        profile={"firstName": "Admin", "lastName": "User"},
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    db.close()
    return user


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def login(client, email, password, user_type):
    r = client.post("/api/auth/login", json={"email": email, "password": password, "userType": user_type})
    assert r.status_code == 200, r.json()
    return r.json()["token"]


@pytest.fixture
def admin_headers(client, admin_user):
    return auth_header(login(client, ADMIN_EMAIL, ADMIN_PASSWORD, "admin"))


def application_payload(email="jane@example.com", **overrides):
    personal = {
        "firstName": "Jane",
        "lastName": "Doe",
        "email": email,
        "phone": "555-0100",
        "city": "Tampa",
        "state": "FL",
        "zipCode": "33601",
        "yearsExperience": "5",
        "monthlyVolume": "20",
    }
    personal.update(overrides.pop("personalInfo", {}))
    payload = {
        "personalInfo": personal,
        "credentials": {
            "notaryLicense": "FL123456",
            "licenseExpiration": "2027-06-30",
            "notaryStates": ["FL"],
            "eoInsurance": "Yes",
            "insuranceAmount": "50000",
        },
        "coverage": {"primaryCounties": ["Hillsborough", "Pinellas"], "serviceRadius": "30"},
        "fees": {},
        "agreements": {
            "independentContractor": True,
            "privacyPolicy": True,
            "codeOfConduct": True,
            "serviceLevel": True,
            "electronicSignature": True,
        },
    }
    payload.update(overrides)
    return payload


def register_company(client, email="title@acme.com", password="company-pass-1"):
    r = client.post("/api/auth/register", json={
        "userType": "company",
        "email": email,
        "password": password,
        "companyName": "Acme Title",
        "contactName": "Sam Smith",
        "phone": "555-0199",
        "address": "1 Main St, Tampa FL",
    })
    assert r.status_code == 201, r.json()
    return r.json()


@pytest.fixture
def company(client):
    data = register_company(client)
    return {"user": data["user"], "headers": auth_header(data["token"])}


def provision_agent(client, admin_headers, mailbox, email):
    """Approve an application for ``email`` and log into the provisioned account."""
    r = client.post("/api/applications/submit", json=application_payload(email=email))
    app_id = r.json()["applicationId"]
    pk = _application_pk(client, admin_headers, app_id)
    r = client.patch(f"/api/admin/applications/{pk}/status", json={"status": "approved"}, headers=admin_headers)
    assert r.json()["accountProvisioned"] is True
    token = login(client, email, mailbox.temp_password(email), "agent")
    verify = client.get("/api/auth/verify", headers=auth_header(token)).json()
    return {"user": verify["user"], "headers": auth_header(token), "email": email}


@pytest.fixture
def agent(client, admin_headers, mailbox):
    """An approved applicant logged into their provisioned agent account."""
    return provision_agent(client, admin_headers, mailbox, "agent@example.com")


def _application_pk(client, admin_headers, application_id):
    r = client.get("/api/admin/applications", headers=admin_headers)
    for row in r.json()["applications"]:
        if row["applicationId"] == application_id:
            return row["id"]
    raise AssertionError(f"{application_id} not listed")


@pytest.fixture
def application_pk(client, admin_headers):
    def _lookup(application_id):
        return _application_pk(client, admin_headers, application_id)

    return _lookup
