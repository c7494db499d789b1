import pytest

from conftest import application_payload, auth_header, login, register_company
from signingconnect.models.application import Application
from signingconnect.models.notification import AuditLog, Notification, OutboxEvent
from signingconnect.models.user import User


@pytest.fixture
def submitted(client, application_pk):
    """Submit one application; returns (applicationId, primary key)."""
    app_id = client.post("/api/applications/submit", json=application_payload()).json()["applicationId"]
    return app_id, application_pk(app_id)


class TestAdminAccess:
    def test_requires_token(self, client):
        r = client.get("/api/admin/applications")
        assert r.status_code == 401

    def test_company_is_forbidden(self, client):
        token = register_company(client)["token"]
        r = client.get("/api/admin/applications", headers=auth_header(token))
        assert r.status_code == 403
        assert r.json() == {"success": False, "message": "Admin access required"}


class TestListAndDetail:
    def test_list_newest_first_with_pagination(self, client, admin_headers):
        for i in range(3):
            client.post("/api/applications/submit", json=application_payload(email=f"a{i}@example.com"))

        r = client.get("/api/admin/applications?page=1&limit=2", headers=admin_headers)
        assert r.status_code == 200
        data = r.json()
        assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}
        assert [row["email"] for row in data["applications"]] == ["a2@example.com", "a1@example.com"]

        page2 = client.get("/api/admin/applications?page=2&limit=2", headers=admin_headers).json()
        assert [row["email"] for row in page2["applications"]] == ["a0@example.com"]

    def test_filter_by_status(self, client, admin_headers, submitted):
        client.post("/api/applications/submit", json=application_payload(email="other@example.com"))
        _, pk = submitted
        client.patch(f"/api/admin/applications/{pk}/status", json={"status": "under_review"}, headers=admin_headers)

        rows = client.get("/api/admin/applications?status=under_review", headers=admin_headers).json()["applications"]
        assert [row["id"] for row in rows] == [pk]

    def test_filter_by_invalid_status(self, client, admin_headers):
        r = client.get("/api/admin/applications?status=bogus", headers=admin_headers)
        assert r.status_code == 400

    def test_bad_pagination(self, client, admin_headers):
        r = client.get("/api/admin/applications?page=0", headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["success"] is False

    def test_detail_converts_fees_to_major_units(self, client, admin_headers, application_pk):
        payload = application_payload(fees={"refinanceWithInsurance": "125.00"})
        app_id = client.post("/api/applications/submit", json=payload).json()["applicationId"]
        pk = application_pk(app_id)

        r = client.get(f"/api/admin/applications/{pk}", headers=admin_headers)
        assert r.status_code == 200
        detail = r.json()["application"]
        assert detail["applicationId"] == app_id
        assert detail["refinanceWithInsurance"] == 125
        assert detail["travelFeePerMile"] == 0.65
        assert detail["homeEquityHELOC"] == 150
        assert detail["notaryLicense"] == "FL123456"
        assert detail["agentUserId"] is None

    def test_detail_not_found(self, client, admin_headers):
        r = client.get("/api/admin/applications/9999", headers=admin_headers)
        assert r.status_code == 404


class TestStatusUpdate:
    def test_reject_with_reason(self, client, admin_headers, submitted, mailbox):
        app_id, pk = submitted
        r = client.patch(f"/api/admin/applications/{pk}/status", json={
            "status": "rejected", "rejectionReason": "Insurance expired",
        }, headers=admin_headers)
        assert r.status_code == 200
        assert r.json()["accountProvisioned"] is None

        status = client.get(f"/api/applications/status/{app_id}").json()["application"]
        assert status["status"] == "rejected"
        assert status["rejectionReason"] == "Insurance expired"
        assert status["reviewedAt"] is not None
        assert any("Insurance expired" in mail["body"] for mail in mailbox.to("jane@example.com"))

    def test_invalid_status_does_not_mutate(self, client, admin_headers, submitted, test_db):
        _, pk = submitted
        r = client.patch(f"/api/admin/applications/{pk}/status", json={"status": "archived"}, headers=admin_headers)
        assert r.status_code == 400
        assert "Invalid status" in r.json()["message"]

        db = test_db()
        row = db.get(Application, pk)
        assert row.status == "pending"
        assert row.reviewed_at is None
        assert db.query(AuditLog).filter_by(action="application.status_updated").count() == 0
        db.close()

    def test_unknown_application(self, client, admin_headers):
        r = client.patch("/api/admin/applications/9999/status", json={"status": "approved"}, headers=admin_headers)
        assert r.status_code == 404

    def test_rejected_cannot_be_approved(self, client, admin_headers, submitted, test_db):
        _, pk = submitted
        client.patch(f"/api/admin/applications/{pk}/status", json={"status": "rejected"}, headers=admin_headers)
        r = client.patch(f"/api/admin/applications/{pk}/status", json={"status": "approved"}, headers=admin_headers)
        assert r.status_code == 409

        db = test_db()
        assert db.get(Application, pk).status == "rejected"
        assert db.query(User).filter_by(user_type="agent").count() == 0
        db.close()

    def test_under_review_can_return_to_pending(self, client, admin_headers, submitted):
        _, pk = submitted
        for status in ("under_review", "pending", "under_review"):
            r = client.patch(f"/api/admin/applications/{pk}/status", json={"status": status}, headers=admin_headers)
            assert r.status_code == 200

    def test_status_change_is_audited(self, client, admin_headers, submitted, test_db, admin_user):
        _, pk = submitted
        client.patch(f"/api/admin/applications/{pk}/status", json={
            "status": "under_review", "notes": "Checking license",
        }, headers=admin_headers)

        db = test_db()
        entry = db.query(AuditLog).filter_by(action="application.status_updated").one()
        assert entry.entity_id == pk
        assert entry.user_id == admin_user.id
        assert entry.old_values["status"] == "pending"
        assert entry.new_values == {"status": "under_review", "rejectionReason": None, "notes": "Checking license"}
        assert entry.user_agent == "testclient"
        db.close()

        log = client.get("/api/admin/audit-log", headers=admin_headers).json()
        assert log["entries"][0]["action"] == "application.status_updated"


class TestApprovalProvisioning:
    def test_approve_provisions_agent(self, client, admin_headers, submitted, mailbox, test_db):
        app_id, pk = submitted
        r = client.patch(f"/api/admin/applications/{pk}/status", json={"status": "approved"}, headers=admin_headers)
        assert r.status_code == 200
        assert r.json()["accountProvisioned"] is True

        detail = client.get(f"/api/admin/applications/{pk}", headers=admin_headers).json()["application"]
        assert detail["status"] == "approved"
        assert detail["reviewedAt"] is not None
        assert detail["agentUserId"] is not None

        temp_password = mailbox.temp_password("jane@example.com")
        assert temp_password
        token = login(client, "jane@example.com", temp_password, "agent")
        profile = client.get("/api/auth/profile", headers=auth_header(token)).json()["user"]
        assert profile["userType"] == "agent"
        assert profile["profile"]["notaryLicense"] == "FL123456"
        assert profile["profile"]["fees"]["travelFeePerMile"] == 0.65

        db = test_db()
        event = db.query(OutboxEvent).one()
        assert event.processed_at is not None
        assert event.attempts == 1
        note = db.query(Notification).filter_by(user_id=detail["agentUserId"]).one()
        assert temp_password not in note.message
        db.close()

    def test_reapproval_does_not_duplicate_agent(self, client, admin_headers, submitted, mailbox, test_db):
        _, pk = submitted
        client.patch(f"/api/admin/applications/{pk}/status", json={"status": "approved"}, headers=admin_headers)
        first_password = mailbox.temp_password("jane@example.com")

        r = client.patch(f"/api/admin/applications/{pk}/status", json={"status": "approved"}, headers=admin_headers)
        assert r.status_code == 200
        assert r.json()["accountProvisioned"] is True
        assert mailbox.temp_password("jane@example.com") == first_password

        db = test_db()
        assert db.query(User).filter_by(email="jane@example.com").count() == 1
        db.close()

    def test_email_taken_by_company_is_recorded(self, client, admin_headers, application_pk, test_db):
        register_company(client, email="dual@example.com")
        app_id = client.post(
            "/api/applications/submit", json=application_payload(email="dual@example.com")
        ).json()["applicationId"]
        pk = application_pk(app_id)

        r = client.patch(f"/api/admin/applications/{pk}/status", json={"status": "approved"}, headers=admin_headers)
        assert r.status_code == 200
        assert r.json()["accountProvisioned"] is False

        db = test_db()
        assert db.get(Application, pk).status == "approved"
        event = db.query(OutboxEvent).one()
        assert event.processed_at is None
        assert event.attempts == 1
        assert "already exists" in event.last_error
        db.close()

        pending = client.post("/api/admin/outbox/dispatch", headers=admin_headers).json()
        assert pending["delivered"] == 0
        assert pending["pending"][0]["attempts"] == 2

    def test_dispatch_retries_pending_events(self, client, admin_headers, submitted, mailbox, monkeypatch):
        from signingconnect.services import provisioning

        _, pk = submitted
        original = provisioning.provision_agent_account

        def flaky(db, application_pk):
            raise RuntimeError("database hiccup")

        monkeypatch.setattr(provisioning, "provision_agent_account", flaky)
        r = client.patch(f"/api/admin/applications/{pk}/status", json={"status": "approved"}, headers=admin_headers)
        assert r.json()["accountProvisioned"] is False

        monkeypatch.setattr(provisioning, "provision_agent_account", original)
        r = client.post("/api/admin/outbox/dispatch", headers=admin_headers)
        assert r.json() == {"success": True, "delivered": 1, "pending": []}
        assert mailbox.temp_password("jane@example.com")
