import pytest

from signingconnect.cli import check_login, upsert_admin
from signingconnect.errors import ValidationFailed
from signingconnect.models.user import User
from signingconnect.utils.security import verify_password


class TestUpsertAdmin:
    def test_creates_admin(self, test_db):
        db = test_db()
        user, created = upsert_admin(db, "Root@SigningConnect.com", "super-secret-1")
        assert created is True
        assert user.email == "root@signingconnect.com"
        assert user.user_type == "admin"
        assert verify_password(user.password_hash, "super-secret-1")
        db.close()

    def test_updates_existing_admin(self, test_db):
        db = test_db()
        upsert_admin(db, "root@signingconnect.com", "super-secret-1")
        db.query(User).filter_by(email="root@signingconnect.com").update({"status": "inactive"})
        db.commit()

        user, created = upsert_admin(db, "root@signingconnect.com", "rotated-secret-2")
        assert created is False
        assert user.status == "active"
        assert verify_password(user.password_hash, "rotated-secret-2")
        assert db.query(User).count() == 1
        db.close()

    def test_refuses_to_convert_other_accounts(self, client, test_db):
        client.post("/api/auth/register", json={
            "email": "title@acme.com",
            "password": "company-pass-1",
            "companyName": "Acme Title",
            "contactName": "Sam",
            "phone": "555",
        })
        db = test_db()
        with pytest.raises(ValidationFailed):
            upsert_admin(db, "title@acme.com", "super-secret-1")
        db.close()


class TestCheckLogin:
    def test_reports_portals(self, test_db):
        db = test_db()
        upsert_admin(db, "root@signingconnect.com", "super-secret-1")
        assert check_login(db, "root@signingconnect.com") == {"agent": False, "company": False, "admin": True}
        assert check_login(db, "root@signingconnect.com", "wrong-password")["admin"] is False
        assert check_login(db, "nobody@example.com") == {"agent": False, "company": False, "admin": False}
        db.close()
