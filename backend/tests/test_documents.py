import hashlib

from conftest import auth_header, register_company
from signingconnect.config import settings


class TestDocuments:
    def test_upload_records_metadata(self, client, company):
        content = b"%PDF-1.4 closing package"
        r = client.post(
            "/api/documents",
            files={"file": ("package.pdf", content, "application/pdf")},
            data={"documentType": "closing_package"},
            headers=company["headers"],
        )
        assert r.status_code == 201
        doc = r.json()["document"]
        assert doc["fileHash"] == hashlib.sha256(content).hexdigest()
        assert doc["fileSize"] == len(content)
        assert doc["mimeType"] == "application/pdf"
        assert doc["originalFilename"] == "package.pdf"
        assert doc["storedFilename"].endswith(".pdf")
        assert doc["userId"] == company["user"]["id"]
        assert doc["retentionDate"] > doc["uploadedAt"][:10]

        listed = client.get("/api/documents", headers=company["headers"]).json()["documents"]
        assert [d["id"] for d in listed] == [doc["id"]]

    def test_invalid_document_type(self, client, company):
        r = client.post(
            "/api/documents",
            files={"file": ("a.txt", b"hello", "text/plain")},
            data={"documentType": "selfie"},
            headers=company["headers"],
        )
        assert r.status_code == 400

    def test_empty_file(self, client, company):
        r = client.post(
            "/api/documents",
            files={"file": ("a.txt", b"", "text/plain")},
            data={"documentType": "other"},
            headers=company["headers"],
        )
        assert r.status_code == 400
        assert r.json()["message"] == "Empty file"

    def test_too_large(self, client, company, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_bytes", 10)
        r = client.post(
            "/api/documents",
            files={"file": ("a.txt", b"x" * 11, "text/plain")},
            data={"documentType": "other"},
            headers=company["headers"],
        )
        assert r.status_code == 413

    def test_job_must_belong_to_caller(self, client, company):
        job = client.post("/api/jobs", json={
            "title": "Loan signing",
            "location": "5 Harbor Rd",
            "appointmentDate": "2026-11-10",
            "appointmentTime": "09:30",
            "fee": 100,
        }, headers=company["headers"]).json()["job"]
        other = auth_header(register_company(client, email="other@title.com")["token"])
        r = client.post(
            "/api/documents",
            files={"file": ("scan.pdf", b"scan", "application/pdf")},
            data={"documentType": "scan_back", "jobId": str(job["id"])},
            headers=other,
        )
        assert r.status_code == 404

        ok = client.post(
            "/api/documents",
            files={"file": ("scan.pdf", b"scan", "application/pdf")},
            data={"documentType": "scan_back", "jobId": str(job["id"])},
            headers=company["headers"],
        )
        assert ok.status_code == 201
        assert ok.json()["document"]["jobId"] == job["id"]

    def test_requires_auth(self, client):
        r = client.get("/api/documents")
        assert r.status_code == 401
