import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from signingconnect.config import settings
from signingconnect.database import get_db, utcnow
from signingconnect.dependencies import get_current_user
from signingconnect.models.document import Document
from signingconnect.models.job import Job
from signingconnect.models.user import User
from signingconnect.schemas.document import DocumentListResponse, DocumentOut, DocumentResponse
from signingconnect.utils.hashing import sha256_bytes, stored_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])

DOCUMENT_TYPES = {
    "government_id", "notary_license", "eo_insurance", "background_check",
    "resume", "w9_form", "certification", "closing_package", "scan_back", "other",
}
# File content is never persisted; only its metadata is recorded.
STORAGE_PROVIDER = "metadata_only"


def _doc_to_response(doc: Document) -> DocumentOut:
    return DocumentOut(**{field: getattr(doc, field) for field in DocumentOut.model_fields})


@router.post("", response_model=DocumentResponse, status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    document_type: str = Form(..., alias="documentType"),
    job_id: int | None = Form(None, alias="jobId"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if document_type not in DOCUMENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid document type. Must be one of: {', '.join(sorted(DOCUMENT_TYPES))}",
        )

    if job_id is not None:
        job = db.get(Job, job_id)
        if job is None or user.id not in (job.company_id, job.assigned_agent_id):
            raise HTTPException(status_code=404, detail="Job not found")

    max_bytes = settings.max_upload_bytes
    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise HTTPException(status_code=413, detail=f"File too large (max {max_bytes} bytes)")
        chunks.append(chunk)

    content = b"".join(chunks)
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")

    file_hash = sha256_bytes(content)
    original = file.filename or "upload"
    name = stored_filename(file_hash, original)
    retention = datetime.now(timezone.utc) + timedelta(days=settings.document_retention_days)
    owner_dir = f"jobs/{job_id}" if job_id is not None else f"users/{user.id}"

    doc = Document(
        user_id=user.id,
        job_id=job_id,
        application_id=user.application_id,
        document_type=document_type,
        original_filename=original,
        stored_filename=name,
        file_size=size,
        mime_type=file.content_type or "application/octet-stream",
        file_hash=file_hash,
        encrypted=False,
        retention_date=retention.strftime("%Y-%m-%d"),
        accessed_count=0,
        uploaded_at=utcnow(),
        storage_provider=STORAGE_PROVIDER,
        storage_path=f"{owner_dir}/{name}",
    )
    db.add(doc)
    db.commit()
    db.refresh(doc)
    logger.info("Recorded %s document %s for user %s (%d bytes)", document_type, doc.id, user.id, size)
    return DocumentResponse(document=_doc_to_response(doc))


@router.get("", response_model=DocumentListResponse)
async def list_documents(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    docs = (
        db.query(Document)
        .filter(Document.user_id == user.id)
        .order_by(Document.uploaded_at.desc(), Document.id.desc())
        .all()
    )
    return DocumentListResponse(documents=[_doc_to_response(doc) for doc in docs])
