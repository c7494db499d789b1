from signingconnect.schemas.common import CamelModel


class DocumentOut(CamelModel):
    id: int
    application_id: int | None = None
    job_id: int | None = None
    user_id: int | None = None
    document_type: str
    original_filename: str
    stored_filename: str
    file_size: int
    mime_type: str
    file_hash: str | None = None
    encrypted: bool
    retention_date: str | None = None
    accessed_count: int
    uploaded_at: str
    last_accessed: str | None = None
    storage_provider: str | None = None
    storage_path: str


class DocumentResponse(CamelModel):
    success: bool = True
    document: DocumentOut


class DocumentListResponse(CamelModel):
    success: bool = True
    documents: list[DocumentOut]
