from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from signingconnect.database import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(Integer, ForeignKey("applications.id"), index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), index=True)
    user_id = Column(Integer, ForeignKey("users.id"))

    document_type = Column(String(50), nullable=False, index=True)
    original_filename = Column(String(255), nullable=False)
    stored_filename = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(100), nullable=False)
    file_hash = Column(String(64))

    encrypted = Column(Boolean, default=True)
    retention_date = Column(Text)
    accessed_count = Column(Integer, nullable=False, default=0)

    uploaded_at = Column(Text, nullable=False)
    last_accessed = Column(Text)

    storage_provider = Column(String(20), default="railway")
    storage_path = Column(Text, nullable=False)

    application = relationship("Application", back_populates="documents")
