from sqlalchemy import JSON, CheckConstraint, Column, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from signingconnect.database import Base

USER_TYPES = ("agent", "company", "admin")
USER_STATUSES = ("active", "inactive", "suspended")


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("user_type IN ('agent','company','admin')", name="ck_users_user_type"),
        CheckConstraint("status IN ('active','inactive','suspended')", name="ck_users_status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    user_type = Column(String(20), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="active", index=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
    last_login = Column(Text)

    profile = Column(JSON)
    # Unique: an application provisions at most one agent account.
    application_id = Column(Integer, ForeignKey("applications.id"), unique=True)

    total_jobs_completed = Column(Integer, nullable=False, default=0)
    average_rating = Column(Float, nullable=False, default=0.0)
    on_time_percentage = Column(Integer, nullable=False, default=100)
    total_earnings = Column(Integer, nullable=False, default=0)

    reset_token = Column(String(64), index=True)
    reset_token_expiry = Column(Text)

    application = relationship("Application", back_populates="agent", foreign_keys=[application_id])
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
