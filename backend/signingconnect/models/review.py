from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from signingconnect.database import Base


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating"),
        CheckConstraint(
            "professionalism_rating >= 1 AND professionalism_rating <= 5",
            name="ck_reviews_professionalism",
        ),
        CheckConstraint("punctuality_rating >= 1 AND punctuality_rating <= 5", name="ck_reviews_punctuality"),
        CheckConstraint("quality_rating >= 1 AND quality_rating <= 5", name="ck_reviews_quality"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False)
    reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    reviewee_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    rating = Column(Integer, nullable=False)
    review_text = Column(Text)
    would_work_again = Column(Boolean)

    professionalism_rating = Column(Integer)
    punctuality_rating = Column(Integer)
    quality_rating = Column(Integer)

    created_at = Column(Text, nullable=False)

    job = relationship("Job", back_populates="reviews")
