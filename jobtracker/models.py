"""
JobTracker - SQLAlchemy ORM models

Database model for tracked job applications. User-related tables live in
jobtracker.auth.models.
"""
import enum
from datetime import date, datetime

from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from .database import Base


class JobStatus(str, enum.Enum):
    APPLIED = "applied"
    INTERVIEW = "interview"
    REJECTED = "rejected"


class JobApplication(Base):
    __tablename__ = "job_applications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    company = Column(String, nullable=False)
    position = Column(String, nullable=False)
    location = Column(String)
    status = Column(String, nullable=False, default=JobStatus.APPLIED.value)  # applied, interview, rejected
    applied_date = Column(Date, nullable=False, default=date.today)
    notes = Column(Text)
    url = Column(String)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("User", back_populates="job_applications")
