"""
Job Database Model

SQLAlchemy 2.0 model for PMHNP job postings, both ingested from external
job sources and posted directly by employers.
"""

from typing import Optional, TYPE_CHECKING
from datetime import datetime
import uuid

from sqlalchemy import (
    Integer, String, Text, DateTime, Boolean, Float,
    CheckConstraint, Index, ForeignKey
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pmhnp_hiring.core.database import Base

if TYPE_CHECKING:
    from pmhnp_hiring.models.company import Company


def generate_id() -> str:
    return uuid.uuid4().hex


class Job(Base):
    """
    Job posting model.

    Holds the raw source fields, the normalized salary/location fields
    derived during ingestion, and the publication lifecycle flags.
    """

    __tablename__ = "jobs"

    # Primary key
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)

    # Basic job information
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    employer: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    job_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    mode: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    description_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    apply_link: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[Optional[str]] = mapped_column(String(300), nullable=True, unique=True)

    # Parsed location
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state_code: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(2), nullable=True, default="US")
    is_remote: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_hybrid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Salary as provided by the source
    salary_range: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    min_salary: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_salary: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    salary_period: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Salary normalized to annual USD
    normalized_min_salary: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    normalized_max_salary: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    salary_is_estimated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    salary_confidence: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    display_salary: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Flags
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_verified_employer: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    quality_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    apply_click_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Source information
    source_type: Mapped[str] = mapped_column(String(20), default="external", nullable=False)
    source_provider: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    external_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Dates
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    original_posted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    company_id: Mapped[Optional[str]] = mapped_column(
        String(32), ForeignKey("companies.id", ondelete="SET NULL"), nullable=True
    )
    company: Mapped[Optional["Company"]] = relationship(back_populates="jobs")

    __table_args__ = (
        CheckConstraint('quality_score >= 0 AND quality_score <= 100', name='ck_job_quality_score_range'),
        CheckConstraint(
            "source_type IN ('external', 'employer', 'direct')",
            name='ck_job_source_type_valid'
        ),
        Index('idx_job_source_external_id', 'source_provider', 'external_id'),
        Index('idx_job_is_published', 'is_published'),
        Index('idx_job_expires_at', 'expires_at'),
        Index('idx_job_employer', 'employer'),
        Index('idx_job_state_code', 'state_code'),
        Index('idx_job_published_created', 'is_published', 'created_at'),
    )

    def __repr__(self) -> str:
        return f"<Job(id={self.id}, title='{self.title}', employer='{self.employer}')>"

    @property
    def has_salary_info(self) -> bool:
        return any(
            value is not None
            for value in (self.min_salary, self.max_salary, self.normalized_min_salary, self.normalized_max_salary)
        ) or bool(self.salary_range)

    @property
    def is_expired(self) -> bool:
        """
        Check if job posting has expired.

        Returns:
            bool: True if job has an expiry date in the past
        """
        if not self.expires_at:
            return False
        return self.expires_at < datetime.utcnow()
