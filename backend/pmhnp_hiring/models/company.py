"""
Company Database Model

SQLAlchemy model for normalized employers that jobs are linked to.
"""

from typing import Optional, List, TYPE_CHECKING
from datetime import datetime

from sqlalchemy import String, Text, DateTime, Boolean, Integer, JSON
from sqlalchemy.orm import relationship, Mapped, mapped_column

from pmhnp_hiring.core.database import Base
from pmhnp_hiring.models.job import generate_id

if TYPE_CHECKING:
    from pmhnp_hiring.models.job import Job


class Company(Base):
    """
    Company model.

    One row per normalized employer name; every spelling seen during
    ingestion is kept in ``aliases``.
    """

    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    normalized_name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    aliases: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)

    logo_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    job_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    jobs: Mapped[List["Job"]] = relationship(back_populates="company")

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name='{self.name}', jobs={self.job_count})>"
