"""
Source Stats Database Model

Daily per-source ingestion counters used for source quality analytics.
"""

from datetime import datetime, date as date_type

from sqlalchemy import String, Date, DateTime, Integer, Float, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pmhnp_hiring.core.database import Base
from pmhnp_hiring.models.job import generate_id


class SourceStats(Base):
    """Ingestion counters for one source on one day."""

    __tablename__ = "source_stats"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    source: Mapped[str] = mapped_column(String(50), nullable=False)
    date: Mapped[date_type] = mapped_column(Date, nullable=False)

    jobs_fetched: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    jobs_added: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    jobs_duplicate: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    jobs_expired: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    avg_quality_score: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    __table_args__ = (
        UniqueConstraint('source', 'date', name='uq_source_stats_source_date'),
    )

    def __repr__(self) -> str:
        return f"<SourceStats(source='{self.source}', date={self.date}, added={self.jobs_added})>"
