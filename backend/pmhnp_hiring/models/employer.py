"""
Employer Posting Models

Employer-posted job metadata and the e-mail leads used for employer
notifications.
"""

from typing import Optional, TYPE_CHECKING
from datetime import datetime
import secrets

from sqlalchemy import String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pmhnp_hiring.core.database import Base
from pmhnp_hiring.models.job import generate_id

if TYPE_CHECKING:
    from pmhnp_hiring.models.job import Job


def generate_token() -> str:
    return secrets.token_urlsafe(24)


class EmployerJob(Base):
    """Employer-side record attached to a directly posted job."""

    __tablename__ = "employer_jobs"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    job_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    employer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_email: Mapped[str] = mapped_column(String(255), nullable=False)
    edit_token: Mapped[str] = mapped_column(String(64), default=generate_token, nullable=False)
    dashboard_token: Mapped[str] = mapped_column(String(64), default=generate_token, nullable=False)
    payment_status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    expiry_warning_sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    job: Mapped["Job"] = relationship()


class EmailLead(Base):
    """A subscribed e-mail address with its unsubscribe token."""

    __tablename__ = "email_leads"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    source: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    unsubscribe_token: Mapped[str] = mapped_column(String(64), default=generate_token, nullable=False, unique=True)
    is_subscribed: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
