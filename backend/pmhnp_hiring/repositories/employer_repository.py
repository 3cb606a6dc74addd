"""
Employer Repository Implementation

Employer-posted job records and e-mail leads.
"""

from typing import List, Optional, Tuple, Type
from datetime import datetime

from sqlalchemy import select, and_, update, func
from sqlalchemy.exc import SQLAlchemyError

from pmhnp_hiring.repositories.base_repository import BaseRepository
from pmhnp_hiring.models.employer import EmployerJob, EmailLead
from pmhnp_hiring.models.job import Job
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)


class EmployerJobRepository(BaseRepository[EmployerJob]):
    """Repository for employer-posted jobs."""

    @property
    def model(self) -> Type[EmployerJob]:
        return EmployerJob

    async def get_expiring(self, now: datetime, until: datetime) -> List[Tuple[EmployerJob, Job]]:
        """Unwarned, published employer jobs expiring between ``now`` and ``until``."""
        async with self.get_session() as session:
            try:
                query = (
                    select(self.model, Job)
                    .join(Job, Job.id == self.model.job_id)
                    .where(
                        and_(
                            self.model.expiry_warning_sent_at.is_(None),
                            Job.is_published == True,  # noqa: E712
                            Job.expires_at >= now,
                            Job.expires_at <= until
                        )
                    )
                )
                result = await session.execute(query)
                return [(employer_job, job) for employer_job, job in result.all()]
            except SQLAlchemyError as e:
                logger.error(f"Error loading expiring employer jobs: {e}")
                return []

    async def get_contact_emails(self) -> List[str]:
        """Distinct lowercased contact e-mails of all employer postings."""
        async with self.get_session() as session:
            try:
                query = select(func.lower(self.model.contact_email)).distinct()
                result = await session.execute(query)
                return [email for email in result.scalars().all() if email]
            except SQLAlchemyError as e:
                logger.error(f"Error loading employer contact e-mails: {e}")
                return []

    async def mark_warning_sent(self, employer_job_id: str, sent_at: Optional[datetime] = None) -> bool:
        async with self.get_session() as session:
            try:
                result = await session.execute(
                    update(self.model)
                    .where(self.model.id == employer_job_id)
                    .values(expiry_warning_sent_at=sent_at or datetime.utcnow())
                )
                await session.commit()
                return result.rowcount > 0
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Error marking expiry warning for {employer_job_id}: {e}")
                return False


class EmailLeadRepository(BaseRepository[EmailLead]):
    """Repository for e-mail leads."""

    @property
    def model(self) -> Type[EmailLead]:
        return EmailLead

    async def get_by_email(self, email: str) -> Optional[EmailLead]:
        async with self.get_session() as session:
            try:
                query = select(self.model).where(self.model.email == email)
                return (await session.execute(query)).scalar_one_or_none()
            except SQLAlchemyError as e:
                logger.error(f"Error loading lead for {email}: {e}")
                return None

    async def get_or_create(self, email: str, source: str) -> Optional[EmailLead]:
        """Existing lead for ``email``, or a new subscribed one."""
        async with self.get_session() as session:
            try:
                query = select(self.model).where(self.model.email == email)
                lead = (await session.execute(query)).scalar_one_or_none()
                if lead:
                    return lead

                lead = self.model(email=email, source=source)
                session.add(lead)
                await session.commit()
                await session.refresh(lead)
                return lead
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Error getting or creating lead for {email}: {e}")
                return None
