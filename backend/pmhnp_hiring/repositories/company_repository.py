"""
Company Repository Implementation

Repository for company records: lookups by normalized name, job counters,
job linking and company merges.
"""

from typing import List, Optional, Type, Tuple

from sqlalchemy import select, func, update
from sqlalchemy.exc import SQLAlchemyError

from pmhnp_hiring.repositories.base_repository import BaseRepository
from pmhnp_hiring.models.company import Company
from pmhnp_hiring.models.job import Job
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

SORT_COLUMNS = {
    "job_count": Company.job_count.desc(),
    "name": Company.name.asc(),
    "created_at": Company.created_at.desc(),
    "verified": Company.is_verified.desc(),
}


class CompanyRepository(BaseRepository[Company]):
    """Repository for company database operations."""

    @property
    def model(self) -> Type[Company]:
        return Company

    async def get_by_normalized_name(self, normalized_name: str) -> Optional[Company]:
        async with self.get_session() as session:
            try:
                query = select(self.model).where(self.model.normalized_name == normalized_name)
                result = await session.execute(query)
                return result.scalar_one_or_none()
            except SQLAlchemyError as e:
                logger.error(f"Error getting company by normalized name: {e}")
                return None

    async def record_job(self, company_id: str, alias: Optional[str] = None) -> Optional[Company]:
        """Increment a company's job count and remember a new spelling."""
        async with self.get_session() as session:
            try:
                company = await session.get(self.model, company_id)
                if not company:
                    return None

                company.job_count = (company.job_count or 0) + 1
                if alias and alias != company.name and alias not in (company.aliases or []):
                    # Reassign so the JSON column is flagged dirty
                    company.aliases = [*(company.aliases or []), alias]

                await session.commit()
                await session.refresh(company)
                return company
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Error updating company {company_id}: {e}")
                return None

    async def list_companies(self, limit: int = 50, sort: str = "job_count") -> Tuple[List[Company], int]:
        """Page of companies with the total count."""
        order = SORT_COLUMNS.get(sort, SORT_COLUMNS["job_count"])
        async with self.get_session() as session:
            try:
                result = await session.execute(select(self.model).order_by(order).limit(limit))
                companies = list(result.scalars().all())
                total = (await session.execute(select(func.count(self.model.id)))).scalar() or 0
                return companies, total
            except SQLAlchemyError as e:
                logger.error(f"Error listing companies: {e}")
                return [], 0

    async def link_job(self, job_id: str, company_id: str) -> bool:
        async with self.get_session() as session:
            try:
                result = await session.execute(
                    update(Job).where(Job.id == job_id).values(company_id=company_id)
                )
                await session.commit()
                return result.rowcount > 0
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Error linking job {job_id} to company {company_id}: {e}")
                return False

    async def merge(self, keep: Company, merge: Company) -> int:
        """
        Move every job from ``merge`` to ``keep`` and delete ``merge``.

        Runs in one transaction. Errors propagate to the caller.

        Returns:
            int: Number of jobs transferred
        """
        async with self.get_session() as session:
            try:
                transferred = (await session.execute(
                    select(func.count(Job.id)).where(Job.company_id == merge.id)
                )).scalar() or 0

                await session.execute(
                    update(Job).where(Job.company_id == merge.id).values(company_id=keep.id)
                )

                aliases = list(dict.fromkeys([
                    *(keep.aliases or []),
                    merge.name,
                    merge.normalized_name,
                    *(merge.aliases or []),
                ]))

                kept = await session.get(self.model, keep.id)
                kept.aliases = aliases
                kept.job_count = (keep.job_count or 0) + transferred

                merged = await session.get(self.model, merge.id)
                await session.delete(merged)

                await session.commit()
                return transferred
            except SQLAlchemyError:
                await session.rollback()
                raise
