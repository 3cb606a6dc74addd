"""
Job Repository Implementation

Repository for job-related database operations: listing and filtering,
duplicate candidate lookups, renewal and the batch queries used by the
maintenance passes.
"""

from typing import List, Optional, Dict, Any, Type, Tuple
from datetime import datetime, timedelta

from sqlalchemy import select, func, and_, or_, update
from sqlalchemy.exc import SQLAlchemyError

from pmhnp_hiring.repositories.base_repository import BaseRepository
from pmhnp_hiring.models.job import Job
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)


class JobRepository(BaseRepository[Job]):
    """Repository for job database operations."""

    @property
    def model(self) -> Type[Job]:
        return Job

    async def list_published(
        self,
        skip: int = 0,
        limit: int = 20,
        search: Optional[str] = None,
        job_type: Optional[str] = None,
        mode: Optional[str] = None,
        state: Optional[str] = None,
        min_salary: Optional[int] = None
    ) -> Tuple[List[Job], int]:
        """
        List published jobs, featured first and then newest first.

        Unlike most repository reads this propagates SQLAlchemyError so the
        API can report the failure instead of an empty page.

        Returns:
            Tuple[List[Job], int]: Page of jobs and total matching count
        """
        conditions = [self.model.is_published == True]  # noqa: E712

        if search:
            term = f"%{search.lower()}%"
            conditions.append(
                or_(
                    func.lower(self.model.title).like(term),
                    func.lower(self.model.employer).like(term),
                    func.lower(self.model.description).like(term)
                )
            )
        if job_type:
            conditions.append(self.model.job_type == job_type)
        if mode:
            conditions.append(self.model.mode == mode)
        if state:
            conditions.append(
                or_(self.model.state_code == state.upper(), self.model.state == state)
            )
        if min_salary is not None:
            conditions.append(
                or_(
                    self.model.normalized_max_salary >= min_salary,
                    self.model.normalized_min_salary >= min_salary
                )
            )

        async with self.get_session() as session:
            query = (
                select(self.model)
                .where(and_(*conditions))
                .order_by(self.model.is_featured.desc(), self.model.created_at.desc())
                .offset(skip)
                .limit(limit)
            )
            result = await session.execute(query)
            jobs = list(result.scalars().all())

            count_query = select(func.count(self.model.id)).where(and_(*conditions))
            total = (await session.execute(count_query)).scalar() or 0

            return jobs, total

    async def get_external_id_map(self, source: str) -> Dict[str, str]:
        """Map external_id -> job id for every job from a source."""
        async with self.get_session() as session:
            try:
                query = select(self.model.external_id, self.model.id).where(
                    and_(
                        self.model.source_provider == source,
                        self.model.external_id.isnot(None)
                    )
                )
                result = await session.execute(query)
                return {external_id: job_id for external_id, job_id in result.all()}
            except SQLAlchemyError as e:
                logger.error(f"Error loading external ids for {source}: {e}")
                return {}

    async def find_by_external_id(self, source: str, external_id: str) -> Optional[Job]:
        async with self.get_session() as session:
            try:
                query = select(self.model).where(
                    and_(
                        self.model.source_provider == source,
                        self.model.external_id == external_id
                    )
                ).limit(1)
                result = await session.execute(query)
                return result.scalars().first()
            except SQLAlchemyError as e:
                logger.error(f"Error getting job by external id {external_id}: {e}")
                return None

    async def find_by_title_fragment(self, fragment: str, limit: int = 50) -> List[Job]:
        """Jobs whose title contains ``fragment`` literally (case-insensitive, ``%`` and ``_`` escaped)."""
        async with self.get_session() as session:
            try:
                query = select(self.model).where(
                    func.lower(self.model.title).contains(fragment.lower(), autoescape=True)
                ).limit(limit)
                result = await session.execute(query)
                return list(result.scalars().all())
            except SQLAlchemyError as e:
                logger.error(f"Error searching titles for duplicates: {e}")
                return []

    async def find_by_employer_fragment(self, fragment: str, limit: int = 20) -> List[Job]:
        """Jobs whose employer contains ``fragment`` (case-insensitive)."""
        async with self.get_session() as session:
            try:
                query = select(self.model).where(
                    func.lower(self.model.employer).contains(fragment.lower(), autoescape=True)
                ).limit(limit)
                result = await session.execute(query)
                return list(result.scalars().all())
            except SQLAlchemyError as e:
                logger.error(f"Error searching employers for duplicates: {e}")
                return []

    async def renew(
        self,
        job_id: str,
        renewal_days: int = 60,
        original_posted_at: Optional[datetime] = None
    ) -> bool:
        """Push a job's expiry forward and republish it."""
        now = datetime.utcnow()
        values: Dict[str, Any] = {
            "expires_at": now + timedelta(days=renewal_days),
            "is_published": True,
            "updated_at": now,
        }
        if original_posted_at:
            values["original_posted_at"] = original_posted_at

        async with self.get_session() as session:
            try:
                result = await session.execute(
                    update(self.model).where(self.model.id == job_id).values(**values)
                )
                await session.commit()
                return result.rowcount > 0
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Error renewing job {job_id}: {e}")
                return False

    async def unpublish_expired(self, now: Optional[datetime] = None) -> int:
        """Unpublish published jobs whose expiry date has passed."""
        now = now or datetime.utcnow()
        async with self.get_session() as session:
            try:
                result = await session.execute(
                    update(self.model)
                    .where(and_(self.model.is_published == True, self.model.expires_at < now))  # noqa: E712
                    .values(is_published=False)
                )
                await session.commit()
                return result.rowcount or 0
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Error unpublishing expired jobs: {e}")
                return 0

    async def unpublish(self, job_ids: List[str]) -> int:
        if not job_ids:
            return 0
        async with self.get_session() as session:
            try:
                result = await session.execute(
                    update(self.model)
                    .where(self.model.id.in_(job_ids))
                    .values(is_published=False, updated_at=datetime.utcnow())
                )
                await session.commit()
                return result.rowcount or 0
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Error unpublishing jobs: {e}")
                return 0

    async def get_with_html(self) -> List[Job]:
        """Jobs whose description or summary contains a ``<``."""
        async with self.get_session() as session:
            try:
                query = select(self.model).where(
                    or_(
                        self.model.description.contains("<"),
                        self.model.description_summary.contains("<")
                    )
                )
                result = await session.execute(query)
                return list(result.scalars().all())
            except SQLAlchemyError as e:
                logger.error(f"Error loading jobs with HTML: {e}")
                return []

    async def get_published_batch(self, after_id: Optional[str] = None, limit: int = 100) -> List[Job]:
        """Keyset-paginated batch of published jobs ordered by id."""
        async with self.get_session() as session:
            try:
                query = select(self.model).where(self.model.is_published == True)  # noqa: E712
                if after_id:
                    query = query.where(self.model.id > after_id)
                query = query.order_by(self.model.id).limit(limit)
                result = await session.execute(query)
                return list(result.scalars().all())
            except SQLAlchemyError as e:
                logger.error(f"Error loading published jobs: {e}")
                return []

    async def get_unparsed_locations(self, limit: int = 100, after_id: Optional[str] = None) -> List[Job]:
        """Published jobs that have not had their location parsed."""
        async with self.get_session() as session:
            try:
                query = select(self.model).where(
                    and_(
                        self.model.is_published == True,  # noqa: E712
                        self.model.state.is_(None)
                    )
                )
                if after_id:
                    query = query.where(self.model.id > after_id)
                result = await session.execute(query.order_by(self.model.id).limit(limit))
                return list(result.scalars().all())
            except SQLAlchemyError as e:
                logger.error(f"Error loading unparsed locations: {e}")
                return []

    async def get_dead_link_candidates(self, limit: int = 1500) -> List[Job]:
        """Published external jobs with an apply link, least recently updated first."""
        async with self.get_session() as session:
            try:
                query = (
                    select(self.model)
                    .where(
                        and_(
                            self.model.is_published == True,  # noqa: E712
                            self.model.source_type == "external",
                            self.model.apply_link.isnot(None),
                            self.model.apply_link != ""
                        )
                    )
                    .order_by(self.model.updated_at.asc())
                    .limit(limit)
                )
                result = await session.execute(query)
                return list(result.scalars().all())
            except SQLAlchemyError as e:
                logger.error(f"Error loading dead link candidates: {e}")
                return []

    async def get_without_company(self, limit: int = 500) -> List[Job]:
        async with self.get_session() as session:
            try:
                query = select(self.model).where(self.model.company_id.is_(None)).limit(limit)
                result = await session.execute(query)
                return list(result.scalars().all())
            except SQLAlchemyError as e:
                logger.error(f"Error loading jobs without company: {e}")
                return []

    async def get_published_dates(self) -> List[Tuple[Optional[datetime], datetime]]:
        """(original_posted_at, created_at) for every published job."""
        async with self.get_session() as session:
            try:
                query = select(self.model.original_posted_at, self.model.created_at).where(
                    self.model.is_published == True  # noqa: E712
                )
                result = await session.execute(query)
                return [tuple(row) for row in result.all()]
            except SQLAlchemyError as e:
                logger.error(f"Error loading job dates: {e}")
                return []

    async def count_by_source(self, published_only: bool = True) -> Dict[str, int]:
        async with self.get_session() as session:
            try:
                query = select(self.model.source_provider, func.count(self.model.id))
                if published_only:
                    query = query.where(self.model.is_published == True)  # noqa: E712
                query = query.group_by(self.model.source_provider)
                result = await session.execute(query)
                return {source or "unknown": count for source, count in result.all()}
            except SQLAlchemyError as e:
                logger.error(f"Error counting jobs by source: {e}")
                return {}

    async def count_created_since(self, since: datetime) -> int:
        async with self.get_session() as session:
            try:
                query = select(func.count(self.model.id)).where(self.model.created_at >= since)
                return (await session.execute(query)).scalar() or 0
            except SQLAlchemyError as e:
                logger.error(f"Error counting recent jobs: {e}")
                return 0
