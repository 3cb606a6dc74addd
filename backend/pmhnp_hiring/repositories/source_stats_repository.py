"""
Source Stats Repository Implementation

Daily per-source ingestion counters.
"""

from typing import List, Optional, Type
from datetime import date

from sqlalchemy import select, and_
from sqlalchemy.exc import SQLAlchemyError

from pmhnp_hiring.repositories.base_repository import BaseRepository
from pmhnp_hiring.models.source_stats import SourceStats
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)


class SourceStatsRepository(BaseRepository[SourceStats]):
    """Repository for source statistics."""

    @property
    def model(self) -> Type[SourceStats]:
        return SourceStats

    async def increment(
        self,
        source: str,
        day: date,
        fetched: int,
        added: int,
        duplicates: int,
        avg_quality_score: Optional[float] = None
    ) -> Optional[SourceStats]:
        """
        Add counters to the (source, day) row, creating it if needed.

        The quality average is replaced only when a new value is given.
        """
        async with self.get_session() as session:
            try:
                query = select(self.model).where(
                    and_(self.model.source == source, self.model.date == day)
                )
                stats = (await session.execute(query)).scalar_one_or_none()

                if stats is None:
                    stats = self.model(
                        source=source,
                        date=day,
                        jobs_fetched=fetched,
                        jobs_added=added,
                        jobs_duplicate=duplicates,
                        avg_quality_score=avg_quality_score or 0.0,
                    )
                    session.add(stats)
                else:
                    stats.jobs_fetched += fetched
                    stats.jobs_added += added
                    stats.jobs_duplicate += duplicates
                    if avg_quality_score is not None:
                        stats.avg_quality_score = avg_quality_score

                await session.commit()
                await session.refresh(stats)
                return stats
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Error recording stats for {source}: {e}")
                return None

    async def get_since(self, since: date) -> List[SourceStats]:
        async with self.get_session() as session:
            try:
                query = select(self.model).where(self.model.date >= since).order_by(self.model.date.desc())
                result = await session.execute(query)
                return list(result.scalars().all())
            except SQLAlchemyError as e:
                logger.error(f"Error loading source stats: {e}")
                return []
