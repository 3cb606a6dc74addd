"""
Freshness Decay

Scores jobs by age and unpublishes external listings that sources have
stopped returning. A job's ``updated_at`` moves forward each time ingestion
renews it, so it doubles as a "last seen" timestamp.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pmhnp_hiring.core.database import DatabaseManager
from pmhnp_hiring.core.exceptions import JobNotFoundException
from pmhnp_hiring.repositories.job_repository import JobRepository
from pmhnp_hiring.utils.logger import get_logger
from pmhnp_hiring.utils.metrics import metrics, UnpublishReasons

logger = get_logger(__name__)

UNPUBLISH_AFTER_DAYS = 90
BATCH_SIZE = 100

# (upper age bound in days, score, bucket)
FRESHNESS_BUCKETS = [
    (3, 20, 'fresh'),
    (7, 15, 'recent'),
    (14, 10, 'normal'),
    (45, 5, 'aging'),
]
STALE_BUCKET = 'stale'

PROTECTED_SOURCE_TYPES = {'employer', 'direct'}


def _age_in_days(reference: datetime, now: Optional[datetime] = None) -> float:
    now = now or datetime.utcnow()
    return (now - reference).total_seconds() / 86400


def freshness_bucket(original_posted_at: Optional[datetime], created_at: datetime,
                     now: Optional[datetime] = None) -> str:
    age = _age_in_days(original_posted_at or created_at, now)
    for limit, _, bucket in FRESHNESS_BUCKETS:
        if age < limit:
            return bucket
    return STALE_BUCKET


def calculate_freshness_score(job: Any, now: Optional[datetime] = None) -> int:
    """
    Freshness points (0-20) from the source's posting date.

    Falls back to ``created_at`` when the source gave no posting date.
    """
    age = _age_in_days(job.original_posted_at or job.created_at, now)
    for limit, score, _ in FRESHNESS_BUCKETS:
        if age < limit:
            return score
    return 0


def should_unpublish(job: Any, now: Optional[datetime] = None) -> bool:
    """Whether an external job has gone unseen for at least 90 days."""
    if (job.source_type or 'external') in PROTECTED_SOURCE_TYPES:
        return False
    return _age_in_days(job.updated_at, now) >= UNPUBLISH_AFTER_DAYS


class FreshnessService:
    """Freshness decay operations over stored jobs."""

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.jobs = JobRepository(db)

    async def apply_freshness_decay(self, batch_size: int = BATCH_SIZE) -> Dict[str, int]:
        """
        Walk all published jobs and unpublish stale external ones.

        Returns:
            Dict[str, int]: ``updated`` (kept) and ``unpublished`` counts
        """
        updated = 0
        unpublished = 0
        after_id = None
        now = datetime.utcnow()

        while True:
            batch = await self.jobs.get_published_batch(after_id=after_id, limit=batch_size)
            if not batch:
                break

            stale_ids = []
            for job in batch:
                if should_unpublish(job, now):
                    stale_ids.append(job.id)
                else:
                    updated += 1

            if stale_ids:
                unpublished += await self.jobs.unpublish(stale_ids)

            after_id = batch[-1].id

        metrics.record_unpublished(UnpublishReasons.STALE, unpublished)
        logger.info(f"Freshness decay kept {updated} jobs and unpublished {unpublished}")
        return {"updated": updated, "unpublished": unpublished}

    async def refresh_job(self, job_id: str) -> None:
        """Reset a job's renewal clock and republish it."""
        job = await self.jobs.get_by_id(job_id)
        if not job:
            raise JobNotFoundException(job_id)

        await self.jobs.update(job_id, {"updated_at": datetime.utcnow(), "is_published": True})
        logger.info(f"Refreshed job {job_id}")

    async def get_freshness_stats(self) -> Dict[str, int]:
        """Published job counts per freshness bucket."""
        stats = {bucket: 0 for _, _, bucket in FRESHNESS_BUCKETS}
        stats[STALE_BUCKET] = 0

        now = datetime.utcnow()
        for original_posted_at, created_at in await self.jobs.get_published_dates():
            stats[freshness_bucket(original_posted_at, created_at, now)] += 1

        return stats
