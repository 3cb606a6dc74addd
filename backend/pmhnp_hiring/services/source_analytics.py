"""
Source Analytics

Daily per-source ingestion counters and the derived source quality report.
"""

from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pmhnp_hiring.core.database import DatabaseManager
from pmhnp_hiring.repositories.source_stats_repository import SourceStatsRepository
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)


def _field(job: Any, name: str) -> Any:
    if isinstance(job, Mapping):
        return job.get(name)
    return getattr(job, name, None)


def job_completeness(job: Any) -> float:
    """0.5 base, +0.2 salary, +0.1 long summary, +0.2 city and state."""
    score = 0.5
    if _field(job, 'min_salary'):
        score += 0.2
    summary = _field(job, 'description_summary')
    if summary and len(summary) > 100:
        score += 0.1
    if _field(job, 'city') and _field(job, 'state'):
        score += 0.2
    return round(score, 2)


def average_completeness(jobs: Sequence[Any]) -> Optional[float]:
    if not jobs:
        return None
    return round(sum(job_completeness(job) for job in jobs) / len(jobs), 3)


class SourceAnalyticsService:
    """Records and reports ingestion statistics per source."""

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.stats = SourceStatsRepository(db)

    async def record_ingestion_stats(
        self,
        source: str,
        fetched: int,
        added: int,
        duplicates: int,
        added_jobs: Sequence[Any] = ()
    ) -> None:
        """
        Add one run's counters to today's row for the source.

        Args:
            source: Source name
            fetched: Raw jobs fetched
            added: Jobs inserted
            duplicates: Jobs renewed as duplicates
            added_jobs: Inserted jobs, used for the completeness average
        """
        await self.stats.increment(
            source=source,
            day=date.today(),
            fetched=fetched,
            added=added,
            duplicates=duplicates,
            avg_quality_score=average_completeness(added_jobs),
        )

    async def get_source_stats(self, days: int = 30) -> List[Dict[str, Any]]:
        """
        Aggregate the last ``days`` days per source.

        Returns:
            List[Dict[str, Any]]: One entry per source, most jobs added first
        """
        rows = await self.stats.get_since(date.today() - timedelta(days=days))

        totals: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            entry = totals.setdefault(row.source, {
                "source": row.source,
                "fetched": 0,
                "added": 0,
                "duplicates": 0,
                "quality_scores": [],
            })
            entry["fetched"] += row.jobs_fetched
            entry["added"] += row.jobs_added
            entry["duplicates"] += row.jobs_duplicate
            if row.avg_quality_score:
                entry["quality_scores"].append(row.avg_quality_score)

        report = []
        for entry in totals.values():
            scores = entry.pop("quality_scores")
            entry["duplicate_rate"] = round(entry["duplicates"] / entry["fetched"], 3) if entry["fetched"] else 0.0
            entry["avg_quality_score"] = round(sum(scores) / len(scores), 3) if scores else 0.0
            report.append(entry)

        return sorted(report, key=lambda item: item["added"], reverse=True)
