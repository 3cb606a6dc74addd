"""
Ingestion Service

Fetches jobs from each source, normalizes and filters them, renews known
listings, inserts new ones and records per-source statistics.
"""

import re
import time
from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pmhnp_hiring.aggregators.registry import fetch_from_source
from pmhnp_hiring.core.config import get_settings
from pmhnp_hiring.core.database import DatabaseManager
from pmhnp_hiring.core.events import EventManager, event_manager, INGESTION_SOURCE_COMPLETED
from pmhnp_hiring.core.exceptions import UnknownSourceException
from pmhnp_hiring.models.job import generate_id
from pmhnp_hiring.repositories.job_repository import JobRepository
from pmhnp_hiring.services.company_normalizer import CompanyService
from pmhnp_hiring.services.deduplicator import Deduplicator
from pmhnp_hiring.services.description_cleaner import clean_all_job_descriptions
from pmhnp_hiring.services.employer_email_collector import collect_employer_emails
from pmhnp_hiring.services.job_filter import is_relevant_job
from pmhnp_hiring.services.job_normalizer import normalize_job
from pmhnp_hiring.services.quality_score import compute_quality_score
from pmhnp_hiring.services.source_analytics import SourceAnalyticsService
from pmhnp_hiring.utils.logger import (
    get_logger,
    get_run_logger,
    log_database_operation,
    log_error,
    log_performance_metric,
)
from pmhnp_hiring.utils.metrics import metrics, IngestionOutcomes, UnpublishReasons

logger = get_logger(__name__)

ALL_SOURCES = ['adzuna', 'usajobs', 'greenhouse', 'lever', 'jooble', 'jsearch', 'ashby', 'workday']
DEFAULT_CRON_SOURCES = ['adzuna', 'jooble', 'greenhouse', 'lever', 'usajobs', 'jsearch']

PROGRESS_LOG_INTERVAL = 10

Fetcher = Callable[[str, Optional[int]], Awaitable[List[Dict[str, Any]]]]


@dataclass
class IngestionResult:
    """Outcome of ingesting one source."""

    source: str
    fetched: int = 0
    added: int = 0
    duplicates: int = 0
    errors: int = 0
    duration: float = 0.0
    new_job_urls: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_job_slug(title: str, job_id: str) -> str:
    """URL slug: lowercase title with dashes, suffixed with the job id."""
    slug = re.sub(r'[^a-z0-9\s-]', '', title.lower())
    slug = re.sub(r'\s+', '-', slug.strip())
    slug = re.sub(r'-+', '-', slug)
    return f"{slug}-{job_id}"


class IngestionService:
    """Runs the fetch, normalize, dedupe and insert pipeline."""

    def __init__(
        self,
        db: Optional[DatabaseManager] = None,
        events: Optional[EventManager] = None,
        fetcher: Optional[Fetcher] = None
    ):
        self.db = db
        self.events = events or event_manager
        self.fetcher = fetcher or fetch_from_source
        self.settings = get_settings()

        self.jobs = JobRepository(db)
        self.deduplicator = Deduplicator(job_repository=self.jobs)
        self.companies = CompanyService(db)
        self.analytics = SourceAnalyticsService(db)

    async def ingest_from_source(self, source: str, chunk: Optional[int] = None) -> IngestionResult:
        """
        Ingest one source.

        Args:
            source: Source name from ALL_SOURCES
            chunk: Work slice for chunked sources

        Returns:
            IngestionResult: Counters for the run

        Raises:
            UnknownSourceException: If the source is not known
        """
        if source not in ALL_SOURCES:
            raise UnknownSourceException(source)

        run_logger = get_run_logger(__name__, source, chunk=chunk)
        result = IngestionResult(source=source)
        started = time.monotonic()

        try:
            raw_jobs = await self.fetcher(source, chunk)
            result.fetched = len(raw_jobs)
            run_logger.info(f"Fetched {result.fetched} raw jobs")

            known_ids = await self.jobs.get_external_id_map(source)
            added_jobs: List[Dict[str, Any]] = []

            for index, raw in enumerate(raw_jobs, start=1):
                try:
                    await self._ingest_one(raw, source, known_ids, result, added_jobs)
                except Exception as e:
                    result.errors += 1
                    metrics.record_job_outcome(source, IngestionOutcomes.ERROR)
                    run_logger.error(f"Error ingesting job: {e}")

                if index % PROGRESS_LOG_INTERVAL == 0:
                    run_logger.info(
                        f"Processed {index}/{result.fetched}",
                        added=result.added,
                        duplicates=result.duplicates,
                        errors=result.errors
                    )

            await self.analytics.record_ingestion_stats(
                source, result.fetched, result.added, result.duplicates, added_jobs
            )

        except Exception as e:
            run_logger.error(f"Fatal error ingesting {source}: {e}")
            log_error(e, context={"source": source, "chunk": chunk})
            result.errors = result.fetched

        result.duration = round(time.monotonic() - started, 2)
        metrics.record_ingestion_duration(source, result.duration)
        log_performance_metric("ingestion_duration", result.duration, context={"source": source})
        run_logger.info(
            "Source ingestion finished",
            fetched=result.fetched,
            added=result.added,
            duplicates=result.duplicates,
            errors=result.errors
        )

        await self.events.emit(INGESTION_SOURCE_COMPLETED, {"result": result})
        return result

    async def _ingest_one(
        self,
        raw: Dict[str, Any],
        source: str,
        known_ids: Dict[str, str],
        result: IngestionResult,
        added_jobs: List[Dict[str, Any]]
    ) -> None:
        # Missing title or apply link: skipped like an irrelevant posting
        job = normalize_job(raw, source)
        if job is None:
            metrics.record_job_outcome(source, IngestionOutcomes.FILTERED)
            return

        if not is_relevant_job(job['title'], job['description']):
            metrics.record_job_outcome(source, IngestionOutcomes.FILTERED)
            return

        external_id = job.get('external_id')
        if external_id and external_id in known_ids:
            await self.jobs.renew(
                known_ids[external_id],
                renewal_days=self.settings.JOB_RENEWAL_DAYS,
                original_posted_at=job.get('original_posted_at')
            )
            result.duplicates += 1
            metrics.record_job_outcome(source, IngestionOutcomes.DUPLICATE)
            return

        duplicate = await self.deduplicator.check_duplicate(job)
        if duplicate.is_duplicate:
            logger.debug(
                f"Duplicate of {duplicate.matched_job_id}",
                match_type=duplicate.match_type,
                confidence=duplicate.confidence
            )
            await self.jobs.renew(
                duplicate.matched_job_id,
                renewal_days=self.settings.JOB_RENEWAL_DAYS,
                original_posted_at=job.get('original_posted_at')
            )
            result.duplicates += 1
            metrics.record_job_outcome(source, IngestionOutcomes.DUPLICATE)
            return

        job_id = generate_id()
        job['id'] = job_id
        job['slug'] = build_job_slug(job['title'], job_id)
        job['quality_score'] = compute_quality_score(job)

        created = await self.jobs.create(job)
        if created is None:
            result.errors += 1
            metrics.record_job_outcome(source, IngestionOutcomes.ERROR)
            return

        result.added += 1
        result.new_job_urls.append(f"{self.settings.SITE_URL}/jobs/{job['slug']}")
        metrics.record_job_outcome(source, IngestionOutcomes.ADDED)
        added_jobs.append(job)
        if external_id:
            known_ids[external_id] = job_id

        try:
            await self.companies.link_job_to_company(job_id, job['employer'])
        except Exception as e:
            logger.warning(f"Could not link job {job_id} to a company: {e}")

    async def ingest_jobs(
        self,
        sources: Optional[List[str]] = None,
        chunk: Optional[int] = None
    ) -> List[IngestionResult]:
        """
        Ingest several sources one after another.

        Runs the description cleanup when anything new was added, then
        copies employer contact e-mails into the leads table.
        """
        sources = sources or DEFAULT_CRON_SOURCES
        for source in sources:
            if source not in ALL_SOURCES:
                raise UnknownSourceException(source)

        results = []
        for source in sources:
            results.append(await self.ingest_from_source(source, chunk=chunk))

        total_added = sum(r.added for r in results)
        logger.info(
            "Ingestion run finished",
            sources=len(results),
            fetched=sum(r.fetched for r in results),
            added=total_added,
            duplicates=sum(r.duplicates for r in results),
            errors=sum(r.errors for r in results)
        )

        if total_added > 0:
            await clean_all_job_descriptions(self.db)

        try:
            await collect_employer_emails(self.db)
        except Exception as e:
            log_error(e, context={"step": "collect_employer_emails"})

        return results

    async def cleanup_expired_jobs(self) -> int:
        """Unpublish published jobs past their expiry date."""
        count = await self.jobs.unpublish_expired(datetime.utcnow())
        metrics.record_unpublished(UnpublishReasons.EXPIRED, count)
        log_database_operation("unpublish_expired", "jobs", count=count)
        return count

    async def get_ingestion_stats(self) -> Dict[str, Any]:
        return {
            "total_active": await self.jobs.count({"is_published": True}),
            "by_source": await self.jobs.count_by_source(published_only=True),
            "added_last_24h": await self.jobs.count_created_since(datetime.utcnow() - timedelta(hours=24)),
        }
