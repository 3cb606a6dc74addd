"""
Tests for the ingestion pipeline.

Sources are replaced by an in-memory fetcher so no network is involved.
"""

from datetime import datetime, timedelta

import pytest

from pmhnp_hiring.core.events import EventManager, INGESTION_SOURCE_COMPLETED
from pmhnp_hiring.core.exceptions import UnknownSourceException
from pmhnp_hiring.repositories.employer_repository import EmailLeadRepository, EmployerJobRepository
from pmhnp_hiring.repositories.job_repository import JobRepository
from pmhnp_hiring.services.employer_email_collector import collect_employer_emails
from pmhnp_hiring.services.ingestion_service import IngestionService, build_job_slug
from pmhnp_hiring.services.source_analytics import SourceAnalyticsService
from pmhnp_hiring.utils.metrics import metrics


def static_fetcher(raw_jobs):
    calls = []

    async def fetch(source, chunk):
        calls.append((source, chunk))
        return [dict(raw) for raw in raw_jobs]

    fetch.calls = calls
    return fetch


@pytest.mark.unit
def test_build_job_slug():
    slug = build_job_slug("Psychiatric Mental Health Nurse Practitioner (PMHNP)", "abc123")

    assert slug == "psychiatric-mental-health-nurse-practitioner-pmhnp-abc123"


@pytest.mark.database
class TestIngestionService:

    @pytest.fixture
    def events(self):
        return EventManager()

    @pytest.fixture
    def irrelevant_job(self):
        return {
            "title": "Software Engineer",
            "company": "Acme",
            "location": "Remote",
            "description": "Build APIs",
            "applyLink": "https://boards.greenhouse.io/acme/jobs/1",
            "externalId": "greenhouse-acme-1",
        }

    async def test_new_job_is_added(self, db, events, raw_greenhouse_job, irrelevant_job):
        completed = []
        events.subscribe(INGESTION_SOURCE_COMPLETED, completed.append)
        fetcher = static_fetcher([raw_greenhouse_job, irrelevant_job, {"title": "PMHNP"}])
        service = IngestionService(db, events=events, fetcher=fetcher)

        results = await service.ingest_jobs(["greenhouse"], chunk=1)

        assert fetcher.calls == [("greenhouse", 1)]
        result = results[0]
        assert result.fetched == 3
        assert result.added == 1
        assert result.duplicates == 0
        assert result.errors == 0
        assert result.new_job_urls[0].startswith(
            f"{service.settings.SITE_URL}/jobs/psychiatric-mental-health-nurse-practitioner-pmhnp-"
        )

        job = await JobRepository(db).find_by_external_id("greenhouse", "greenhouse-talkiatry-4242")
        assert job is not None
        assert job.is_published is True
        assert job.company_id is not None
        assert job.quality_score > 0
        assert job.slug.startswith("psychiatric-mental-health-nurse-practitioner-pmhnp-")

        assert len(completed) == 1
        assert completed[0].data["result"] is result

    async def test_known_job_is_renewed(self, db, events, raw_greenhouse_job):
        service = IngestionService(db, events=events, fetcher=static_fetcher([raw_greenhouse_job]))
        await service.ingest_from_source("greenhouse")

        result = await service.ingest_from_source("greenhouse")

        assert result.added == 0
        assert result.duplicates == 1
        job = await JobRepository(db).find_by_external_id("greenhouse", "greenhouse-talkiatry-4242")
        assert job.expires_at > datetime.utcnow() + timedelta(days=59)
        assert await JobRepository(db).count() == 1

    async def test_cross_posting_is_duplicate(self, db, events, raw_greenhouse_job):
        repost = dict(
            raw_greenhouse_job,
            externalId="greenhouse-talkiatry-9999",
            applyLink="https://boards.greenhouse.io/talkiatry/jobs/9999"
        )
        service = IngestionService(db, events=events, fetcher=static_fetcher([raw_greenhouse_job, repost]))

        result = await service.ingest_from_source("greenhouse")

        assert result.added == 1
        assert result.duplicates == 1

    async def test_source_stats_recorded(self, db, events, raw_greenhouse_job, irrelevant_job):
        service = IngestionService(db, events=events, fetcher=static_fetcher([raw_greenhouse_job, irrelevant_job]))

        await service.ingest_from_source("greenhouse")

        report = await SourceAnalyticsService(db).get_source_stats(days=1)
        assert len(report) == 1
        assert report[0]["source"] == "greenhouse"
        assert report[0]["fetched"] == 2
        assert report[0]["added"] == 1
        assert report[0]["duplicate_rate"] == 0.0

    async def test_fetch_failure_is_contained(self, db, events):
        completed = []
        events.subscribe(INGESTION_SOURCE_COMPLETED, completed.append)

        async def failing_fetcher(source, chunk):
            raise RuntimeError("source down")

        service = IngestionService(db, events=events, fetcher=failing_fetcher)

        result = await service.ingest_from_source("lever")

        assert result.fetched == 0
        assert result.added == 0
        assert len(completed) == 1

    async def test_job_missing_apply_link_counts_as_filtered(self, db, events):
        labels = {"source": "ashby", "outcome": "filtered"}
        before = metrics.registry.get_sample_value("jobs_ingested_total", labels) or 0
        service = IngestionService(db, events=events, fetcher=static_fetcher([{"title": "PMHNP"}]))

        result = await service.ingest_from_source("ashby")

        assert result.fetched == 1
        assert result.added == 0
        assert result.errors == 0
        assert metrics.registry.get_sample_value("jobs_ingested_total", labels) == before + 1

    async def test_employer_emails_collected_after_run(self, db, events, job_factory):
        acme_job = await job_factory(external_id="employer-acme")
        mindful_job = await job_factory(external_id="employer-mindful")
        employer_jobs = EmployerJobRepository(db)
        await employer_jobs.create({"job_id": acme_job.id, "employer_name": "Acme", "contact_email": "Hiring@Acme.com"})
        await employer_jobs.create(
            {"job_id": mindful_job.id, "employer_name": "Mindful", "contact_email": "jobs@mindful.org"}
        )
        leads = EmailLeadRepository(db)
        lapsed = await leads.get_or_create("jobs@mindful.org", "newsletter")
        await leads.update(lapsed.id, {"is_subscribed": False})
        service = IngestionService(db, events=events, fetcher=static_fetcher([]))

        await service.ingest_jobs(["workday"])

        acme = await leads.get_by_email("hiring@acme.com")
        assert acme.source == "employer_posting"
        assert acme.is_subscribed is True
        mindful = await leads.get_by_email("jobs@mindful.org")
        assert mindful.is_subscribed is True
        assert mindful.source == "newsletter"
        assert await leads.count() == 2

        assert await collect_employer_emails(db) == {"created": 0, "updated": 0, "total": 2}

    async def test_unknown_source(self, db, events):
        service = IngestionService(db, events=events, fetcher=static_fetcher([]))

        with pytest.raises(UnknownSourceException):
            await service.ingest_jobs(["monster"])

    async def test_cleanup_expired_jobs(self, db, job_factory, events):
        await job_factory(expires_at=datetime.utcnow() - timedelta(days=1))
        await job_factory(external_id="greenhouse-talkiatry-1002")
        service = IngestionService(db, events=events, fetcher=static_fetcher([]))

        assert await service.cleanup_expired_jobs() == 1

        stats = await service.get_ingestion_stats()
        assert stats["total_active"] == 1
        assert stats["by_source"] == {"greenhouse": 1}
        assert stats["added_last_24h"] == 2
