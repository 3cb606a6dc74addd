"""
Tests for the repository layer on the in-memory database.
"""

import pytest
from datetime import date, datetime, timedelta

from pmhnp_hiring.repositories.employer_repository import EmailLeadRepository
from pmhnp_hiring.repositories.job_repository import JobRepository
from pmhnp_hiring.repositories.source_stats_repository import SourceStatsRepository
from tests.conftest import build_job_data


@pytest.mark.database
class TestBaseRepository:
    """Test the shared CRUD operations."""

    async def test_create_update_delete(self, db):
        repository = JobRepository(db)

        job = await repository.create(build_job_data())
        assert job is not None

        updated = await repository.update(job.id, {"title": "PMHNP - Telehealth", "unknown_field": 1})
        assert updated.title == "PMHNP - Telehealth"

        assert await repository.delete(job.id) is True
        assert await repository.get_by_id(job.id) is None
        assert await repository.delete(job.id) is False

    async def test_update_missing(self, db):
        assert await JobRepository(db).update("missing", {"title": "x"}) is None

    async def test_create_integrity_error_returns_none(self, db, job_factory):
        await job_factory(slug="same-slug")

        assert await JobRepository(db).create(build_job_data(slug="same-slug", external_id="b")) is None

    async def test_count_with_filters(self, db, job_factory):
        await job_factory()
        await job_factory(external_id="lever-1", source_provider="lever")
        await job_factory(external_id="adzuna-1", source_provider="adzuna", is_published=False)

        repository = JobRepository(db)

        assert await repository.count() == 3
        assert await repository.count({"is_published": True}) == 2
        assert await repository.count({"source_provider": ["lever", "adzuna"]}) == 2


@pytest.mark.database
class TestJobRepository:
    """Test job specific queries."""

    async def test_external_id_lookups(self, db, job_factory):
        job = await job_factory()
        repository = JobRepository(db)

        assert await repository.get_external_id_map("greenhouse") == {"greenhouse-talkiatry-1001": job.id}
        assert (await repository.find_by_external_id("greenhouse", "greenhouse-talkiatry-1001")).id == job.id
        assert await repository.find_by_external_id("lever", "greenhouse-talkiatry-1001") is None

    async def test_renew_republishes(self, db, job_factory):
        job = await job_factory(is_published=False, expires_at=datetime.utcnow() - timedelta(days=2))
        posted = datetime(2025, 9, 1)
        repository = JobRepository(db)

        assert await repository.renew(job.id, renewal_days=60, original_posted_at=posted) is True

        renewed = await repository.get_by_id(job.id)
        assert renewed.is_published is True
        assert renewed.original_posted_at == posted
        assert renewed.expires_at > datetime.utcnow() + timedelta(days=59)

    async def test_renew_unknown_job(self, db):
        assert await JobRepository(db).renew("missing") is False

    async def test_unpublish_expired(self, db, job_factory):
        await job_factory(external_id="old", expires_at=datetime.utcnow() - timedelta(hours=1))
        await job_factory(external_id="fresh")

        repository = JobRepository(db)

        assert await repository.unpublish_expired() == 1
        assert await repository.count({"is_published": True}) == 1

    async def test_unpublish_ids(self, db, job_factory):
        first = await job_factory(external_id="a")
        await job_factory(external_id="b")
        repository = JobRepository(db)

        assert await repository.unpublish([]) == 0
        assert await repository.unpublish([first.id]) == 1
        assert (await repository.get_by_id(first.id)).is_published is False

    async def test_dead_link_candidates_skip_employer_jobs(self, db, job_factory):
        older = await job_factory(external_id="a", updated_at=datetime.utcnow() - timedelta(days=3))
        newer = await job_factory(external_id="b")
        await job_factory(external_id="c", source_type="employer")
        await job_factory(external_id="d", is_published=False)

        candidates = await JobRepository(db).get_dead_link_candidates()

        assert [job.id for job in candidates] == [older.id, newer.id]

    async def test_html_and_location_queries(self, db, job_factory):
        html_job = await job_factory(external_id="a", description="<p>Telehealth PMHNP</p>")
        unparsed = await job_factory(external_id="b", state=None, state_code=None, city=None)
        repository = JobRepository(db)

        assert [job.id for job in await repository.get_with_html()] == [html_job.id]
        assert [job.id for job in await repository.get_unparsed_locations()] == [unparsed.id]

    async def test_fragment_searches(self, db, job_factory):
        await job_factory(external_id="a", title="PMHNP - Outpatient", employer="Cerebral Inc")
        await job_factory(external_id="b", title="Registered Nurse", employer="Mercy Health")
        repository = JobRepository(db)

        assert [job.external_id for job in await repository.find_by_title_fragment("pmhnp")] == ["a"]
        assert [job.external_id for job in await repository.find_by_employer_fragment("mercy")] == ["b"]

    async def test_fragment_wildcards_match_literally(self, db, job_factory):
        await job_factory(external_id="a", title="PMHNP 100% Remote", employer="Mind_Care")
        await job_factory(external_id="b", title="PMHNP 100 Days Remote", employer="MindXCare")
        repository = JobRepository(db)

        assert [job.external_id for job in await repository.find_by_title_fragment("pmhnp 100% remote")] == ["a"]
        assert [job.external_id for job in await repository.find_by_employer_fragment("mind_care")] == ["a"]

    async def test_counts_by_source_and_recency(self, db, job_factory):
        await job_factory(external_id="a")
        await job_factory(external_id="b", source_provider="lever")
        await job_factory(
            external_id="c",
            source_provider="lever",
            created_at=datetime.utcnow() - timedelta(days=10)
        )
        repository = JobRepository(db)

        assert await repository.count_by_source() == {"greenhouse": 1, "lever": 2}
        assert await repository.count_created_since(datetime.utcnow() - timedelta(days=1)) == 2

    async def test_published_batch_keyset(self, db, job_factory):
        for index in range(3):
            await job_factory(external_id=f"job-{index}")
        repository = JobRepository(db)

        first = await repository.get_published_batch(limit=2)
        rest = await repository.get_published_batch(after_id=first[-1].id, limit=2)

        assert len(first) == 2
        assert len(rest) == 1
        assert rest[0].id > first[-1].id


@pytest.mark.database
class TestSourceStatsRepository:

    async def test_increment_accumulates_per_day(self, db):
        repository = SourceStatsRepository(db)
        today = date.today()

        await repository.increment("lever", today, fetched=10, added=4, duplicates=3, avg_quality_score=55.0)
        stats = await repository.increment("lever", today, fetched=5, added=1, duplicates=2)

        assert stats.jobs_fetched == 15
        assert stats.jobs_added == 5
        assert stats.jobs_duplicate == 5
        assert stats.avg_quality_score == 55.0

    async def test_get_since(self, db):
        repository = SourceStatsRepository(db)
        today = date.today()

        await repository.increment("adzuna", today - timedelta(days=40), fetched=1, added=1, duplicates=0)
        await repository.increment("adzuna", today, fetched=2, added=2, duplicates=0)

        rows = await repository.get_since(today - timedelta(days=30))

        assert [row.date for row in rows] == [today]


@pytest.mark.database
class TestEmailLeadRepository:

    async def test_get_or_create_is_idempotent(self, db):
        repository = EmailLeadRepository(db)

        lead = await repository.get_or_create("recruiter@example.com", "employer_job")
        again = await repository.get_or_create("recruiter@example.com", "newsletter")

        assert lead.id == again.id
        assert again.source == "employer_job"
        assert again.is_subscribed is True
        assert len(again.unsubscribe_token) > 0
