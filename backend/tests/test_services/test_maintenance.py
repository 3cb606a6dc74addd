"""
Tests for the scheduled maintenance jobs: freshness decay, expiry warnings,
location backfill and description cleanup.
"""

from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from pmhnp_hiring.core.exceptions import JobNotFoundException
from pmhnp_hiring.repositories.employer_repository import EmployerJobRepository
from pmhnp_hiring.repositories.job_repository import JobRepository
from pmhnp_hiring.services.description_cleaner import clean_all_job_descriptions
from pmhnp_hiring.services.expiry_checker import ExpiryChecker
from pmhnp_hiring.services.freshness_decay import (
    FreshnessService,
    calculate_freshness_score,
    freshness_bucket,
    should_unpublish,
)
from pmhnp_hiring.services.location_parser import parse_all_locations, parse_job_location

NOW = datetime(2026, 10, 19, 12, 0, 0)


def days_ago(days: float) -> datetime:
    return datetime.utcnow() - timedelta(days=days)


@pytest.mark.unit
class TestFreshnessRules:

    def job(self, **fields):
        defaults = {
            "source_type": "external",
            "original_posted_at": None,
            "created_at": NOW,
            "updated_at": NOW,
        }
        defaults.update(fields)
        return SimpleNamespace(**defaults)

    @pytest.mark.parametrize("age_days,score", [(1, 20), (5, 15), (10, 10), (30, 5), (60, 0)])
    def test_score_by_posting_age(self, age_days, score):
        job = self.job(original_posted_at=NOW - timedelta(days=age_days))

        assert calculate_freshness_score(job, NOW) == score

    def test_score_falls_back_to_created_at(self):
        job = self.job(created_at=NOW - timedelta(days=2))

        assert calculate_freshness_score(job, NOW) == 20

    def test_buckets(self):
        assert freshness_bucket(NOW - timedelta(days=2), NOW, NOW) == "fresh"
        assert freshness_bucket(None, NOW - timedelta(days=100), NOW) == "stale"

    def test_unseen_external_job_is_unpublished(self):
        assert should_unpublish(self.job(updated_at=NOW - timedelta(days=90)), NOW) is True
        assert should_unpublish(self.job(updated_at=NOW - timedelta(days=89)), NOW) is False

    def test_employer_jobs_are_protected(self):
        job = self.job(source_type="employer", updated_at=NOW - timedelta(days=400))

        assert should_unpublish(job, NOW) is False


@pytest.mark.database
class TestFreshnessService:

    async def test_apply_freshness_decay(self, db, job_factory):
        stale = await job_factory(updated_at=days_ago(100))
        await job_factory(external_id="fresh")
        await job_factory(external_id="employer", source_type="employer", updated_at=days_ago(200))

        result = await FreshnessService(db).apply_freshness_decay(batch_size=2)

        assert result == {"updated": 2, "unpublished": 1}
        assert (await JobRepository(db).get_by_id(stale.id)).is_published is False

    async def test_refresh_job(self, db, job_factory):
        job = await job_factory(is_published=False, updated_at=days_ago(100))

        await FreshnessService(db).refresh_job(job.id)

        refreshed = await JobRepository(db).get_by_id(job.id)
        assert refreshed.is_published is True
        assert refreshed.updated_at > days_ago(1)

    async def test_refresh_missing_job(self, db):
        with pytest.raises(JobNotFoundException):
            await FreshnessService(db).refresh_job("missing")

    async def test_freshness_stats(self, db, job_factory):
        await job_factory(original_posted_at=days_ago(1))
        await job_factory(external_id="b", original_posted_at=days_ago(20))
        await job_factory(external_id="c", original_posted_at=days_ago(20), is_published=False)

        stats = await FreshnessService(db).get_freshness_stats()

        assert stats == {"fresh": 1, "recent": 0, "normal": 0, "aging": 1, "stale": 0}


@pytest.mark.database
class TestExpiryChecker:

    async def test_warns_once_per_expiring_listing(self, db, job_factory):
        expiring = await job_factory(source_type="employer", expires_at=datetime.utcnow() + timedelta(days=3))
        later = await job_factory(source_type="employer", expires_at=datetime.utcnow() + timedelta(days=20))
        employer_jobs = EmployerJobRepository(db)
        await employer_jobs.create({
            "job_id": expiring.id, "employer_name": "Acme", "contact_email": "hr@acme.test"
        })
        await employer_jobs.create({
            "job_id": later.id, "employer_name": "Acme", "contact_email": "hr@acme.test"
        })
        sent = []

        async def notifier(employer_job, job, dashboard_url, unsubscribe_url):
            sent.append((job.id, dashboard_url, unsubscribe_url))
            return True

        checker = ExpiryChecker(db, notifier=notifier)

        first = await checker.check_expiring_jobs()
        second = await checker.check_expiring_jobs()

        assert first == {"checked": 1, "warnings_sent": 1, "errors": []}
        assert second["checked"] == 0
        assert sent[0][0] == expiring.id
        assert "/employer/dashboard/" in sent[0][1]
        assert "/unsubscribe?token=" in sent[0][2]

    async def test_failed_delivery_is_reported(self, db, job_factory):
        job = await job_factory(source_type="employer", expires_at=datetime.utcnow() + timedelta(days=1))
        await EmployerJobRepository(db).create({
            "job_id": job.id, "employer_name": "Acme", "contact_email": "hr@acme.test"
        })

        async def notifier(*args):
            return False

        result = await ExpiryChecker(db, notifier=notifier).check_expiring_jobs()

        assert result["warnings_sent"] == 0
        assert len(result["errors"]) == 1


@pytest.mark.database
class TestBackfills:

    async def test_parse_all_locations(self, db, job_factory):
        await job_factory(location="Portland, Oregon", city=None, state=None, state_code=None)
        await job_factory(external_id="r", location="Remote", city=None, state=None, state_code=None)
        await job_factory(external_id="done")

        result = await parse_all_locations(db)

        assert result == {"processed": 2, "parsed": 1, "remote": 1}

    async def test_parse_job_location(self, db, job_factory):
        job = await job_factory(location="Chicago IL 60601", city=None, state=None, state_code=None)

        parsed = await parse_job_location(job.id, db)

        assert parsed.state_code == "IL"
        stored = await JobRepository(db).get_by_id(job.id)
        assert stored.city == "Chicago"
        assert stored.state == "Illinois"

    async def test_clean_all_job_descriptions(self, db, job_factory):
        job = await job_factory(description="<p>Manage medications &amp; therapy</p>")
        await job_factory(external_id="clean")

        result = await clean_all_job_descriptions(db)

        assert result["cleaned"] == 1
        stored = await JobRepository(db).get_by_id(job.id)
        assert stored.description == "Manage medications & therapy"
        assert stored.description_summary == "Manage medications & therapy"
