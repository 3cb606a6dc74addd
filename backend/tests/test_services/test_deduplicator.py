"""
Tests for duplicate detection.
"""

import pytest

from pmhnp_hiring.services.deduplicator import (
    Deduplicator,
    calculate_similarity,
    normalize_apply_url,
    normalize_company,
    normalize_title,
)


@pytest.mark.unit
class TestDedupNormalization:

    def test_title_drops_stop_words_and_punctuation(self):
        assert normalize_title("The PMHNP - for Adults!") == "pmhnp adults"

    def test_company_drops_corporate_and_healthcare_suffixes(self):
        assert normalize_company("Spring Health, Inc.") == "spring"
        assert normalize_company("Mindpath Medical Group") == "mindpath"
        assert normalize_company("LifeStance Behavioral Healthcare Services") == "lifestance behavioral"

    def test_apply_url_strips_tracking(self):
        url = "https://Boards.greenhouse.io/acme/jobs/1?utm_source=indeed&gh_jid=1&ref=abc"

        assert normalize_apply_url(url) == "boards.greenhouse.io/acme/jobs/1?gh_jid=1"

    def test_apply_url_without_query(self):
        assert normalize_apply_url("https://jobs.lever.co/acme/123") == "jobs.lever.co/acme/123"
        assert normalize_apply_url(None) == ""

    def test_similarity(self):
        assert calculate_similarity("same", "same") == 1.0
        assert calculate_similarity("", "text") == 0.0
        assert calculate_similarity("abcd", "abce") == pytest.approx(0.75)


@pytest.mark.database
class TestDeduplicator:

    def new_job(self, **overrides):
        job = {
            "title": "Psychiatric Nurse Practitioner",
            "employer": "Talkiatry",
            "location": "Austin, TX",
            "apply_link": "https://example.org/apply/999",
            "source_provider": "lever",
            "external_id": "lever-other-999",
        }
        job.update(overrides)
        return job

    async def test_exact_source_id(self, db, job_factory):
        stored = await job_factory()
        deduplicator = Deduplicator(db)

        result = await deduplicator.check_duplicate(
            self.new_job(source_provider="greenhouse", external_id="greenhouse-talkiatry-1001")
        )

        assert result.is_duplicate is True
        assert result.match_type == "exact_id"
        assert result.confidence == 1.0
        assert result.matched_job_id == stored.id

    async def test_exact_title_employer_location(self, db, job_factory):
        stored = await job_factory()

        result = await Deduplicator(db).check_duplicate(self.new_job(employer="Talkiatry Inc"))

        assert result.match_type == "exact_title"
        assert result.confidence == 0.95
        assert result.matched_job_id == stored.id

    async def test_exact_title_with_shorter_employer_name(self, db, job_factory):
        stored = await job_factory(employer="Spring Health", external_id="spring-1")

        result = await Deduplicator(db).check_duplicate(self.new_job(employer="Spring"))

        assert result.is_duplicate is True
        assert result.match_type == "exact_title"
        assert result.confidence == 0.95
        assert result.matched_job_id == stored.id

    async def test_same_apply_url(self, db, job_factory):
        stored = await job_factory()

        result = await Deduplicator(db).check_duplicate(self.new_job(
            title="Psychiatric Nurse Practitioner - Nights",
            location="Remote",
            apply_link="https://boards.greenhouse.io/talkiatry/jobs/1001?utm_source=jooble"
        ))

        assert result.match_type == "apply_url"
        assert result.confidence == 0.90
        assert result.matched_job_id == stored.id

    async def test_fuzzy_title_and_employer(self, db, job_factory):
        stored = await job_factory()

        result = await Deduplicator(db).check_duplicate(self.new_job(
            title="Psychiatric Nurse Practitioners",
            location="Remote"
        ))

        assert result.match_type == "fuzzy_title"
        assert result.confidence > 0.85
        assert result.matched_job_id == stored.id

    async def test_not_duplicate(self, db, job_factory):
        await job_factory()

        result = await Deduplicator(db).check_duplicate(self.new_job(
            title="Outpatient PMHNP",
            employer="Cerebral",
            location="Remote"
        ))

        assert result.is_duplicate is False
        assert result.match_type == "none"

    async def test_batch_check_keeps_input_order(self, db, job_factory):
        await job_factory()
        jobs = [
            self.new_job(title="Outpatient PMHNP", employer="Cerebral"),
            self.new_job(employer="Talkiatry"),
        ]

        results = await Deduplicator(db).batch_check_duplicates(jobs)

        assert results[0].is_duplicate is False
        assert results[1].is_duplicate is True
