"""
Tests for the PMHNP relevance filter and the listing quality score.
"""

import pytest

from pmhnp_hiring.services.job_filter import is_relevant_job
from pmhnp_hiring.services.quality_score import (
    compute_quality_score,
    is_direct_ats_link,
    is_job_board_link,
)


@pytest.mark.unit
class TestRelevanceFilter:

    @pytest.mark.parametrize("title", [
        "Psychiatric Nurse Practitioner",
        "PMHNP - Outpatient Clinic",
        "Telehealth Psych NP",
        "Nurse Practitioner - Psychiatry",
        "Behavioral Health Nurse Practitioner (Part-Time)",
    ])
    def test_psychiatric_np_titles_accepted(self, title):
        assert is_relevant_job(title, "") is True

    def test_generic_title_needs_psych_marker_in_title(self):
        assert is_relevant_job("Nurse Practitioner", "Join our psychiatric practice.") is False

    def test_np_title_with_psychiatric_context(self):
        assert is_relevant_job("Outpatient NP", "Provide psychiatric medication management.") is True

    def test_unrelated_np_rejected(self):
        assert is_relevant_job("Family Nurse Practitioner", "Primary care clinic") is False

    def test_other_profession_rejected(self):
        assert is_relevant_job("Therapist", "We also hire a PMHNP.") is False
        assert is_relevant_job("Registered Nurse - Behavioral Health", "Inpatient unit") is False

    def test_psychiatrist_allowed_alongside_np_role(self):
        assert is_relevant_job(
            "Psychiatrist or Psychiatric Nurse Practitioner",
            "PMHNP-BC or board-certified psychiatrist"
        ) is True

    def test_misspelled_centralized_np_title_rejected(self):
        assert is_relevant_job(
            "Centralized Nurse Practioner",
            "Support our psychiatric mental health nurse practitioner (PMHNP) team."
        ) is False

    def test_empty(self):
        assert is_relevant_job("", "") is False
        assert is_relevant_job(None, None) is False


@pytest.mark.unit
class TestQualityScore:

    def test_link_classification(self):
        assert is_direct_ats_link("https://boards.greenhouse.io/acme/jobs/1") is True
        assert is_job_board_link("https://www.indeed.com/viewjob?jk=1") is True
        assert is_direct_ats_link("not a url") is False

    def test_complete_listing(self):
        job = {
            "apply_link": "https://jobs.lever.co/acme/123",
            "display_salary": "$150k-$180k/yr",
            "description_summary": "Provide psychiatric care to adults via telehealth.",
            "city": "Austin",
            "state": "Texas",
        }

        assert compute_quality_score(job) == 70

    def test_job_board_listing_without_details(self):
        assert compute_quality_score({"apply_link": "https://www.ziprecruiter.com/jobs/1"}) == 0

    def test_unknown_domain_and_long_description(self):
        job = {
            "apply_link": "https://careers.example-clinic.org/pmhnp",
            "description": "x" * 250,
            "state": "Ohio",
        }

        assert compute_quality_score(job) == 30

    def test_employer_posted_is_capped(self):
        job = {
            "apply_link": "https://boards.greenhouse.io/acme/jobs/1",
            "normalized_min_salary": 150000,
            "description_summary": "A long enough summary for full points.",
            "city": "Austin",
            "state": "Texas",
            "source_type": "employer",
        }

        assert compute_quality_score(job) == 100
