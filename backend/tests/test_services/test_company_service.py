"""
Tests for company creation, job linking and merging.
"""

import pytest

from pmhnp_hiring.core.exceptions import (
    CompanyMergeException,
    CompanyNotFoundException,
    JobNotFoundException,
    ValidationException,
)
from pmhnp_hiring.repositories.job_repository import JobRepository
from pmhnp_hiring.services.company_normalizer import CompanyService


@pytest.mark.database
class TestCompanyService:

    async def test_spelling_variants_share_one_company(self, db):
        service = CompanyService(db)

        first = await service.get_or_create_company("Acme Behavioral Health, LLC")
        second = await service.get_or_create_company("ACME Behavioral")

        assert first == second
        company = await service.companies.get_by_id(first)
        assert company.normalized_name == "acme behavioral"
        assert company.job_count == 2
        assert "ACME Behavioral" in company.aliases

    async def test_known_company_uses_canonical_name(self, db):
        service = CompanyService(db)

        company_id = await service.get_or_create_company("talkspace llc")

        company = await service.companies.get_by_id(company_id)
        assert company.name == "Talkspace"
        assert company.is_verified is True

    async def test_blank_employer_rejected(self, db):
        with pytest.raises(ValidationException):
            await CompanyService(db).get_or_create_company("   ")

    async def test_link_job_is_idempotent(self, db, job_factory):
        job = await job_factory()
        service = CompanyService(db)

        first = await service.link_job_to_company(job.id)
        second = await service.link_job_to_company(job.id)

        assert first == second
        stored = await JobRepository(db).get_by_id(job.id)
        assert stored.company_id == first
        company = await service.companies.get_by_id(first)
        assert company.job_count == 1

    async def test_link_missing_job(self, db):
        with pytest.raises(JobNotFoundException):
            await CompanyService(db).link_job_to_company("missing")

    async def test_link_all_jobs(self, db, job_factory):
        await job_factory(employer="Cerebral", external_id="a")
        await job_factory(employer="Cerebral Inc", external_id="b", apply_link="https://example.org/b")
        await job_factory(employer="Headway", external_id="c", apply_link="https://example.org/c")

        result = await CompanyService(db).link_all_jobs_to_companies()

        assert result == {"processed": 3, "linked": 3, "errors": 0}
        companies, total = await CompanyService(db).companies.list_companies()
        assert total == 2
        assert companies[0].name == "Cerebral"
        assert companies[0].job_count == 2

    async def test_merge_companies(self, db, job_factory):
        service = CompanyService(db)
        keep_job = await job_factory(employer="Brightside")
        merge_job = await job_factory(employer="Bright Side Telehealth", external_id="x",
                                      apply_link="https://example.org/x")
        keep_id = await service.link_job_to_company(keep_job.id)
        merge_id = await service.link_job_to_company(merge_job.id)
        assert keep_id != merge_id

        result = await service.merge_companies(keep_id, merge_id)

        assert result["jobs_transferred"] == 1
        moved = await JobRepository(db).get_by_id(merge_job.id)
        assert moved.company_id == keep_id
        assert await service.companies.get_by_id(merge_id) is None
        kept = await service.companies.get_by_id(keep_id)
        assert kept.job_count == 2

    async def test_merge_validation(self, db):
        service = CompanyService(db)

        with pytest.raises(CompanyMergeException):
            await service.merge_companies("same", "same")
        with pytest.raises(CompanyNotFoundException):
            await service.merge_companies("missing-a", "missing-b")
