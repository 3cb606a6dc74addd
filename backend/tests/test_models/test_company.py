"""
Tests for Company model.

Tests database operations and constraints for companies and their jobs.
"""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from pmhnp_hiring.models.company import Company
from pmhnp_hiring.models.job import Job
from tests.conftest import build_job_data


@pytest.mark.database
@pytest.mark.unit
class TestCompanyModel:
    """Test Company model functionality."""

    async def test_create_company(self, db):
        """Test creating a company with defaults."""
        async with db.session_factory() as session:
            company = Company(name="Talkiatry", normalized_name="talkiatry")
            session.add(company)
            await session.commit()
            await session.refresh(company)

        assert company.id is not None
        assert company.aliases == []
        assert company.job_count == 0
        assert company.is_verified is False

    async def test_company_unique_normalized_name(self, db):
        """Test that normalized names are unique."""
        async with db.session_factory() as session:
            session.add(Company(name="Talkiatry", normalized_name="talkiatry"))
            await session.commit()

        with pytest.raises(IntegrityError):
            async with db.session_factory() as session:
                session.add(Company(name="Talkiatry Inc", normalized_name="talkiatry"))
                await session.commit()

    async def test_company_jobs_relationship(self, db):
        async with db.session_factory() as session:
            company = Company(name="Cerebral", normalized_name="cerebral", aliases=["Cerebral Inc"])
            session.add(company)
            session.add(Job(**build_job_data(employer="Cerebral Inc", company=company)))
            await session.commit()
            company_id = company.id

        async with db.session_factory() as session:
            result = await session.execute(
                select(Company).options(selectinload(Company.jobs)).where(Company.id == company_id)
            )
            stored = result.scalar_one()

        assert stored.aliases == ["Cerebral Inc"]
        assert [job.employer for job in stored.jobs] == ["Cerebral Inc"]

    def test_company_repr(self):
        company = Company(id="c1", name="Headway", normalized_name="headway", job_count=3)

        assert repr(company) == "<Company(id=c1, name='Headway', jobs=3)>"
