"""
Test Configuration for PMHNP Hiring

Shared fixtures: an in-memory SQLite database bound to the global
database manager, an ASGI test client and job factories.
"""

import os

os.environ.setdefault("TESTING", "true")
os.environ.setdefault("ENVIRONMENT", "development")

from datetime import datetime, timedelta
from typing import Any, Dict

import httpx
import pytest

from pmhnp_hiring.core.database import db_manager
from pmhnp_hiring.core.rate_limit import rate_limiter
from pmhnp_hiring.repositories.job_repository import JobRepository

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def db():
    """Fresh in-memory database on the global manager."""
    await db_manager.init_database(TEST_DATABASE_URL, use_redis=False)
    await db_manager.create_tables()
    try:
        yield db_manager
    finally:
        await db_manager.close_connections()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
async def test_client(db):
    """HTTP client talking to the app in-process."""
    from pmhnp_hiring.main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def build_job_data(**overrides) -> Dict[str, Any]:
    """Column values for a published external job."""
    now = datetime.utcnow()
    data: Dict[str, Any] = {
        "title": "Psychiatric Nurse Practitioner",
        "employer": "Talkiatry",
        "location": "Austin, TX",
        "description": "Provide psychiatric evaluations and medication management via telehealth.",
        "description_summary": "Provide psychiatric evaluations and medication management via telehealth.",
        "apply_link": "https://boards.greenhouse.io/talkiatry/jobs/1001",
        "job_type": "Full-Time",
        "mode": "Remote",
        "city": "Austin",
        "state": "Texas",
        "state_code": "TX",
        "source_type": "external",
        "source_provider": "greenhouse",
        "external_id": "greenhouse-talkiatry-1001",
        "is_published": True,
        "expires_at": now + timedelta(days=30),
        "created_at": now,
        "updated_at": now,
    }
    data.update(overrides)
    return data


@pytest.fixture
def job_factory(db):
    """Insert jobs through the repository."""
    repository = JobRepository(db)

    async def create(**overrides):
        job = await repository.create(build_job_data(**overrides))
        assert job is not None
        return job

    return create


@pytest.fixture
def raw_greenhouse_job() -> Dict[str, Any]:
    """Raw payload as produced by the Greenhouse aggregator."""
    return {
        "title": "Psychiatric Mental Health Nurse Practitioner (PMHNP)",
        "company": "Talkiatry",
        "location": "Remote",
        "description": "<p>Join our team as a <strong>PMHNP</strong>. Full-time, $150,000 - $180,000 per year.</p>",
        "applyLink": "https://boards.greenhouse.io/talkiatry/jobs/4242",
        "externalId": "greenhouse-talkiatry-4242",
        "postedDate": "2026-10-15T12:00:00Z",
    }
