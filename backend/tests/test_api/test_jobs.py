"""
Tests for Jobs API endpoints.

Listing, filtering, pagination, detail lookups, rate limiting and the
admin refresh action.
"""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from pmhnp_hiring.core.rate_limit import RATE_LIMITS, rate_limiter


@pytest.mark.api
class TestJobsAPI:
    """Test Jobs API endpoints."""

    async def test_get_jobs_empty(self, test_client: AsyncClient):
        """Test getting jobs when database is empty."""
        response = await test_client.get("/api/v1/jobs")

        assert response.status_code == 200
        assert response.json() == {"jobs": [], "total": 0, "page": 1, "total_pages": 0}

    async def test_get_jobs_with_data(self, test_client: AsyncClient, job_factory):
        """Test listing published jobs, featured first."""
        await job_factory(title="Outpatient PMHNP", external_id="a")
        featured = await job_factory(title="Telehealth PMHNP", external_id="b", is_featured=True)
        await job_factory(title="Unpublished PMHNP", external_id="c", is_published=False)

        response = await test_client.get("/api/v1/jobs")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["total_pages"] == 1
        assert data["jobs"][0]["id"] == featured.id
        assert {job["title"] for job in data["jobs"]} == {"Outpatient PMHNP", "Telehealth PMHNP"}

    async def test_filters(self, test_client: AsyncClient, job_factory):
        """Test state, mode and salary filters."""
        await job_factory(external_id="tx", normalized_min_salary=150000)
        await job_factory(
            external_id="ca", state="California", state_code="CA", mode="In-Person",
            normalized_min_salary=120000
        )

        by_state = (await test_client.get("/api/v1/jobs", params={"state": "tx"})).json()
        by_mode = (await test_client.get("/api/v1/jobs", params={"mode": "In-Person"})).json()
        by_salary = (await test_client.get("/api/v1/jobs", params={"min_salary": 140000})).json()

        assert [job["state_code"] for job in by_state["jobs"]] == ["TX"]
        assert [job["state_code"] for job in by_mode["jobs"]] == ["CA"]
        assert [job["state_code"] for job in by_salary["jobs"]] == ["TX"]

    async def test_search(self, test_client: AsyncClient, job_factory):
        await job_factory(employer="Cerebral", external_id="a")
        await job_factory(employer="Headway", external_id="b")

        data = (await test_client.get("/api/v1/jobs", params={"search": "cereb"})).json()

        assert data["total"] == 1
        assert data["jobs"][0]["employer"] == "Cerebral"

    async def test_pagination(self, test_client: AsyncClient, job_factory):
        """Test page and limit parameters."""
        now = datetime.utcnow()
        for i in range(5):
            await job_factory(external_id=f"job-{i}", created_at=now - timedelta(minutes=i))

        response = await test_client.get("/api/v1/jobs", params={"page": 2, "limit": 2})

        data = response.json()
        assert data["total"] == 5
        assert data["page"] == 2
        assert data["total_pages"] == 3
        assert len(data["jobs"]) == 2

    async def test_invalid_pagination(self, test_client: AsyncClient):
        """Test limit above the maximum page size."""
        response = await test_client.get("/api/v1/jobs", params={"limit": 500})

        assert response.status_code == 422

    async def test_rate_limited(self, test_client: AsyncClient):
        """Test the general rate limit on the listing endpoint."""
        config = RATE_LIMITS["general"]
        for _ in range(config.limit):
            await rate_limiter.check("127.0.0.1", "general", config)

        response = await test_client.get("/api/v1/jobs")

        assert response.status_code == 429
        assert response.json()["error"]["error_code"] == "RATE_LIMIT_EXCEEDED"
        assert int(response.headers["Retry-After"]) >= 1
        assert response.headers["X-RateLimit-Limit"] == str(config.limit)
        assert response.headers["X-RateLimit-Remaining"] == "0"

    async def test_get_job_by_id(self, test_client: AsyncClient, job_factory):
        """Test getting a specific job by ID."""
        job = await job_factory()

        response = await test_client.get(f"/api/v1/jobs/{job.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == job.id
        assert data["employer"] == "Talkiatry"
        assert data["apply_link"] == job.apply_link

    async def test_get_job_not_found(self, test_client: AsyncClient):
        """Test getting non-existent job."""
        response = await test_client.get("/api/v1/jobs/missing")

        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "RESOURCE_NOT_FOUND"

    async def test_refresh_job(self, test_client: AsyncClient, job_factory):
        """Test republishing a job through the admin action."""
        job = await job_factory(is_published=False)

        response = await test_client.post(f"/api/v1/jobs/{job.id}/refresh")

        assert response.status_code == 200
        assert response.json() == {"success": True, "job_id": job.id}
        listing = (await test_client.get("/api/v1/jobs")).json()
        assert listing["total"] == 1
