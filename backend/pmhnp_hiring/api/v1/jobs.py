"""
Jobs API v1 Endpoints

Public job listing and detail endpoints, plus the admin refresh action.
"""

from typing import Optional, Union

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from pmhnp_hiring.api.deps import Pagination, get_freshness_service, get_job_repository
from pmhnp_hiring.core.exceptions import JobNotFoundException
from pmhnp_hiring.core.rate_limit import rate_limit
from pmhnp_hiring.core.security import verify_cron_secret
from pmhnp_hiring.repositories.job_repository import JobRepository
from pmhnp_hiring.schemas.job import JobListResponse, JobResponse
from pmhnp_hiring.services.freshness_decay import FreshnessService
from pmhnp_hiring.utils.logger import get_logger
from pmhnp_hiring.utils.metrics import metrics

logger = get_logger(__name__)
router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get(
    "",
    response_model=JobListResponse,
    dependencies=[Depends(rate_limit("general"))]
)
async def list_jobs(
    pagination: Pagination = Depends(),
    search: Optional[str] = Query(None, description="Search title, employer and description"),
    job_type: Optional[str] = Query(None, description="Full-Time, Part-Time, Contract or Per Diem"),
    mode: Optional[str] = Query(None, description="Remote, Hybrid or In-Person"),
    state: Optional[str] = Query(None, description="State name or two-letter code"),
    min_salary: Optional[int] = Query(None, ge=0, description="Minimum annual salary"),
    jobs: JobRepository = Depends(get_job_repository)
) -> Union[JobListResponse, JSONResponse]:
    """List published jobs, featured first, newest first."""
    with metrics.time_api_call("jobs.list"):
        try:
            items, total = await jobs.list_published(
                skip=pagination.offset,
                limit=pagination.limit,
                search=search,
                job_type=job_type,
                mode=mode,
                state=state,
                min_salary=min_salary
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch jobs: {e}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Failed to fetch jobs"}
            )

    return JobListResponse(
        jobs=[JobResponse.model_validate(job) for job in items],
        total=total,
        page=pagination.page,
        total_pages=pagination.total_pages(total)
    )


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: str, jobs: JobRepository = Depends(get_job_repository)) -> JobResponse:
    job = await jobs.get_by_id(job_id)
    if not job:
        raise JobNotFoundException(job_id)
    return JobResponse.model_validate(job)


@router.post("/{job_id}/refresh", dependencies=[Depends(verify_cron_secret)])
async def refresh_job(
    job_id: str,
    freshness: FreshnessService = Depends(get_freshness_service)
):
    """Reset the job's renewal clock and republish it."""
    await freshness.refresh_job(job_id)
    return {"success": True, "job_id": job_id}
