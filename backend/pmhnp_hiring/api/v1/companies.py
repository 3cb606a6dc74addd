"""
Companies API v1 Endpoints

Company directory and admin actions (bulk linking, merging).
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from pmhnp_hiring.api.deps import clamp, get_company_service
from pmhnp_hiring.core.security import verify_cron_secret
from pmhnp_hiring.schemas.company import CompanyAction, CompanyListResponse, CompanyResponse
from pmhnp_hiring.services.company_normalizer import CompanyService
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/companies", tags=["companies"])

DEFAULT_LIMIT = 50
MAX_LIMIT = 500


@router.get("", response_model=CompanyListResponse)
async def list_companies(
    limit: Optional[int] = Query(DEFAULT_LIMIT, description="Companies to return (1-500)"),
    sort: str = Query("job_count", pattern="^(job_count|name|created_at|verified)$"),
    service: CompanyService = Depends(get_company_service)
) -> CompanyListResponse:
    companies, total = await service.companies.list_companies(
        limit=clamp(limit, 1, MAX_LIMIT, DEFAULT_LIMIT),
        sort=sort
    )
    return CompanyListResponse(
        companies=[CompanyResponse.model_validate(company) for company in companies],
        total=total
    )


@router.post("", dependencies=[Depends(verify_cron_secret)])
async def company_action(
    body: CompanyAction,
    service: CompanyService = Depends(get_company_service)
) -> Dict[str, Any]:
    """Run ``link-all`` or ``merge``."""
    if body.action == "link-all":
        result = await service.link_all_jobs_to_companies()
    else:
        result = await service.merge_companies(body.keep_id, body.merge_id)

    logger.info(f"Company action {body.action} finished", result=result)
    return {"success": True, "action": body.action, "result": result}
