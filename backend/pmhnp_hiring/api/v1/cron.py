"""
Cron API v1 Endpoints

Scheduled pipeline jobs exposed over HTTP for external schedulers. Every
route requires the cron secret.
"""

import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from pmhnp_hiring.api.deps import (
    get_dead_link_checker,
    get_expiry_checker,
    get_freshness_service,
    get_ingestion_service,
)
from pmhnp_hiring.core.database import db_manager
from pmhnp_hiring.core.security import verify_cron_secret
from pmhnp_hiring.schemas.ingestion import IngestResponse
from pmhnp_hiring.services.dead_link_checker import DeadLinkChecker
from pmhnp_hiring.services.expiry_checker import ExpiryChecker
from pmhnp_hiring.services.freshness_decay import FreshnessService
from pmhnp_hiring.services.ingestion_service import IngestionService
from pmhnp_hiring.services.location_parser import parse_all_locations
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/cron", tags=["cron"], dependencies=[Depends(verify_cron_secret)])


@router.api_route("/ingest", methods=["GET", "POST"], response_model=IngestResponse)
async def ingest(
    source: Optional[str] = Query(None, description="Single source to ingest; default sources when omitted"),
    chunk: Optional[int] = Query(None, ge=0, description="Work chunk for Greenhouse and Workday"),
    service: IngestionService = Depends(get_ingestion_service)
) -> IngestResponse:
    """
    Ingest jobs, then unpublish expired listings.

    Discord notifications are sent per source by the subscribed notifier.
    """
    started = time.monotonic()
    sources = [source] if source else None

    results = await service.ingest_jobs(sources, chunk=chunk)
    expired_cleaned = await service.cleanup_expired_jobs()
    stats = await service.get_ingestion_stats()

    duration = round(time.monotonic() - started, 2)
    logger.info("Cron ingestion finished", sources=[r.source for r in results], duration=duration)

    return IngestResponse(
        success=True,
        results=[result.to_dict() for result in results],
        expired_cleaned=expired_cleaned,
        stats=stats,
        duration=duration
    )


@router.get("/check-dead-links")
async def check_dead_links(checker: DeadLinkChecker = Depends(get_dead_link_checker)) -> Dict[str, Any]:
    result = await checker.check_dead_links()
    return {"success": True, **result}


@router.get("/freshness-decay")
async def freshness_decay(service: FreshnessService = Depends(get_freshness_service)) -> Dict[str, Any]:
    result = await service.apply_freshness_decay()
    return {"success": True, **result}


@router.get("/expiry-warnings")
async def expiry_warnings(checker: ExpiryChecker = Depends(get_expiry_checker)) -> Dict[str, Any]:
    result = await checker.check_expiring_jobs()
    return {"success": True, **result}


@router.get("/parse-locations")
async def parse_locations() -> Dict[str, Any]:
    result = await parse_all_locations(db_manager)
    return {"success": True, **result}
