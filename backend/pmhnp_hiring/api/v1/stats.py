"""
Stats API v1 Endpoints

Read-only pipeline statistics.
"""

from typing import Dict

from fastapi import APIRouter, Depends, Query

from pmhnp_hiring.api.deps import get_freshness_service, get_ingestion_service, get_source_analytics
from pmhnp_hiring.schemas.ingestion import IngestionStats, SourceStatsResponse
from pmhnp_hiring.services.freshness_decay import FreshnessService
from pmhnp_hiring.services.ingestion_service import IngestionService
from pmhnp_hiring.services.source_analytics import SourceAnalyticsService

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/ingestion", response_model=IngestionStats)
async def ingestion_stats(service: IngestionService = Depends(get_ingestion_service)) -> IngestionStats:
    return IngestionStats(**await service.get_ingestion_stats())


@router.get("/sources", response_model=SourceStatsResponse)
async def source_stats(
    days: int = Query(30, ge=1, le=365, description="Look-back window in days"),
    analytics: SourceAnalyticsService = Depends(get_source_analytics)
) -> SourceStatsResponse:
    """Per-source totals over the last ``days`` days, most productive first."""
    return SourceStatsResponse(days=days, sources=await analytics.get_source_stats(days=days))


@router.get("/freshness")
async def freshness_stats(service: FreshnessService = Depends(get_freshness_service)) -> Dict[str, int]:
    return await service.get_freshness_stats()
