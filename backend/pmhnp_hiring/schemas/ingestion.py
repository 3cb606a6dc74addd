"""
Ingestion Pydantic Schemas

Response models for the cron and statistics endpoints.
"""

from typing import Dict, List

from pydantic import BaseModel, Field


class SourceResult(BaseModel):
    source: str
    fetched: int = 0
    added: int = 0
    duplicates: int = 0
    errors: int = 0
    duration: float = 0.0
    new_job_urls: List[str] = Field(default_factory=list)


class IngestionStats(BaseModel):
    total_active: int = Field(..., description="Published jobs")
    by_source: Dict[str, int] = Field(default_factory=dict, description="Published jobs per source")
    added_last_24h: int = Field(0, description="Jobs created in the last 24 hours")


class IngestResponse(BaseModel):
    """Result of a cron ingestion run."""

    success: bool = True
    results: List[SourceResult]
    expired_cleaned: int = Field(0, description="Jobs unpublished because they expired")
    stats: IngestionStats
    duration: float = Field(..., description="Wall time in seconds")


class SourceStatsEntry(BaseModel):
    source: str
    fetched: int
    added: int
    duplicates: int
    duplicate_rate: float
    avg_quality_score: float


class SourceStatsResponse(BaseModel):
    days: int
    sources: List[SourceStatsEntry]
