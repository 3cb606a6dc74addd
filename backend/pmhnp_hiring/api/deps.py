"""
API Dependencies

Service factories and shared guards used across API endpoints. Routes
depend on these so tests can swap a service through
``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Query

from pmhnp_hiring.core.database import db_manager
from pmhnp_hiring.services.company_normalizer import CompanyService
from pmhnp_hiring.services.dead_link_checker import DeadLinkChecker
from pmhnp_hiring.services.expiry_checker import ExpiryChecker
from pmhnp_hiring.services.freshness_decay import FreshnessService
from pmhnp_hiring.services.ingestion_service import IngestionService
from pmhnp_hiring.services.source_analytics import SourceAnalyticsService
from pmhnp_hiring.repositories.job_repository import JobRepository

MAX_PAGE_SIZE = 100


class Pagination:
    """Page-based pagination parameters."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number"),
        limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE, description="Page size")
    ) -> None:
        self.page = page
        self.limit = limit
        self.offset = (page - 1) * limit

    def total_pages(self, total: int) -> int:
        return (total + self.limit - 1) // self.limit if total else 0


def get_job_repository() -> JobRepository:
    return JobRepository(db_manager)


def get_ingestion_service() -> IngestionService:
    return IngestionService(db_manager)


def get_company_service() -> CompanyService:
    return CompanyService(db_manager)


def get_freshness_service() -> FreshnessService:
    return FreshnessService(db_manager)


def get_dead_link_checker() -> DeadLinkChecker:
    return DeadLinkChecker(db_manager)


def get_expiry_checker() -> ExpiryChecker:
    return ExpiryChecker(db_manager)


def get_source_analytics() -> SourceAnalyticsService:
    return SourceAnalyticsService(db_manager)


def clamp(value: Optional[int], low: int, high: int, default: int) -> int:
    """Clamp a query value into ``[low, high]``; ``None`` means ``default``."""
    if value is None:
        return default
    return max(low, min(high, value))
