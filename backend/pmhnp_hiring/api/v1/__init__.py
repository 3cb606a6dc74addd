"""
API v1 Package

Contains all version 1 API endpoints for the PMHNP Hiring backend.
"""

from .jobs import router as jobs_router
from .companies import router as companies_router
from .cron import router as cron_router
from .stats import router as stats_router
from .health import router as health_router
from .metrics import router as metrics_router

__all__ = [
    "jobs_router",
    "companies_router",
    "cron_router",
    "stats_router",
    "health_router",
    "metrics_router",
]
