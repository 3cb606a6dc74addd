"""
Pydantic Schemas

Request/response models for the HTTP API.
"""

from .job import JobResponse, JobListResponse
from .company import CompanyResponse, CompanyListResponse, CompanyAction
from .ingestion import SourceResult, IngestionStats, IngestResponse, SourceStatsEntry, SourceStatsResponse

__all__ = [
    "JobResponse",
    "JobListResponse",
    "CompanyResponse",
    "CompanyListResponse",
    "CompanyAction",
    "SourceResult",
    "IngestionStats",
    "IngestResponse",
    "SourceStatsEntry",
    "SourceStatsResponse",
]
