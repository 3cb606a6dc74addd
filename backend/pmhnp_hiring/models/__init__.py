"""
Database Models Package

Contains SQLAlchemy ORM models for the PMHNP Hiring backend.
"""

from pmhnp_hiring.core.database import Base
from pmhnp_hiring.models.job import Job
from pmhnp_hiring.models.company import Company
from pmhnp_hiring.models.source_stats import SourceStats
from pmhnp_hiring.models.employer import EmployerJob, EmailLead

__all__ = [
    "Base",
    "Job",
    "Company",
    "SourceStats",
    "EmployerJob",
    "EmailLead",
]
