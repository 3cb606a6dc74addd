"""
Job Pydantic Schemas

Response models for the public job endpoints.
"""

from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel, Field, ConfigDict


class JobResponse(BaseModel):
    """Schema for job response."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Job ID")
    slug: Optional[str] = Field(None, description="URL slug")
    title: str = Field(..., description="Job title")
    employer: str = Field(..., description="Employer name")
    company_id: Optional[str] = Field(None, description="Canonical company ID")

    description: str = Field("", description="Cleaned plain-text description")
    description_summary: Optional[str] = Field(None, description="Short summary")
    apply_link: str = Field(..., description="Application URL")

    location: Optional[str] = Field(None, description="Location as posted")
    city: Optional[str] = Field(None, description="City")
    state: Optional[str] = Field(None, description="State name")
    state_code: Optional[str] = Field(None, description="Two-letter state code")
    country: Optional[str] = Field(None, description="Country code")
    is_remote: bool = Field(False, description="Whether job is remote")
    is_hybrid: bool = Field(False, description="Whether job is hybrid")

    job_type: Optional[str] = Field(None, description="Full-Time, Part-Time, Contract or Per Diem")
    mode: Optional[str] = Field(None, description="Remote, Hybrid or In-Person")

    min_salary: Optional[int] = Field(None, description="Posted minimum salary")
    max_salary: Optional[int] = Field(None, description="Posted maximum salary")
    salary_period: Optional[str] = Field(None, description="Posted salary period")
    normalized_min_salary: Optional[int] = Field(None, description="Annualized minimum salary")
    normalized_max_salary: Optional[int] = Field(None, description="Annualized maximum salary")
    display_salary: Optional[str] = Field(None, description="Human readable salary")

    is_featured: bool = Field(False, description="Featured listing")
    is_verified_employer: bool = Field(False, description="Posted by a verified employer")
    quality_score: int = Field(0, description="Completeness score 0-100")

    source_type: str = Field("external", description="external or employer")
    source_provider: Optional[str] = Field(None, description="Aggregator the job came from")

    original_posted_at: Optional[datetime] = Field(None, description="Original posting date")
    expires_at: Optional[datetime] = Field(None, description="Expiry date")
    created_at: datetime = Field(..., description="First ingested")
    updated_at: datetime = Field(..., description="Last renewed")


class JobListResponse(BaseModel):
    """Schema for a page of jobs."""

    jobs: List[JobResponse] = Field(..., description="Jobs on this page")
    total: int = Field(..., description="Total matching jobs")
    page: int = Field(..., description="Current page")
    total_pages: int = Field(..., description="Total number of pages")
