"""
Company Pydantic Schemas

Request/response models for company-related API endpoints.
"""

from typing import Optional, List, Literal
from datetime import datetime

from pydantic import BaseModel, Field, ConfigDict, model_validator


class CompanyResponse(BaseModel):
    """Schema for company response."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Company ID")
    name: str = Field(..., description="Display name")
    normalized_name: str = Field(..., description="Matching key")
    aliases: List[str] = Field(default_factory=list, description="Employer spellings seen")
    logo_url: Optional[str] = Field(None, description="Logo URL")
    website: Optional[str] = Field(None, description="Company website")
    job_count: int = Field(0, description="Linked jobs")
    is_verified: bool = Field(False, description="Verified company")
    created_at: datetime = Field(..., description="Created")


class CompanyListResponse(BaseModel):
    companies: List[CompanyResponse]
    total: int


class CompanyAction(BaseModel):
    """Admin action on companies."""

    action: Literal["link-all", "merge"] = Field(..., description="Action to run")
    keep_id: Optional[str] = Field(None, description="Company to keep when merging")
    merge_id: Optional[str] = Field(None, description="Company folded into keep_id")

    @model_validator(mode="after")
    def check_merge_ids(self):
        if self.action == "merge" and (not self.keep_id or not self.merge_id):
            raise ValueError("merge requires keep_id and merge_id")
        return self
