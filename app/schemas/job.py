from pydantic import Field, field_validator
from typing import List, Optional, Any
from datetime import datetime

from app.schemas.common import CamelModel, UserPublic, UserContact
from app.services.job_rules import as_list

LIST_FIELDS = ("category", "key_responsibilities", "required_skills", "tools")


class JobFields(CamelModel):
    """Fields shared by job creation and update requests"""
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[List[str]] = None
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    deadline: Optional[datetime] = None
    job_difficulty: Optional[str] = None
    project_length: Optional[str] = None
    key_responsibilities: Optional[List[str]] = None
    required_skills: Optional[List[str]] = None
    tools: Optional[List[str]] = None
    scope: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    note: Optional[str] = None
    video_file_url: Optional[str] = None

    @field_validator(*LIST_FIELDS, mode="before")
    @classmethod
    def normalize_list(cls, v: Any) -> Optional[List[str]]:
        """Accept a single value or a list"""
        if v is None:
            return None
        return as_list(v)


class JobCreateRequest(JobFields):
    """Schema for creating a new job"""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)


class JobUpdateRequest(JobFields):
    """Partial update; only fields present in the request are applied"""
    pass


class JobResponse(CamelModel):
    """Schema for job response"""
    id: int
    title: str
    description: str
    category: List[str] = []
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    deadline: Optional[datetime] = None
    job_difficulty: Optional[str] = None
    project_length: Optional[str] = None
    key_responsibilities: List[str] = []
    required_skills: List[str] = []
    tools: List[str] = []
    scope: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    note: Optional[str] = None
    video_file_url: Optional[str] = None
    proposals: int
    is_verified: bool
    posted_by_id: int
    posted_by: Optional[UserPublic] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class JobDetailResponse(JobResponse):
    """Single job view, includes the poster's contact email"""
    posted_by: Optional[UserContact] = None


class ApplyJobRequest(CamelModel):
    about_freelancer: Optional[str] = None


class ApplicationResponse(CamelModel):
    id: int
    job_id: int
    freelancer_id: int
    about_freelancer: Optional[str] = None
    created_at: Optional[datetime] = None


class ApplyJobResponse(CamelModel):
    applied_job: ApplicationResponse


class ApplicationStatusResponse(CamelModel):
    has_applied: bool


class AppliedJobsResponse(CamelModel):
    job_ids: List[int]
