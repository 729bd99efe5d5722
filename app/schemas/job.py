"""
Pydantic schemas for job application endpoints.
"""
from typing import Optional
from datetime import datetime
from pydantic import Field, field_validator

from app.db.models.job_application import (
    ApplicationStatus,
    ExperienceLevel,
    JobType,
    DEFAULT_JOB_DESCRIPTION,
)
from app.schemas.common import APIModel, is_absolute_url


def _check_url(v: Optional[str]) -> Optional[str]:
    if v is not None and v != "" and not is_absolute_url(v):
        raise ValueError("Invalid URL format")
    return v or None


class JobApplicationBase(APIModel):
    """Base job application schema with common fields."""
    title: str = Field(..., min_length=1, max_length=200, description="Job title")
    company: str = Field(..., min_length=1, max_length=100, description="Company name")
    description: str = Field(..., min_length=1, description="Full job description")
    location: Optional[str] = Field(None, max_length=200)
    url: Optional[str] = Field(None, description="Job posting URL")
    requirements: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    salary: Optional[str] = Field(None, max_length=100)
    job_type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    application_status: ApplicationStatus = ApplicationStatus.SAVED
    date_applied: Optional[datetime] = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        return _check_url(v)

    class Config:
        str_strip_whitespace = True
        use_enum_values = True


class JobApplicationCreate(JobApplicationBase):
    """Schema for creating a new job application."""

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Backend Engineer",
                "company": "Tech Corp",
                "description": "Build and run our Python APIs.",
                "location": "Remote",
                "url": "https://example.com/jobs/123",
                "skills": ["Python", "PostgreSQL"],
                "jobType": "full-time",
                "experienceLevel": "mid",
                "applicationStatus": "applied"
            }
        }


class JobApplicationUpdate(APIModel):
    """Schema for a partial update; only fields sent are changed."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    company: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, max_length=200)
    url: Optional[str] = None
    requirements: Optional[list[str]] = None
    skills: Optional[list[str]] = None
    salary: Optional[str] = Field(None, max_length=100)
    job_type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    application_status: Optional[ApplicationStatus] = None
    date_applied: Optional[datetime] = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        return _check_url(v)

    class Config:
        str_strip_whitespace = True
        use_enum_values = True


class JobApplicationResponse(JobApplicationBase):
    id: int
    user_id: int
    description: str = DEFAULT_JOB_DESCRIPTION
    created_at: datetime
    updated_at: datetime


class JobApplicationList(APIModel):
    job_applications: list[JobApplicationResponse]
    total: int
    page: int = 1
    limit: int = 20


class CompanyCount(APIModel):
    company: str
    count: int


class JobStatistics(APIModel):
    total_applications: int
    total_companies: int
    top_companies: list[CompanyCount]
    by_status: dict[str, int]
