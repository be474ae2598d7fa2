# ========================================
# campus_portal/schemas/job.py
# ========================================

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Literal, Union
from datetime import datetime, timezone

JOB_STATUS_OPEN = "Open"
JOB_STATUS_CLOSED = "Closed"
JOB_STATUS_EXPIRED = "Expired"

JobStatus = Literal["Open", "Closed", "Expired"]


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Mongo hands back naive UTC datetimes, so store them that way too."""
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# 1. Input: What the Recruiter sends
class JobCreate(BaseModel):
    job_title: str = Field(..., min_length=1)
    job_description: str = Field(..., min_length=1)
    job_type: str  # Full-time, Internship, Internship + PPO
    job_category: str  # Tech, Non-Tech, Core
    branches_eligible: List[str] = Field(..., min_length=1)
    courses_eligible: List[str] = Field(..., min_length=1)
    job_deadline: datetime
    location: Optional[str] = None
    ctc: Optional[str] = None
    job_status: JobStatus = JOB_STATUS_OPEN

    @field_validator("job_deadline")
    @classmethod
    def deadline_to_utc(cls, value):
        return to_naive_utc(value)


# 2. Input: Update existing job (only these fields are mutable)
class JobUpdate(BaseModel):
    """Allow-list for partial updates; ownership and applicants are not editable."""
    job_title: Optional[str] = None
    job_description: Optional[str] = None
    job_type: Optional[str] = None
    job_category: Optional[str] = None
    branches_eligible: Optional[List[str]] = None
    courses_eligible: Optional[List[str]] = None
    job_deadline: Optional[datetime] = None
    location: Optional[str] = None
    ctc: Optional[str] = None
    job_status: Optional[JobStatus] = None

    @field_validator("job_deadline")
    @classmethod
    def deadline_to_utc(cls, value):
        return to_naive_utc(value)


# 3. Output: joined projections
class RecruiterSummary(BaseModel):
    id: str
    org_name: Optional[str] = None
    category: Optional[str] = None
    participation_type: Optional[str] = None
    contact_email: Optional[str] = None


class ApplicantSummary(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


# 4. Output: Job as returned by every endpoint
class JobResponse(BaseModel):
    id: str
    company_id: Union[RecruiterSummary, str, None] = None
    job_title: Optional[str] = None
    job_description: Optional[str] = None
    job_type: Optional[str] = None
    job_category: Optional[str] = None
    branches_eligible: List[str] = []
    courses_eligible: List[str] = []
    job_deadline: Optional[datetime] = None
    location: Optional[str] = None
    ctc: Optional[str] = None
    job_status: Optional[str] = None
    applicants: List[Union[ApplicantSummary, str]] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# 5. Output: message envelope
class JobMessageResponse(BaseModel):
    message: str
    job: Optional[JobResponse] = None
