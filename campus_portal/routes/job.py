# ========================================
# campus_portal/routes/job.py
# ========================================

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from typing import List, Optional

from campus_portal.schemas.job import (
    JobCreate,
    JobUpdate,
    JobResponse,
    JobMessageResponse,
)
from campus_portal.services import job_lifecycle, job_listing
from campus_portal.utils.auth import get_current_user, require_job_poster, require_recruiter
from campus_portal.utils.email import send_application_confirmation
from campus_portal.utils.serialize import serialize_doc

router = APIRouter(prefix="/api/jobs", tags=["Jobs"])

# ===========================
# RECRUITER ENDPOINTS
# ===========================

# ✅ 1. POST A JOB (Recruiter)
@router.post("/create", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(job: JobCreate, current_user: dict = Depends(require_job_poster)):
    """Create a job posting owned by the calling recruiter."""
    new_job = await job_lifecycle.create_job(job, current_user)
    return serialize_doc(new_job)


# ===========================
# STUDENT ENDPOINTS
# ===========================

# ✅ 2. GET ELIGIBLE JOBS (Student)
@router.get("/", response_model=List[JobResponse], response_model_exclude_unset=True)
async def get_eligible_jobs(
    job_type: Optional[str] = Query(None, description="Exact job type, e.g. Full-time, Internship"),
    job_category: Optional[str] = Query(None, description="Exact job category"),
    category: Optional[str] = Query(None, description="Recruiter category"),
    participation_type: Optional[str] = Query(None, description="Recruiter participation: Virtual, On-Campus"),
    current_user: dict = Depends(get_current_user),
):
    """List jobs the student's branch and course are eligible for. Overdue jobs come back Expired."""
    jobs = await job_listing.list_eligible_jobs(
        current_user,
        job_type=job_type,
        job_category=job_category,
        category=category,
        participation_type=participation_type,
    )
    return serialize_doc(jobs)


# ✅ 3. GET MY POSTED JOBS (Recruiter)
@router.get("/recruiter", response_model=List[JobResponse], response_model_exclude_unset=True)
async def get_recruiter_jobs(current_user: dict = Depends(get_current_user)):
    """Jobs posted by the logged-in recruiter, with applicant names and emails."""
    jobs = await job_listing.list_recruiter_jobs(current_user)
    return serialize_doc(jobs)


# ✅ 4. GET APPLIED JOBS (Student)
@router.get("/students/applied-jobs", response_model=List[str])
async def get_applied_jobs(current_user: dict = Depends(get_current_user)):
    return serialize_doc(job_lifecycle.get_applied_jobs(current_user))


# ✅ 5. APPLY TO A JOB (Student)
@router.post("/{job_id}/apply", response_model=JobMessageResponse, response_model_exclude_unset=True)
async def apply_to_job(
    job_id: str,
    background_tasks: BackgroundTasks,
    current_user: dict = Depends(get_current_user),
):
    """Apply to an open job. The confirmation email is sent after the response."""
    job = await job_lifecycle.apply_to_job(job_id, current_user)
    background_tasks.add_task(send_application_confirmation, current_user, job)
    return {"message": "Applied successfully", "job": serialize_doc(job)}


# ===========================
# JOB OWNER ENDPOINTS
# ===========================

# ✅ 6. UPDATE/EDIT JOB (Recruiter)
@router.put("/{job_id}", response_model=JobMessageResponse, response_model_exclude_unset=True)
async def update_job(
    job_id: str,
    job_update: JobUpdate,
    current_user: dict = Depends(require_recruiter),
):
    """Update job details. Only the owning recruiter can update."""
    job = await job_lifecycle.update_job(job_id, job_update, current_user)
    return {"message": "Job updated successfully", "job": serialize_doc(job)}


# ✅ 7. DELETE JOB (Recruiter)
@router.delete("/{job_id}", response_model=JobMessageResponse, response_model_exclude_unset=True)
async def delete_job(job_id: str, current_user: dict = Depends(require_recruiter)):
    """Delete a job posting. Only the owning recruiter can delete."""
    await job_lifecycle.delete_job(job_id, current_user)
    return {"message": "Job deleted successfully"}


# ===========================
# SHARED ENDPOINTS
# ===========================

# ✅ 8. GET SINGLE JOB DETAILS
@router.get("/{job_id}", response_model=JobResponse, response_model_exclude_unset=True)
async def get_job_details(job_id: str, current_user: dict = Depends(get_current_user)):
    """Get a job with its recruiter's org_name."""
    job = await job_listing.get_job(job_id)
    return serialize_doc(job)
