"""
Job Lifecycle Service

Recruiter-owned mutations (create / update / delete) and the student apply flow.
Ownership is checked against the stored `company_id`; only the owning
recruiter may change or remove a posting.
"""

import logging
from datetime import datetime

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from campus_portal.database import get_db
from campus_portal.schemas.job import (
    JobCreate,
    JobUpdate,
    JOB_STATUS_OPEN,
    JOB_STATUS_EXPIRED,
)
from campus_portal.services.job_listing import (
    parse_job_id,
    is_eligible,
    is_overdue,
    reconcile_expiry,
)
from campus_portal.utils.errors import (
    BadRequest,
    Forbidden,
    InternalError,
    NotFound,
    format_validation_errors,
)
from campus_portal.utils.security import ROLE_RECRUITER, ROLE_STUDENT

logger = logging.getLogger(__name__)


async def _load_owned_job(job_id: str, current_user: dict, action: str) -> dict:
    oid = parse_job_id(job_id)
    db = get_db()

    job = await db.jobs.find_one({"_id": oid})
    if not job:
        raise NotFound("Job not found")

    if str(job.get("company_id")) != str(current_user["_id"]):
        logger.warning(
            "Unauthorized %s attempt on job %s by recruiter %s",
            action, job_id, current_user["_id"],
        )
        raise Forbidden(f"Unauthorized to {action} this job")
    return job


# ===========================
# RECRUITER OPERATIONS
# ===========================

async def create_job(job: JobCreate, current_user: dict) -> dict:
    if current_user.get("role") != ROLE_RECRUITER:
        raise Forbidden("Access denied. Only recruiters can post jobs.")

    db = get_db()

    now = datetime.utcnow()
    new_job = job.model_dump()
    new_job["company_id"] = current_user["_id"]
    new_job["applicants"] = []
    new_job["created_at"] = now
    new_job["updated_at"] = now
    if is_overdue(new_job, now):
        new_job["job_status"] = JOB_STATUS_EXPIRED

    try:
        result = await db.jobs.insert_one(new_job)
    except PyMongoError as e:
        logger.error("Creating job failed: %s", e)
        raise BadRequest(str(e))

    new_job["_id"] = result.inserted_id
    logger.info("Job %s created by recruiter %s", result.inserted_id, current_user["_id"])
    return new_job


async def update_job(job_id: str, job_update: JobUpdate, current_user: dict) -> dict:
    try:
        job = await _load_owned_job(job_id, current_user, "edit")

        changes = job_update.model_dump(exclude_unset=True)
        if not changes:
            raise BadRequest("No fields to update")

        requested_status = changes.get("job_status", JOB_STATUS_EXPIRED)
        if job.get("job_status") == JOB_STATUS_EXPIRED and requested_status != JOB_STATUS_EXPIRED:
            raise BadRequest("Expired jobs cannot be reopened")

        # Validate the merged record as a whole, not just the patch
        merged = {name: job.get(name) for name in JobCreate.model_fields if name in job}
        merged.update(changes)
        try:
            validated = JobCreate.model_validate(merged)
        except ValidationError as e:
            raise BadRequest(format_validation_errors(e.errors()))

        updates = {name: getattr(validated, name) for name in changes}
        if job.get("job_status") == JOB_STATUS_EXPIRED:
            updates["job_status"] = JOB_STATUS_EXPIRED
        elif is_overdue({**job, **updates}):
            updates["job_status"] = JOB_STATUS_EXPIRED
        updates["updated_at"] = datetime.utcnow()

        db = get_db()
        query = {"_id": job["_id"], "company_id": job["company_id"]}
        if updates.get("job_status") != JOB_STATUS_EXPIRED:
            query["job_status"] = {"$ne": JOB_STATUS_EXPIRED}

        result = await db.jobs.update_one(query, {"$set": updates})
        if result.matched_count == 0:
            # Expired (or removed) between the read and the write
            raise BadRequest("Job changed while updating; it may have expired")

        job.update(updates)
        logger.info("Job %s updated by recruiter %s", job_id, current_user["_id"])
        return job
    except PyMongoError as e:
        logger.error("Updating job %s failed: %s", job_id, e)
        raise InternalError(str(e))


async def delete_job(job_id: str, current_user: dict) -> None:
    try:
        job = await _load_owned_job(job_id, current_user, "delete")

        db = get_db()
        await db.jobs.delete_one({"_id": job["_id"]})
        await db.students.update_many(
            {"applied_jobs": job["_id"]},
            {"$pull": {"applied_jobs": job["_id"]}},
        )
        logger.info("Job %s deleted by recruiter %s", job_id, current_user["_id"])
    except PyMongoError as e:
        logger.error("Error deleting job %s: %s", job_id, e)
        raise InternalError("Internal Server Error: " + str(e))


# ===========================
# STUDENT OPERATIONS
# ===========================

def get_applied_jobs(current_user: dict) -> list:
    if current_user.get("role") != ROLE_STUDENT:
        raise Forbidden("Access denied. Only students can view applied jobs.")
    return current_user.get("applied_jobs") or []


async def apply_to_job(job_id: str, current_user: dict) -> dict:
    if current_user.get("role") != ROLE_STUDENT:
        raise Forbidden("Access denied. Only students can apply to jobs.")

    oid = parse_job_id(job_id)
    db = get_db()

    try:
        job = await db.jobs.find_one({"_id": oid})
        if not job:
            raise NotFound("Job not found")

        await reconcile_expiry([job])
        if job.get("job_status") != JOB_STATUS_OPEN:
            raise BadRequest(f"This job is no longer accepting applications. Status: {job.get('job_status')}")

        if not is_eligible(job, current_user):
            raise Forbidden("You are not eligible for this job")

        if current_user["_id"] in (job.get("applicants") or []):
            raise BadRequest("You have already applied to this job")

        await db.jobs.update_one({"_id": oid}, {"$addToSet": {"applicants": current_user["_id"]}})
        await db.students.update_one({"_id": current_user["_id"]}, {"$addToSet": {"applied_jobs": oid}})
    except PyMongoError as e:
        logger.error("Applying to job %s failed: %s", job_id, e)
        raise InternalError(str(e))

    job.setdefault("applicants", []).append(current_user["_id"])
    logger.info("Student %s applied to job %s", current_user["_id"], job_id)
    return job
