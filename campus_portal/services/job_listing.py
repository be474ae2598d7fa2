"""
Job Listing Service

Read paths over the `jobs` collection:
- eligible listing for a student (branch/course set membership + filters)
- single job lookup
- a recruiter's own postings

Every read path reconciles expiry before returning: jobs whose deadline has
passed are flipped to "Expired" and that single field is persisted.
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from pymongo.errors import PyMongoError

from campus_portal.database import get_db
from campus_portal.schemas.job import JOB_STATUS_EXPIRED
from campus_portal.utils.errors import BadRequest, Forbidden, InternalError, NotFound
from campus_portal.utils.security import ROLE_RECRUITER

logger = logging.getLogger(__name__)

# Recruiter fields joined onto each job, per read path
LISTING_RECRUITER_FIELDS = ["org_name", "category", "participation_type"]
DETAIL_RECRUITER_FIELDS = ["org_name"]
OWNER_RECRUITER_FIELDS = ["org_name", "contact_email"]
APPLICANT_FIELDS = ["name", "email"]


def parse_job_id(job_id: str) -> ObjectId:
    if not ObjectId.is_valid(job_id):
        raise BadRequest("Invalid job ID")
    return ObjectId(job_id)


def is_eligible(job: dict, student: dict) -> bool:
    return (
        student.get("branch") in (job.get("branches_eligible") or [])
        and student.get("course") in (job.get("courses_eligible") or [])
    )


def is_overdue(job: dict, now: Optional[datetime] = None) -> bool:
    deadline = job.get("job_deadline")
    if deadline is None or job.get("job_status") == JOB_STATUS_EXPIRED:
        return False
    now = now or datetime.utcnow()
    if deadline.tzinfo is not None:
        deadline = deadline.replace(tzinfo=None) - deadline.utcoffset()
    return deadline < now


# ===========================
# STORE HELPERS
# ===========================

async def persist_expiry(job_id: ObjectId) -> bool:
    """Flip one job to Expired. The status guard keeps the write monotonic."""
    db = get_db()
    result = await db.jobs.update_one(
        {"_id": job_id, "job_status": {"$ne": JOB_STATUS_EXPIRED}},
        {"$set": {"job_status": JOB_STATUS_EXPIRED}},
    )
    return result.modified_count == 1


async def reconcile_expiry(jobs: List[dict]) -> List[dict]:
    """Expire overdue jobs in place and persist the flips concurrently."""
    now = datetime.utcnow()
    overdue = [job for job in jobs if is_overdue(job, now)]
    if not overdue:
        return jobs

    for job in overdue:
        job["job_status"] = JOB_STATUS_EXPIRED

    results = await asyncio.gather(
        *(persist_expiry(job["_id"]) for job in overdue),
        return_exceptions=True,
    )

    failures = []
    for job, result in zip(overdue, results):
        if isinstance(result, BaseException):
            logger.error("Failed to persist expiry for job %s: %s", job["_id"], result)
            failures.append(result)
        elif result:
            logger.info("Job %s expired (deadline %s)", job["_id"], job.get("job_deadline"))

    if failures:
        raise InternalError(str(failures[0]))
    return jobs


async def populate(jobs: List[dict], field: str, collection: str, fields: List[str]) -> List[dict]:
    """Replace the ObjectId(s) in `field` with a projection of the referenced documents."""
    db = get_db()

    ids = set()
    for job in jobs:
        value = job.get(field)
        if isinstance(value, list):
            ids.update(value)
        elif value is not None:
            ids.add(value)
    if not ids:
        return jobs

    projection = {name: 1 for name in fields}
    docs = await db[collection].find({"_id": {"$in": list(ids)}}, projection).to_list(length=None)
    by_id = {doc["_id"]: doc for doc in docs}

    for job in jobs:
        value = job.get(field)
        if isinstance(value, list):
            job[field] = [by_id[item] for item in value if item in by_id]
        elif value is not None:
            job[field] = by_id.get(value)
    return jobs


# ===========================
# READ OPERATIONS
# ===========================

async def list_eligible_jobs(
    current_user: dict,
    job_type: Optional[str] = None,
    job_category: Optional[str] = None,
    category: Optional[str] = None,
    participation_type: Optional[str] = None,
) -> List[dict]:
    db = get_db()

    try:
        student = await db.students.find_one({"_id": current_user["_id"]})
        if not student:
            raise NotFound("Student not found")

        query = {
            "branches_eligible": {"$in": [student.get("branch")]},
            "courses_eligible": {"$in": [student.get("course")]},
        }
        if job_type:
            query["job_type"] = job_type
        if job_category:
            query["job_category"] = job_category

        jobs = await db.jobs.find(query).to_list(length=None)
        jobs = await populate(jobs, "company_id", "recruiters", LISTING_RECRUITER_FIELDS)

        # Recruiter attributes live on the joined document, so filter after the fetch
        if category:
            jobs = [job for job in jobs if (job.get("company_id") or {}).get("category") == category]
        if participation_type:
            jobs = [
                job for job in jobs
                if (job.get("company_id") or {}).get("participation_type") == participation_type
            ]

        return await reconcile_expiry(jobs)
    except PyMongoError as e:
        logger.error("Listing jobs failed: %s", e)
        raise InternalError(str(e))


async def get_job(job_id: str) -> dict:
    oid = parse_job_id(job_id)
    db = get_db()

    try:
        job = await db.jobs.find_one({"_id": oid})
        if not job:
            raise NotFound("Job not found")

        await populate([job], "company_id", "recruiters", DETAIL_RECRUITER_FIELDS)
        await reconcile_expiry([job])
        return job
    except PyMongoError as e:
        logger.error("Fetching job %s failed: %s", job_id, e)
        raise InternalError(str(e))


async def list_recruiter_jobs(current_user: dict) -> List[dict]:
    if current_user.get("role") != ROLE_RECRUITER:
        raise Forbidden("Access denied. Only recruiters can view their jobs.")

    db = get_db()

    try:
        jobs = await db.jobs.find({"company_id": current_user["_id"]}).to_list(length=None)
        jobs = await populate(jobs, "company_id", "recruiters", OWNER_RECRUITER_FIELDS)
        jobs = await populate(jobs, "applicants", "students", APPLICANT_FIELDS)
        return await reconcile_expiry(jobs)
    except PyMongoError as e:
        logger.error("Listing recruiter jobs failed: %s", e)
        raise InternalError(str(e))
