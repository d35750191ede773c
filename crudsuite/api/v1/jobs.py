# crudsuite/api/v1/jobs.py
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from crudsuite.api.v1.auth import require_roles
from crudsuite.core.errors import ForbiddenError, NotFoundError
from crudsuite.core.security import Role
from crudsuite.models.job import JobCreate, JobUpdate
from crudsuite.repositories import jobs as jobs_repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])

recruiter_only = require_roles(Role.RECRUITER)


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Mongo hands datetimes back naive UTC; store them the same way
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


async def load_job(job_id: str) -> dict:
    job = await jobs_repo.get_job(job_id)
    if not job:
        raise NotFoundError("Job not found")
    return job


@router.get("")
async def list_jobs(
    job_type: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
):
    return await jobs_repo.list_active(job_type=job_type, location=location, search=search)


@router.get("/recruiter/my-jobs")
async def my_jobs(current_user: dict = Depends(recruiter_only)):
    return await jobs_repo.list_by_recruiter(current_user["id"])


@router.get("/{job_id}")
async def get_job(job_id: str):
    return await load_job(job_id)


@router.post("", status_code=201)
async def create_job(payload: JobCreate, current_user: dict = Depends(recruiter_only)):
    fields = payload.model_dump()
    fields["deadline"] = naive_utc(fields.get("deadline"))
    fields["posted_by"] = current_user["id"]
    fields["company_name"] = current_user.get("company_name") or current_user["name"]
    fields["company_logo"] = current_user.get("company_logo")
    job = await jobs_repo.create_job(fields)
    logger.info("Job %s posted by %s", job["id"], current_user["id"])
    return {"message": "Job created successfully", "job": job}


@router.put("/{job_id}")
async def update_job(job_id: str, payload: JobUpdate, current_user: dict = Depends(recruiter_only)):
    job = await load_job(job_id)
    if job["posted_by"] != current_user["id"]:
        raise ForbiddenError("Not authorized to update this job")
    fields = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "deadline" in fields:
        fields["deadline"] = naive_utc(fields["deadline"])
    if fields:
        job = await jobs_repo.update_job(job_id, fields)
        if not job:
            raise NotFoundError("Job not found")
    return {"message": "Job updated successfully", "job": job}


@router.delete("/{job_id}")
async def delete_job(job_id: str, current_user: dict = Depends(recruiter_only)):
    job = await load_job(job_id)
    if job["posted_by"] != current_user["id"]:
        raise ForbiddenError("Not authorized to delete this job")
    # applications keep pointing at the posting
    await jobs_repo.update_job(job_id, {"is_active": False})
    logger.info("Job %s closed by %s", job_id, current_user["id"])
    return {"message": "Job deleted successfully"}
