# crudsuite/api/v1/applications.py
import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from pymongo.errors import DuplicateKeyError

from crudsuite.api.v1.auth import get_current_user, require_roles
from crudsuite.api.v1.jobs import load_job
from crudsuite.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from crudsuite.core.security import Role
from crudsuite.models.job import ApplicationCreate, ApplicationDecision
from crudsuite.models.workflow import (
    ApplicationStatus,
    InvalidTransition,
    check_application_transition,
)
from crudsuite.repositories import applications as applications_repo
from crudsuite.repositories import jobs as jobs_repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/applications", tags=["applications"])

student_only = require_roles(Role.STUDENT)
recruiter_only = require_roles(Role.RECRUITER)

ALREADY_APPLIED = "You have already applied for this job"
CLOSED = "This job is no longer accepting applications"


async def _load_application(application_id: str) -> dict:
    application = await applications_repo.get_application(application_id)
    if not application:
        raise NotFoundError("Application not found")
    return application


@router.post("", status_code=201)
async def apply(payload: ApplicationCreate, current_user: dict = Depends(student_only)):
    job = await load_job(payload.job_id)
    if not job.get("is_active"):
        raise ValidationError(CLOSED)
    deadline = job.get("deadline")
    if deadline is not None and deadline < datetime.utcnow():
        raise ValidationError(CLOSED)
    if not current_user.get("resume"):
        raise ValidationError("Please upload your resume before applying")
    if await applications_repo.find_for_pair(job["id"], current_user["id"]):
        raise ConflictError(ALREADY_APPLIED)

    try:
        application = await applications_repo.create_application({
            "job_id": job["id"],
            "job_title": job["title"],
            "company_name": job.get("company_name"),
            "applicant_id": current_user["id"],
            "applicant_name": current_user["name"],
            "applicant_email": current_user["email"],
            "applicant_resume": current_user["resume"],
            "applicant_skills": current_user.get("skills", []),
            "cover_letter": payload.cover_letter,
        })
    except DuplicateKeyError:
        # unique (job_id, applicant_id) index caught a concurrent double submit
        raise ConflictError(ALREADY_APPLIED)

    await jobs_repo.increment_application_count(job["id"], 1)
    logger.info("Application %s for job %s by %s", application["id"], job["id"], current_user["id"])
    return {"message": "Application submitted successfully", "application": application}


@router.get("/my-applications")
async def my_applications(current_user: dict = Depends(student_only)):
    return await applications_repo.list_for_applicant(current_user["id"])


@router.get("/job/{job_id}")
async def job_applications(job_id: str, current_user: dict = Depends(recruiter_only)):
    job = await load_job(job_id)
    if job["posted_by"] != current_user["id"]:
        raise ForbiddenError("Not authorized to view these applications")
    return await applications_repo.list_for_job(job["id"])


@router.get("/{application_id}")
async def get_application(application_id: str, current_user: dict = Depends(get_current_user)):
    application = await _load_application(application_id)
    if application["applicant_id"] == current_user["id"]:
        return application
    job = await jobs_repo.get_job(application["job_id"])
    if job and job["posted_by"] == current_user["id"]:
        return application
    raise ForbiddenError("Not authorized to view this application")


@router.put("/{application_id}/status")
async def decide(application_id: str, payload: ApplicationDecision, current_user: dict = Depends(recruiter_only)):
    application = await _load_application(application_id)
    job = await jobs_repo.get_job(application["job_id"])
    if not job or job["posted_by"] != current_user["id"]:
        raise ForbiddenError("Not authorized to update this application")
    try:
        check_application_transition(ApplicationStatus(application["status"]), payload.status)
    except InvalidTransition as exc:
        raise ValidationError(str(exc)) from exc

    updated = await applications_repo.decide_if_pending(application_id, payload.status.value)
    if updated is None:
        raise ConflictError("Application has already been processed")
    logger.info("Application %s marked %s", application_id, payload.status.value)
    return {"message": "Application status updated", "application": updated}


@router.delete("/{application_id}")
async def withdraw(application_id: str, current_user: dict = Depends(student_only)):
    application = await _load_application(application_id)
    if application["applicant_id"] != current_user["id"]:
        raise ForbiddenError("Not authorized to withdraw this application")
    if application["status"] != ApplicationStatus.PENDING.value:
        raise ValidationError("Cannot withdraw application that has been processed")
    if not await applications_repo.withdraw_if_pending(application_id, current_user["id"]):
        raise ValidationError("Cannot withdraw application that has been processed")
    await jobs_repo.increment_application_count(application["job_id"], -1)
    return {"message": "Application withdrawn successfully"}
