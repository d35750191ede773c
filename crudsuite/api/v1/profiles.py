# crudsuite/api/v1/profiles.py
"""
Profile updates for the jobs deployment.
- Accepts multipart form fields plus optional files
- Stores files through crudsuite.services.storage (local disk)
- Replaced files are removed once the new reference is saved
- A failed update leaves no newly stored files behind
"""
import logging
from typing import Dict, Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from crudsuite.api.v1.auth import require_roles
from crudsuite.core.security import Role
from crudsuite.models.user import public_user
from crudsuite.repositories import users as users_repo
from crudsuite.services import storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth/profile", tags=["profile"])


def parse_skills(raw: str) -> List[str]:
    return [s.strip() for s in raw.split(",") if s.strip()]


async def _save(user: dict, fields: Dict[str, Any], uploads: Dict[str, storage.UploadKind], files: Dict[str, Optional[UploadFile]]) -> dict:
    pending = []
    for field, kind in uploads.items():
        file = files.get(field)
        if file is not None and file.filename:
            pending.append((field, file, kind))
    # reject a bad file before anything is written
    for _, file, kind in pending:
        storage.check_upload(file, kind)

    stored, replaced = [], []
    try:
        for field, file, kind in pending:
            fields[field] = await storage.store_upload(file, kind)
            stored.append(fields[field])
            if user.get(field):
                replaced.append(user[field])
        updated = await users_repo.update_user(user["id"], fields) if fields else user
    except Exception:
        for ref in stored:
            storage.delete_upload(ref)
        raise

    for ref in replaced:
        storage.delete_upload(ref)
    logger.info("Profile %s updated (%s)", user["id"], ", ".join(sorted(fields)) or "no changes")
    return public_user(updated)


@router.put("/student")
async def update_student_profile(
    name: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    skills: Optional[str] = Form(None),
    profile_photo: Optional[UploadFile] = File(None),
    resume: Optional[UploadFile] = File(None),
    current_user: dict = Depends(require_roles(Role.STUDENT)),
):
    fields: Dict[str, Any] = {}
    if name:
        fields["name"] = name.strip()
    if bio is not None:
        fields["bio"] = bio
    if skills is not None:
        fields["skills"] = parse_skills(skills)
    user = await _save(
        current_user,
        fields,
        {"profile_photo": storage.PROFILE_PHOTO, "resume": storage.RESUME},
        {"profile_photo": profile_photo, "resume": resume},
    )
    return {"message": "Profile updated successfully", "user": user}


@router.put("/recruiter")
async def update_recruiter_profile(
    name: Optional[str] = Form(None),
    company_name: Optional[str] = Form(None),
    company_description: Optional[str] = Form(None),
    company_logo: Optional[UploadFile] = File(None),
    current_user: dict = Depends(require_roles(Role.RECRUITER)),
):
    fields: Dict[str, Any] = {}
    if name:
        fields["name"] = name.strip()
    if company_name is not None:
        fields["company_name"] = company_name
    if company_description is not None:
        fields["company_description"] = company_description
    user = await _save(
        current_user,
        fields,
        {"company_logo": storage.COMPANY_LOGO},
        {"company_logo": company_logo},
    )
    return {"message": "Profile updated successfully", "user": user}
