# crudsuite/repositories/applications.py
from typing import Optional, List, Dict, Any
from datetime import datetime
from pymongo import ReturnDocument

from crudsuite.db.mongo import get_db, to_id, to_object_id, APPLICATIONS
from crudsuite.models.workflow import ApplicationStatus


def _now():
    return datetime.utcnow()


async def find_for_pair(job_id: str, applicant_id: str) -> Optional[Dict[str, Any]]:
    db = get_db()
    return to_id(await db[APPLICATIONS].find_one({"job_id": job_id, "applicant_id": applicant_id}))


async def create_application(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Raises pymongo DuplicateKeyError for a second (job, applicant) pair."""
    db = get_db()
    payload = dict(fields)
    payload["status"] = ApplicationStatus.PENDING.value
    payload["created_at"] = _now()
    payload["updated_at"] = payload["created_at"]
    res = await db[APPLICATIONS].insert_one(payload)
    payload["_id"] = res.inserted_id
    return to_id(payload)


async def get_application(application_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(application_id)
    if oid is None:
        return None
    db = get_db()
    return to_id(await db[APPLICATIONS].find_one({"_id": oid}))


async def list_for_applicant(applicant_id: str) -> List[Dict[str, Any]]:
    db = get_db()
    cur = db[APPLICATIONS].find({"applicant_id": applicant_id}).sort([("created_at", -1), ("_id", -1)])
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def list_for_job(job_id: str) -> List[Dict[str, Any]]:
    db = get_db()
    cur = db[APPLICATIONS].find({"job_id": job_id}).sort([("created_at", -1), ("_id", -1)])
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def decide_if_pending(application_id: str, status: str) -> Optional[Dict[str, Any]]:
    """Single conditional write; None when the application already left pending."""
    oid = to_object_id(application_id)
    if oid is None:
        return None
    db = get_db()
    doc = await db[APPLICATIONS].find_one_and_update(
        {"_id": oid, "status": ApplicationStatus.PENDING.value},
        {"$set": {"status": status, "updated_at": _now()}},
        return_document=ReturnDocument.AFTER,
    )
    return to_id(doc)


async def withdraw_if_pending(application_id: str, applicant_id: str) -> bool:
    oid = to_object_id(application_id)
    if oid is None:
        return False
    db = get_db()
    res = await db[APPLICATIONS].delete_one(
        {"_id": oid, "applicant_id": applicant_id, "status": ApplicationStatus.PENDING.value}
    )
    return res.deleted_count > 0
