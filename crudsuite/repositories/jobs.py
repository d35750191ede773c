# crudsuite/repositories/jobs.py
import re
from typing import Optional, List, Dict, Any
from datetime import datetime
from pymongo import ReturnDocument

from crudsuite.db.mongo import get_db, to_id, to_object_id, JOBS


def _now():
    return datetime.utcnow()


async def create_job(fields: Dict[str, Any]) -> Dict[str, Any]:
    db = get_db()
    payload = dict(fields)
    payload.setdefault("is_active", True)
    payload.setdefault("application_count", 0)
    payload["created_at"] = _now()
    payload["updated_at"] = payload["created_at"]
    res = await db[JOBS].insert_one(payload)
    payload["_id"] = res.inserted_id
    return to_id(payload)


async def get_job(job_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(job_id)
    if oid is None:
        return None
    db = get_db()
    return to_id(await db[JOBS].find_one({"_id": oid}))


async def list_active(job_type: Optional[str] = None, location: Optional[str] = None, search: Optional[str] = None) -> List[Dict[str, Any]]:
    db = get_db()
    query: Dict[str, Any] = {"is_active": True}
    if job_type:
        query["job_type"] = job_type
    if location:
        query["location"] = {"$regex": re.escape(location), "$options": "i"}
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        query["$or"] = [{"title": pattern}, {"description": pattern}, {"company_name": pattern}]
    cur = db[JOBS].find(query).sort([("created_at", -1), ("_id", -1)])
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def list_by_recruiter(user_id: str) -> List[Dict[str, Any]]:
    db = get_db()
    cur = db[JOBS].find({"posted_by": user_id}).sort([("created_at", -1), ("_id", -1)])
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def update_job(job_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    oid = to_object_id(job_id)
    if oid is None:
        return None
    db = get_db()
    update = dict(fields)
    update["updated_at"] = _now()
    doc = await db[JOBS].find_one_and_update(
        {"_id": oid}, {"$set": update}, return_document=ReturnDocument.AFTER
    )
    return to_id(doc)


async def increment_application_count(job_id: str, delta: int) -> None:
    oid = to_object_id(job_id)
    if oid is None:
        return
    db = get_db()
    await db[JOBS].update_one({"_id": oid}, {"$inc": {"application_count": delta}})
