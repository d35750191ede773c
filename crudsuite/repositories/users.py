# crudsuite/repositories/users.py
from typing import Optional, List, Dict, Any
from datetime import datetime
from pymongo import ReturnDocument

from crudsuite.db.mongo import get_db, to_id, to_object_id, USERS


def _now():
    return datetime.utcnow()


async def create_user(name: str, email: str, password_hash: str, role: str, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Insert a user. Raises pymongo DuplicateKeyError when the email is taken."""
    db = get_db()
    payload = {
        "name": name,
        "email": email.lower(),
        "password_hash": password_hash,
        "role": role,
        "created_at": _now(),
    }
    payload.update(extra or {})
    res = await db[USERS].insert_one(payload)
    payload["_id"] = res.inserted_id
    return to_id(payload)


async def get_user(user_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(user_id)
    if oid is None:
        return None
    db = get_db()
    return to_id(await db[USERS].find_one({"_id": oid}))


async def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    db = get_db()
    return to_id(await db[USERS].find_one({"email": email.lower()}))


async def update_user(user_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    oid = to_object_id(user_id)
    if oid is None:
        return None
    db = get_db()
    doc = await db[USERS].find_one_and_update(
        {"_id": oid}, {"$set": fields}, return_document=ReturnDocument.AFTER
    )
    return to_id(doc)


async def increment_counter(user_id: str, field: str, delta: int = 1) -> None:
    oid = to_object_id(user_id)
    if oid is None:
        return
    db = get_db()
    await db[USERS].update_one({"_id": oid}, {"$inc": {field: delta}})


async def list_users() -> List[Dict[str, Any]]:
    db = get_db()
    cur = db[USERS].find({}, {"password_hash": 0}).sort([("created_at", -1), ("_id", -1)])
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def count_users() -> int:
    db = get_db()
    return await db[USERS].count_documents({})
