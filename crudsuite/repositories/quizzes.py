# crudsuite/repositories/quizzes.py
import re
from typing import Optional, List, Dict, Any
from datetime import datetime
from pymongo import ReturnDocument

from crudsuite.db.mongo import get_db, to_id, to_object_id, QUIZZES, QUIZ_RESULTS


def _now():
    return datetime.utcnow()


async def create_quiz(fields: Dict[str, Any]) -> Dict[str, Any]:
    db = get_db()
    payload = dict(fields)
    payload.setdefault("attempts", 0)
    payload.setdefault("average_score", 0.0)
    payload["created_at"] = _now()
    payload["updated_at"] = payload["created_at"]
    res = await db[QUIZZES].insert_one(payload)
    payload["_id"] = res.inserted_id
    return to_id(payload)


async def get_quiz(quiz_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(quiz_id)
    if oid is None:
        return None
    db = get_db()
    return to_id(await db[QUIZZES].find_one({"_id": oid}))


async def list_public(search: Optional[str] = None, category: Optional[str] = None, difficulty: Optional[str] = None) -> List[Dict[str, Any]]:
    db = get_db()
    query: Dict[str, Any] = {"is_public": True}
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        query["$or"] = [{"title": pattern}, {"description": pattern}]
    if category and category != "all":
        query["category"] = category
    if difficulty and difficulty != "all":
        query["difficulty"] = difficulty
    cur = db[QUIZZES].find(query).sort([("created_at", -1), ("_id", -1)])
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def list_by_creator(user_id: str) -> List[Dict[str, Any]]:
    db = get_db()
    cur = db[QUIZZES].find({"created_by": user_id}).sort([("created_at", -1), ("_id", -1)])
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def update_quiz(quiz_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    oid = to_object_id(quiz_id)
    if oid is None:
        return None
    db = get_db()
    update = dict(fields)
    update["updated_at"] = _now()
    doc = await db[QUIZZES].find_one_and_update(
        {"_id": oid}, {"$set": update}, return_document=ReturnDocument.AFTER
    )
    return to_id(doc)


async def delete_quiz(quiz_id: str) -> bool:
    oid = to_object_id(quiz_id)
    if oid is None:
        return False
    db = get_db()
    res = await db[QUIZZES].delete_one({"_id": oid})
    return res.deleted_count > 0


async def record_attempt_if(quiz_id: str, seen_attempts: int, attempts: int, average_score: float) -> bool:
    """Compare-and-set the aggregate; False when another submission got there first."""
    oid = to_object_id(quiz_id)
    if oid is None:
        return False
    db = get_db()
    res = await db[QUIZZES].update_one(
        {"_id": oid, "attempts": seen_attempts},
        {"$set": {"attempts": attempts, "average_score": average_score, "updated_at": _now()}},
    )
    return res.modified_count > 0


async def insert_result(result: Dict[str, Any]) -> Dict[str, Any]:
    db = get_db()
    payload = dict(result)
    payload["completed_at"] = _now()
    res = await db[QUIZ_RESULTS].insert_one(payload)
    payload["_id"] = res.inserted_id
    return to_id(payload)


async def list_results(quiz_id: str) -> List[Dict[str, Any]]:
    db = get_db()
    out = []
    async for d in db[QUIZ_RESULTS].find({"quiz_id": quiz_id}):
        out.append(to_id(d))
    return out


async def leaderboard(quiz_id: str, limit: int = 10) -> List[Dict[str, Any]]:
    db = get_db()
    cur = (
        db[QUIZ_RESULTS]
        .find({"quiz_id": quiz_id}, {"username": 1, "score": 1, "percentage": 1, "completed_at": 1})
        .sort([("score", -1), ("completed_at", 1), ("_id", 1)])
        .limit(limit)
    )
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def history(user_id: str, limit: int = 20) -> List[Dict[str, Any]]:
    db = get_db()
    cur = db[QUIZ_RESULTS].find({"user_id": user_id}).sort([("completed_at", -1), ("_id", -1)]).limit(limit)
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def delete_results(quiz_id: str) -> int:
    db = get_db()
    res = await db[QUIZ_RESULTS].delete_many({"quiz_id": quiz_id})
    return res.deleted_count


async def delete_result(result_id: str) -> bool:
    oid = to_object_id(result_id)
    if oid is None:
        return False
    db = get_db()
    res = await db[QUIZ_RESULTS].delete_one({"_id": oid})
    return res.deleted_count > 0
