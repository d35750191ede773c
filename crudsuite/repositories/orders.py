# crudsuite/repositories/orders.py
from typing import Optional, List, Dict, Any
from datetime import datetime
from pymongo import ReturnDocument

from crudsuite.db.mongo import get_db, to_id, to_object_id, ORDERS


def _now():
    return datetime.utcnow()


async def insert_order(order: Dict[str, Any]) -> Dict[str, Any]:
    db = get_db()
    payload = dict(order)
    payload["created_at"] = _now()
    payload["updated_at"] = payload["created_at"]
    res = await db[ORDERS].insert_one(payload)
    payload["_id"] = res.inserted_id
    return to_id(payload)


async def get_order(order_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(order_id)
    if oid is None:
        return None
    db = get_db()
    return to_id(await db[ORDERS].find_one({"_id": oid}))


async def list_orders(user_id: Optional[str] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
    db = get_db()
    query: Dict[str, Any] = {}
    if user_id:
        query["user_id"] = user_id
    if status:
        query["status"] = status
    cur = db[ORDERS].find(query).sort([("created_at", -1), ("_id", -1)])
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def set_status_if(order_id: str, current: str, target: str) -> Optional[Dict[str, Any]]:
    """Move ``current`` -> ``target``; None when the order is no longer in ``current``."""
    oid = to_object_id(order_id)
    if oid is None:
        return None
    db = get_db()
    doc = await db[ORDERS].find_one_and_update(
        {"_id": oid, "status": current},
        {"$set": {"status": target, "updated_at": _now()}},
        return_document=ReturnDocument.AFTER,
    )
    return to_id(doc)


async def count_orders(status: Optional[str] = None) -> int:
    db = get_db()
    return await db[ORDERS].count_documents({"status": status} if status else {})


async def total_revenue(exclude_status: str) -> float:
    db = get_db()
    total = 0.0
    async for d in db[ORDERS].find({"status": {"$ne": exclude_status}}, {"total": 1}):
        total += float(d.get("total", 0))
    return round(total, 2)
