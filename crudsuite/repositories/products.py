# crudsuite/repositories/products.py
import re
from typing import Optional, List, Dict, Any
from datetime import datetime
from pymongo import ReturnDocument

from crudsuite.db.mongo import get_db, to_id, to_object_id, PRODUCTS

SORTS = {
    "price-low": [("price", 1), ("_id", 1)],
    "price-high": [("price", -1), ("_id", -1)],
    "newest": [("created_at", -1), ("_id", -1)],
}


def _now():
    return datetime.utcnow()


async def create_product(fields: Dict[str, Any]) -> Dict[str, Any]:
    db = get_db()
    payload = dict(fields)
    payload["created_at"] = _now()
    res = await db[PRODUCTS].insert_one(payload)
    payload["_id"] = res.inserted_id
    return to_id(payload)


async def insert_many(products: List[Dict[str, Any]]) -> int:
    db = get_db()
    docs = [dict(p, created_at=_now()) for p in products]
    res = await db[PRODUCTS].insert_many(docs)
    return len(res.inserted_ids)


async def get_product(product_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(product_id)
    if oid is None:
        return None
    db = get_db()
    return to_id(await db[PRODUCTS].find_one({"_id": oid}))


async def list_products(category: Optional[str] = None, search: Optional[str] = None, sort: Optional[str] = None) -> List[Dict[str, Any]]:
    db = get_db()
    query: Dict[str, Any] = {}
    if category and category != "all":
        query["category"] = category
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        query["$or"] = [{"name": pattern}, {"description": pattern}]
    cur = db[PRODUCTS].find(query).sort(SORTS.get(sort or "newest", SORTS["newest"]))
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def update_product(product_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    oid = to_object_id(product_id)
    if oid is None:
        return None
    db = get_db()
    if not fields:
        return to_id(await db[PRODUCTS].find_one({"_id": oid}))
    doc = await db[PRODUCTS].find_one_and_update(
        {"_id": oid}, {"$set": fields}, return_document=ReturnDocument.AFTER
    )
    return to_id(doc)


async def delete_product(product_id: str) -> bool:
    oid = to_object_id(product_id)
    if oid is None:
        return False
    db = get_db()
    res = await db[PRODUCTS].delete_one({"_id": oid})
    return res.deleted_count > 0


async def delete_all() -> int:
    db = get_db()
    res = await db[PRODUCTS].delete_many({})
    return res.deleted_count


async def reserve_stock(product_id: str, quantity: int) -> Optional[Dict[str, Any]]:
    """
    Decrement stock by ``quantity`` only where at least that much is left.
    Returns the product after the decrement, or None when nothing matched.
    """
    oid = to_object_id(product_id)
    if oid is None:
        return None
    db = get_db()
    doc = await db[PRODUCTS].find_one_and_update(
        {"_id": oid, "stock": {"$gte": quantity}},
        {"$inc": {"stock": -quantity}},
        return_document=ReturnDocument.AFTER,
    )
    return to_id(doc)


async def release_stock(product_id: str, quantity: int) -> None:
    oid = to_object_id(product_id)
    if oid is None:
        return
    db = get_db()
    await db[PRODUCTS].update_one({"_id": oid}, {"$inc": {"stock": quantity}})


async def count_products() -> int:
    db = get_db()
    return await db[PRODUCTS].count_documents({})
