# crudsuite/db/mongo.py
import logging
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING

from crudsuite.core.config import settings

logger = logging.getLogger(__name__)

USERS = "users"
PRODUCTS = "products"
ORDERS = "orders"
QUIZZES = "quizzes"
QUIZ_RESULTS = "quiz_results"
JOBS = "jobs"
APPLICATIONS = "applications"

_mongo_client: Optional[AsyncIOMotorClient] = None
# chosen per app at startup; None falls back to settings.DEPLOYMENT
_db_name: Optional[str] = None


def get_mongo_client():
    """
    Returns a cached Motor client.
    """
    global _mongo_client
    if _mongo_client is None:
        _mongo_client = AsyncIOMotorClient(settings.MONGODB_URI)
    return _mongo_client


def set_mongo_client(client) -> None:
    """Swap the process-wide client (used by tests and scripts)."""
    global _mongo_client
    _mongo_client = client


def select_database(name: Optional[str]) -> None:
    global _db_name
    _db_name = name


def get_db():
    client = get_mongo_client()
    return client[_db_name or settings.database_name()]


def to_object_id(value) -> Optional[ObjectId]:
    # malformed ids behave like missing documents
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def to_id(doc):
    # convert Mongo's _id (ObjectId) to str when returning
    if not doc:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc["_id"])
        del doc["_id"]
    return doc


async def ensure_indexes() -> None:
    db = get_db()
    await db[USERS].create_index("email", unique=True)
    await db[PRODUCTS].create_index([("category", ASCENDING)])
    await db[ORDERS].create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    await db[QUIZZES].create_index([("created_by", ASCENDING), ("created_at", DESCENDING)])
    await db[QUIZ_RESULTS].create_index([("quiz_id", ASCENDING), ("score", DESCENDING)])
    await db[QUIZ_RESULTS].create_index([("user_id", ASCENDING), ("completed_at", DESCENDING)])
    await db[JOBS].create_index([("posted_by", ASCENDING), ("created_at", DESCENDING)])
    await db[APPLICATIONS].create_index(
        [("job_id", ASCENDING), ("applicant_id", ASCENDING)], unique=True
    )


async def init_db() -> None:
    """Connect, ping and create indexes. Failure here is fatal for the process."""
    client = get_mongo_client()
    try:
        await client.admin.command("ping")
        await ensure_indexes()
    except Exception:
        logger.exception("Could not connect to MongoDB at startup")
        raise
    logger.info("MongoDB connected (db=%s)", get_db().name)


def close_db() -> None:
    global _mongo_client
    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None
