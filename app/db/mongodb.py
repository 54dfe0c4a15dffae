"""
MongoDB Connection Utility

MongoDB stores every entity of the portal:
- users (with a role-tagged details sub-document)
- colleges
- jobs and applications
- notifications (TTL-expired)
- activity_logs (append-only audit trail)
- resumes (structured resume builder documents)
"""
import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from app.core.config import get_settings

logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        settings = get_settings()
        _client = MongoClient(settings.mongodb_uri, tz_aware=False)
    return _client


def get_mongo_db() -> Database:
    """Get the portal database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
    return _db


def get_db() -> Database:
    """
    Dependency for FastAPI route injection.
    Usage:
        @router.get("/jobs")
        def list_jobs(db: Database = Depends(get_db)):
            ...
    Tests override this dependency with an in-memory database.
    """
    return get_mongo_db()


def get_collection(name: str, db: Database = None) -> Collection:
    """Get a specific collection."""
    db = db if db is not None else get_mongo_db()
    return db[name]


def check_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except PyMongoError as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "colleges": "colleges",
    "jobs": "jobs",
    "applications": "applications",
    "notifications": "notifications",
    "activity_logs": "activity_logs",
    "resumes": "resumes",
}


def init_mongo_indexes(db: Database = None):
    """
    Create indexes.
    Call this once during app startup. The unique indexes back the
    uniqueness rules (email, one application per job/student pair,
    one resume per student).
    """
    db = db if db is not None else get_mongo_db()

    users = db[COLLECTIONS["users"]]
    users.create_index("email", unique=True)
    users.create_index("role")
    users.create_index("details.college")

    db[COLLECTIONS["colleges"]].create_index("name", unique=True)

    jobs = db[COLLECTIONS["jobs"]]
    jobs.create_index([("status", ASCENDING), ("is_active", ASCENDING)])
    jobs.create_index("posted_by")
    jobs.create_index("application_deadline")

    applications = db[COLLECTIONS["applications"]]
    applications.create_index([("job_id", ASCENDING), ("student_id", ASCENDING)], unique=True)
    applications.create_index([("student_id", ASCENDING), ("status", ASCENDING)])
    applications.create_index([("job_id", ASCENDING), ("status", ASCENDING)])

    notifications = db[COLLECTIONS["notifications"]]
    notifications.create_index([("recipient", ASCENDING), ("is_read", ASCENDING)])
    notifications.create_index([("recipient", ASCENDING), ("type", ASCENDING)])
    # TTL: documents are removed once expires_at has passed
    notifications.create_index("expires_at", expireAfterSeconds=0)

    activity = db[COLLECTIONS["activity_logs"]]
    activity.create_index([("user_id", ASCENDING), ("timestamp", DESCENDING)])
    activity.create_index([("action", ASCENDING), ("timestamp", DESCENDING)])
    activity.create_index([("entity_type", ASCENDING), ("entity_id", ASCENDING)])

    db[COLLECTIONS["resumes"]].create_index("student_id", unique=True)

    logger.info("MongoDB indexes created")
