"""
MongoDB Service - shared helpers and the activity log.

Every domain service (users, jobs, applications, ...) receives the
Database handle in its constructor so routes can inject it and tests can
swap in an in-memory database.
"""

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.collection import Collection
from pymongo.database import Database

from app.core.errors import NotFoundError
from app.db.mongodb import get_collection, COLLECTIONS


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def _serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Convert MongoDB document (and nested ObjectIds) to JSON-serializable dict."""
    if doc is None:
        return None
    return _serialize_value(doc)


def serialize_docs(docs) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


def to_object_id(value: Any, entity: str = "Resource") -> ObjectId:
    """Parse an id from the URL; malformed ids behave like missing ones."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise NotFoundError(f"{entity} not found")


def sanitize_user(user: Optional[dict]) -> Optional[dict]:
    """Strip credentials before a user leaves the service layer."""
    if user is None:
        return None
    user = dict(user)
    user.pop("password_hash", None)
    return serialize_doc(user)


ACTIONS = {
    "USER_LOGIN", "USER_LOGOUT", "USER_REGISTER",
    "JOB_CREATE", "JOB_UPDATE", "JOB_DELETE", "JOB_APPROVE", "JOB_REJECT",
    "APPLICATION_SUBMIT", "APPLICATION_UPDATE", "APPLICATION_WITHDRAW",
    "RESUME_CREATE", "RESUME_UPDATE",
    "STUDENT_VERIFY", "STUDENT_UNVERIFY", "STUDENT_DEACTIVATE",
    "PROFILE_UPDATE", "PASSWORD_CHANGE", "AVATAR_UPLOAD", "MARKSHEET_UPLOAD",
}


# ============================================================
# ACTIVITY LOGS COLLECTION
# Append-only audit trail, one record per mutating operation
# ============================================================

class ActivityLogService:
    """Writes audit records. Append-only: no update or delete methods."""

    def __init__(self, db: Database = None):
        self.collection: Collection = get_collection(COLLECTIONS["activity_logs"], db)

    def log(
        self,
        user_id: Any,
        action: str,
        entity_type: Optional[str] = None,
        entity_id: Any = None,
        details: Optional[dict] = None,
        meta: Optional[dict] = None,
    ) -> str:
        """
        Insert an activity record.

        Args:
            user_id: actor
            action: one of ACTIONS
            entity_type / entity_id: what was touched
            details: free-form extra data (reason, new status, ...)
            meta: request metadata - {"ip_address", "user_agent"}
        """
        if action not in ACTIONS:
            raise ValueError(f"Unknown activity action: {action}")
        meta = meta or {}
        doc = {
            "user_id": to_object_id(user_id),
            "action": action,
            "entity_type": entity_type,
            "entity_id": ObjectId(str(entity_id)) if entity_id is not None else None,
            "details": details,
            "ip_address": meta.get("ip_address"),
            "user_agent": meta.get("user_agent"),
            "timestamp": datetime.utcnow(),
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)
