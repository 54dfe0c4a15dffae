"""
Notification Service

Notifications are a side effect of lifecycle transitions (job approved,
new application, status change, student verified). They are written
synchronously in the triggering request and are best-effort: if the write
fails the failure is logged and the primary mutation stands.

Expiry is handled by the TTL index on `expires_at`; listings also hide
anything already past its expiry in case the TTL monitor has not run yet.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from app.core.config import Settings, get_settings
from app.core.errors import NotFoundError
from app.db.mongodb import get_collection, COLLECTIONS
from app.services.mongo_service import serialize_doc, serialize_docs, to_object_id

logger = logging.getLogger(__name__)


class NotificationService:
    """CRUD for the notifications collection plus the lifecycle fan-out helpers."""

    def __init__(self, db: Database = None, settings: Settings = None):
        self.collection: Collection = get_collection(COLLECTIONS["notifications"], db)
        self.settings = settings or get_settings()

    # ------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------

    def _build(self, recipient: Any, title: str, message: str, type: str,
               priority: str = "Medium", link: Optional[str] = None,
               metadata: Optional[dict] = None) -> dict:
        now = datetime.utcnow()
        return {
            "recipient": to_object_id(recipient),
            "title": title[:100],
            "message": message[:500],
            "type": type,
            "priority": priority,
            "is_read": False,
            "read_at": None,
            "link": link,
            "metadata": {k: to_object_id(v) for k, v in (metadata or {}).items() if v is not None},
            "delivery_status": "Delivered",
            "delivered_at": now,
            "expires_at": now + timedelta(days=self.settings.notification_ttl_days),
            "created_at": now,
        }

    def create(self, recipient: Any, title: str, message: str, type: str, **kwargs) -> dict:
        """Insert one notification. Raises on storage errors."""
        doc = self._build(recipient, title, message, type, **kwargs)
        self.collection.insert_one(doc)
        logger.info("Notification created for user %s", recipient)
        return serialize_doc(doc)

    def notify(self, recipient: Any, title: str, message: str, type: str, **kwargs) -> Optional[dict]:
        """Best-effort create: storage failures are logged, never raised."""
        try:
            return self.create(recipient, title, message, type, **kwargs)
        except PyMongoError:
            logger.exception("Failed to create notification for user %s", recipient)
            return None

    # ------------------------------------------------------------
    # Lifecycle fan-out
    # ------------------------------------------------------------

    def job_approved(self, recruiter_id: Any, job_title: str, job_id: Any):
        return self.notify(
            recruiter_id, "Job Approved",
            f'Your job posting "{job_title}" has been approved and is now visible to students.',
            "Job", priority="High", link=f"/jobs/{job_id}", metadata={"job_id": job_id},
        )

    def job_rejected(self, recruiter_id: Any, job_title: str, reason: str, job_id: Any):
        return self.notify(
            recruiter_id, "Job Rejected",
            f'Your job posting "{job_title}" was rejected. Reason: {reason}',
            "Job", priority="High", link=f"/jobs/{job_id}", metadata={"job_id": job_id},
        )

    def new_application(self, recruiter_id: Any, student_name: str, job_title: str,
                        application_id: Any, student_id: Any = None):
        return self.notify(
            recruiter_id, "New Application Received",
            f"{student_name} applied for {job_title}",
            "Application", priority="Medium", link=f"/applications/{application_id}",
            metadata={"application_id": application_id, "sender_id": student_id},
        )

    def application_status_updated(self, student_id: Any, job_title: str, status: str,
                                   application_id: Any, recruiter_id: Any = None):
        return self.notify(
            student_id, "Application Status Updated",
            f"Your application for {job_title} has been updated to: {status}",
            "Application", priority="High", link=f"/applications/{application_id}",
            metadata={"application_id": application_id, "sender_id": recruiter_id},
        )

    def student_verified(self, student_id: Any):
        return self.notify(
            student_id, "Account Verified",
            "Your student account has been verified. You can now apply for jobs.",
            "System", priority="High",
        )

    # ------------------------------------------------------------
    # Recipient operations
    # ------------------------------------------------------------

    def list_for_user(self, user_id: Any, skip: int, limit: int,
                      type: Optional[str] = None, is_read: Optional[bool] = None,
                      priority: Optional[str] = None):
        """Returns (notifications, total), newest first."""
        query = {
            "recipient": to_object_id(user_id),
            "expires_at": {"$gt": datetime.utcnow()},
        }
        if type:
            query["type"] = type
        if is_read is not None:
            query["is_read"] = is_read
        if priority:
            query["priority"] = priority

        total = self.collection.count_documents(query)
        cursor = self.collection.find(query).sort("created_at", -1).skip(skip).limit(limit)
        return serialize_docs(cursor), total

    def unread_count(self, user_id: Any) -> int:
        return self.collection.count_documents({
            "recipient": to_object_id(user_id),
            "is_read": False,
            "expires_at": {"$gt": datetime.utcnow()},
        })

    def mark_as_read(self, user_id: Any, notification_id: str) -> dict:
        query = {"_id": to_object_id(notification_id, "Notification"), "recipient": to_object_id(user_id)}
        if not self.collection.find_one(query):
            raise NotFoundError("Notification not found")
        self.collection.update_one(query, {"$set": {"is_read": True, "read_at": datetime.utcnow()}})
        return serialize_doc(self.collection.find_one(query))

    def mark_all_as_read(self, user_id: Any) -> int:
        result = self.collection.update_many(
            {"recipient": to_object_id(user_id), "is_read": False},
            {"$set": {"is_read": True, "read_at": datetime.utcnow()}},
        )
        return result.modified_count

    def delete(self, user_id: Any, notification_id: str) -> None:
        result = self.collection.delete_one({
            "_id": to_object_id(notification_id, "Notification"),
            "recipient": to_object_id(user_id),
        })
        if result.deleted_count == 0:
            raise NotFoundError("Notification not found")
