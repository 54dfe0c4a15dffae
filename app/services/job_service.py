"""
Job Service - posting, approval and role-based visibility.

Lifecycle:
    Pending --approve--> Approved
    Pending --reject---> Rejected

Approved jobs always carry `approved_by` and never a `rejection_reason`;
Rejected jobs are the converse. Deletion is soft (`is_active=False`) and
soft-deleted jobs are invisible to every role.
"""

import logging
import re
from datetime import datetime
from typing import Any, Optional

from pymongo.collection import Collection
from pymongo.database import Database

from app.core.errors import BadRequestError, NotFoundError
from app.db.mongodb import get_collection, COLLECTIONS
from app.schemas.schemas import JobCreate, JobUpdate
from app.services.authorization import ensure_owner, ensure_owner_or_role, ensure_role, ensure_state
from app.services.mongo_service import ActivityLogService, serialize_doc, serialize_docs, to_object_id
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class JobService:

    def __init__(self, db: Database = None):
        self.collection: Collection = get_collection(COLLECTIONS["jobs"], db)
        self.applications: Collection = get_collection(COLLECTIONS["applications"], db)
        self.activity = ActivityLogService(db)
        self.notifications = NotificationService(db)

    def _find(self, job_id: Any) -> dict:
        job = self.collection.find_one({"_id": to_object_id(job_id, "Job"), "is_active": True})
        if not job:
            raise NotFoundError("Job not found")
        return job

    # ------------------------------------------------------------
    # Recruiter operations
    # ------------------------------------------------------------

    def create(self, recruiter_id: str, payload: JobCreate, meta: Optional[dict] = None) -> dict:
        now = datetime.utcnow()
        doc = payload.model_dump()
        doc.update({
            "posted_by": to_object_id(recruiter_id),
            "approved_by": None,
            "status": "Pending",
            "rejection_reason": None,
            "approval_notes": None,
            "application_count": 0,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        })
        self.collection.insert_one(doc)
        self.activity.log(recruiter_id, "JOB_CREATE", "Job", doc["_id"], details={"title": doc["title"]}, meta=meta)
        logger.info("Job %s created by recruiter %s", doc["_id"], recruiter_id)
        return serialize_doc(doc)

    def update(self, recruiter_id: str, job_id: Any, patch: JobUpdate, meta: Optional[dict] = None) -> dict:
        job = self._find(job_id)
        ensure_owner(job["posted_by"], {"user_id": recruiter_id}, "You can only update your own jobs")
        if job["status"] == "Approved":
            raise BadRequestError("Cannot update approved jobs")
        ensure_state(job["status"], ["Pending"], "Cannot update rejected jobs")

        updates = patch.model_dump(exclude_none=True)
        updates["updated_at"] = datetime.utcnow()
        self.collection.update_one({"_id": job["_id"]}, {"$set": updates})
        self.activity.log(recruiter_id, "JOB_UPDATE", "Job", job["_id"],
                          details={"fields": sorted(k for k in updates if k != "updated_at")}, meta=meta)
        return serialize_doc(self.collection.find_one({"_id": job["_id"]}))

    def delete(self, principal: dict, job_id: Any, meta: Optional[dict] = None) -> None:
        """Soft delete; refused once any application references the job."""
        job = self._find(job_id)
        ensure_owner_or_role(job["posted_by"], principal, ["TnP"], "You can only delete your own jobs")
        if self.applications.find_one({"job_id": job["_id"]}, {"_id": 1}):
            raise BadRequestError("Cannot delete job with existing applications")

        self.collection.update_one(
            {"_id": job["_id"]},
            {"$set": {"is_active": False, "updated_at": datetime.utcnow()}},
        )
        self.activity.log(principal["user_id"], "JOB_DELETE", "Job", job["_id"], meta=meta)

    # ------------------------------------------------------------
    # TnP operations
    # ------------------------------------------------------------

    def approve(self, tnp_id: str, job_id: Any, notes: Optional[str] = None,
                meta: Optional[dict] = None) -> dict:
        job = self._find(job_id)
        ensure_state(job["status"], ["Pending"], "Only pending jobs can be approved")

        result = self.collection.update_one(
            {"_id": job["_id"], "status": "Pending", "is_active": True},
            {
                "$set": {
                    "status": "Approved",
                    "approved_by": to_object_id(tnp_id),
                    "approval_notes": notes,
                    "updated_at": datetime.utcnow(),
                },
                "$unset": {"rejection_reason": ""},
            },
        )
        if result.modified_count != 1:
            raise BadRequestError("Only pending jobs can be approved")
        self.activity.log(tnp_id, "JOB_APPROVE", "Job", job["_id"], details={"notes": notes}, meta=meta)
        self.notifications.job_approved(job["posted_by"], job["title"], job["_id"])
        return serialize_doc(self.collection.find_one({"_id": job["_id"]}))

    def reject(self, tnp_id: str, job_id: Any, reason: str, meta: Optional[dict] = None) -> dict:
        job = self._find(job_id)
        ensure_state(job["status"], ["Pending"], "Only pending jobs can be rejected")
        if not reason or not reason.strip():
            raise BadRequestError("Rejection reason is required")

        result = self.collection.update_one(
            {"_id": job["_id"], "status": "Pending", "is_active": True},
            {
                "$set": {
                    "status": "Rejected",
                    "rejection_reason": reason,
                    "updated_at": datetime.utcnow(),
                },
                "$unset": {"approved_by": ""},
            },
        )
        if result.modified_count != 1:
            raise BadRequestError("Only pending jobs can be rejected")
        self.activity.log(tnp_id, "JOB_REJECT", "Job", job["_id"], details={"reason": reason}, meta=meta)
        self.notifications.job_rejected(job["posted_by"], job["title"], reason, job["_id"])
        return serialize_doc(self.collection.find_one({"_id": job["_id"]}))

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def visibility_query(self, principal: dict) -> dict:
        """Base filter for what the principal may see."""
        role = principal["role"]
        if role == "Student":
            return {
                "status": "Approved",
                "is_active": True,
                "application_deadline": {"$gte": datetime.utcnow()},
            }
        if role == "Recruiter":
            return {"posted_by": to_object_id(principal["user_id"]), "is_active": True}
        ensure_role(principal, "TnP")
        return {"is_active": True}

    def list(self, principal: dict, skip: int, limit: int,
             status: Optional[str] = None, job_type: Optional[str] = None,
             location: Optional[str] = None, search: Optional[str] = None):
        """Returns (jobs, total), newest first."""
        query = self.visibility_query(principal)
        if status and principal["role"] != "Student":
            query["status"] = status
        if job_type:
            query["job_type"] = job_type
        if location:
            query["location"] = {"$regex": re.escape(location), "$options": "i"}
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [{"title": pattern}, {"company_name": pattern}]

        total = self.collection.count_documents(query)
        cursor = self.collection.find(query).sort("created_at", -1).skip(skip).limit(limit)
        return serialize_docs(cursor), total

    def get(self, principal: dict, job_id: Any) -> dict:
        job = self._find(job_id)
        role = principal["role"]
        if role == "Student" and job["status"] != "Approved":
            raise NotFoundError("Job not found")
        if role == "Recruiter":
            ensure_owner(job["posted_by"], principal, "You can only view your own jobs")
        return serialize_doc(job)

    def owned_job_ids(self, recruiter_id: str):
        cursor = self.collection.find({"posted_by": to_object_id(recruiter_id)}, {"_id": 1})
        return [job["_id"] for job in cursor]
