"""
Application Service - submission, review pipeline and withdrawal.

Pipeline (forward only, stages may be skipped):

    Applied -> Under Review -> Shortlisted -> Interview Scheduled -> Accepted

Rejected can be reached from any open stage. Accepted and Rejected are
terminal. Re-sending the current status is allowed so recruiters can
update notes or interview details.

`jobs.application_count` moves with `$inc` on submit and withdraw; it is
never recomputed.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import UploadFile
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from app.core.config import Settings, get_settings
from app.core.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from app.db.mongodb import get_collection, COLLECTIONS
from app.schemas.schemas import ApplicationStatusUpdate
from app.services.authorization import ensure_owner, ensure_owner_or_role, ensure_state
from app.services.mongo_service import (
    ActivityLogService, sanitize_user, serialize_doc, serialize_docs, to_object_id,
)
from app.services.notification_service import NotificationService
from app.services.user_service import UserService
from app.utils.file_upload import remove_upload, save_upload

logger = logging.getLogger(__name__)

PIPELINE = ["Applied", "Under Review", "Shortlisted", "Interview Scheduled", "Accepted"]
TERMINAL_STATUSES = {"Accepted", "Rejected"}
WITHDRAW_REFUSED = "Cannot withdraw application that is already under review"


def check_transition(current: str, new: str) -> None:
    """Raise BadRequestError if `current -> new` is not a legal move."""
    if current == new:
        return
    if current in TERMINAL_STATUSES:
        raise BadRequestError(f"Application is already {current}")
    if new == "Rejected":
        return
    if PIPELINE.index(new) <= PIPELINE.index(current):
        raise BadRequestError(f"Cannot move application from {current} to {new}")


class ApplicationService:

    def __init__(self, db: Database = None, settings: Settings = None):
        self.settings = settings or get_settings()
        self.collection: Collection = get_collection(COLLECTIONS["applications"], db)
        self.jobs: Collection = get_collection(COLLECTIONS["jobs"], db)
        self.users = UserService(db)
        self.activity = ActivityLogService(db)
        self.notifications = NotificationService(db, self.settings)

    def _find(self, application_id: Any) -> dict:
        application = self.collection.find_one({"_id": to_object_id(application_id, "Application")})
        if not application:
            raise NotFoundError("Application not found")
        return application

    # ------------------------------------------------------------
    # Student operations
    # ------------------------------------------------------------

    async def apply(self, student_id: str, job_id: Any, resume: Optional[UploadFile],
                    meta: Optional[dict] = None) -> dict:
        """
        Submit an application with a PDF resume.

        Checks, in order: job exists, approved, active, deadline open,
        student verified, student not placed, no prior application,
        resume valid.
        """
        job = self.jobs.find_one({"_id": to_object_id(job_id, "Job")})
        if not job:
            raise NotFoundError("Job not found")
        ensure_state(job["status"], ["Approved"], "This job is not open for applications")
        if not job.get("is_active", True):
            raise BadRequestError("This job is no longer active")
        if job["application_deadline"] < datetime.utcnow():
            raise BadRequestError("Application deadline has passed")

        student = self.users.get_or_404(student_id)
        details = student.get("details") or {}
        if not details.get("is_verified"):
            raise ForbiddenError("Your account must be verified by your TnP officer before applying")
        if details.get("placement_status") == "Placed":
            raise ForbiddenError("Placed students cannot apply for more jobs")

        if self.collection.find_one({"job_id": job["_id"], "student_id": student["_id"]}, {"_id": 1}):
            raise ConflictError("You have already applied for this job")

        resume_meta = await save_upload(resume, "resume", self.settings)

        now = datetime.utcnow()
        doc = {
            "job_id": job["_id"],
            "student_id": student["_id"],
            "status": "Applied",
            "resume": resume_meta,
            "applied_at": now,
            "reviewed_at": None,
            "reviewed_by": None,
            "interview_details": None,
            "recruiter_notes": None,
            "rejection_reason": None,
            "viewed_by_recruiter": False,
            "viewed_at": None,
            "created_at": now,
            "updated_at": now,
        }
        try:
            self.collection.insert_one(doc)
        except DuplicateKeyError:
            # lost a race with a concurrent submit for the same pair
            remove_upload(resume_meta, self.settings)
            raise ConflictError("You have already applied for this job")

        self.jobs.update_one({"_id": job["_id"]}, {"$inc": {"application_count": 1}})
        self.activity.log(student["_id"], "APPLICATION_SUBMIT", "Application", doc["_id"],
                          details={"job_id": str(job["_id"])}, meta=meta)
        self.notifications.new_application(
            job["posted_by"], student["full_name"], job["title"], doc["_id"], student["_id"],
        )
        logger.info("Student %s applied to job %s", student_id, job["_id"])
        return serialize_doc(doc)

    def withdraw(self, student_id: str, application_id: Any, meta: Optional[dict] = None) -> None:
        """Hard delete; only the owner, only while still Applied."""
        query = {
            "_id": to_object_id(application_id, "Application"),
            "student_id": to_object_id(student_id),
        }
        application = self.collection.find_one(query)
        if not application:
            raise NotFoundError("Application not found")
        ensure_state(application["status"], ["Applied"], WITHDRAW_REFUSED)

        # guarded on status: a concurrent review or withdrawal leaves nothing to delete
        result = self.collection.delete_one({**query, "status": "Applied"})
        if result.deleted_count != 1:
            if self.collection.find_one(query, {"_id": 1}) is None:
                raise NotFoundError("Application not found")
            raise BadRequestError(WITHDRAW_REFUSED)

        self.jobs.update_one({"_id": application["job_id"]}, {"$inc": {"application_count": -1}})
        remove_upload(application.get("resume"), self.settings)
        self.activity.log(student_id, "APPLICATION_WITHDRAW", "Application", application["_id"],
                          details={"job_id": str(application["job_id"])}, meta=meta)

    def list_mine(self, student_id: str, skip: int, limit: int, status: Optional[str] = None):
        """Student's applications with the job embedded. Returns (applications, total)."""
        query = {"student_id": to_object_id(student_id)}
        if status:
            query["status"] = status

        total = self.collection.count_documents(query)
        docs = list(self.collection.find(query).sort("applied_at", -1).skip(skip).limit(limit))

        job_ids = list({d["job_id"] for d in docs})
        fields = {"title": 1, "company_name": 1, "location": 1, "job_type": 1, "ctc": 1,
                  "status": 1, "application_deadline": 1}
        jobs = {j["_id"]: j for j in self.jobs.find({"_id": {"$in": job_ids}}, fields)}
        for doc in docs:
            doc["job"] = serialize_doc(jobs.get(doc["job_id"]))
        return serialize_docs(docs), total

    # ------------------------------------------------------------
    # Recruiter / TnP operations
    # ------------------------------------------------------------

    def list_for_job(self, principal: dict, job_id: Any, skip: int, limit: int,
                     status: Optional[str] = None):
        """Applications to one job with the applicant embedded. Returns (applications, total)."""
        job = self.jobs.find_one({"_id": to_object_id(job_id, "Job")})
        if not job:
            raise NotFoundError("Job not found")
        ensure_owner_or_role(job["posted_by"], principal, ["TnP"],
                             "You can only view applications for your own jobs")

        query = {"job_id": job["_id"]}
        if status:
            query["status"] = status

        total = self.collection.count_documents(query)
        docs = list(self.collection.find(query).sort("applied_at", -1).skip(skip).limit(limit))

        student_ids = list({d["student_id"] for d in docs})
        students = {s["_id"]: s for s in self.users.collection.find({"_id": {"$in": student_ids}})}
        for doc in docs:
            doc["student"] = sanitize_user(students.get(doc["student_id"]))
        return serialize_docs(docs), total

    def update_status(self, recruiter_id: str, application_id: Any, update: ApplicationStatusUpdate,
                      meta: Optional[dict] = None) -> dict:
        application = self._find(application_id)
        job = self.jobs.find_one({"_id": application["job_id"]})
        if not job:
            raise NotFoundError("Job not found")
        ensure_owner(job["posted_by"], {"user_id": recruiter_id},
                     "You can only update applications for your own jobs")

        previous = application["status"]
        check_transition(previous, update.status)

        now = datetime.utcnow()
        changes = {
            "status": update.status,
            "reviewed_by": to_object_id(recruiter_id),
            "reviewed_at": now,
            "updated_at": now,
        }
        if update.recruiter_notes is not None:
            changes["recruiter_notes"] = update.recruiter_notes
        if update.rejection_reason is not None:
            changes["rejection_reason"] = update.rejection_reason
        if update.interview_details is not None:
            changes["interview_details"] = update.interview_details.model_dump()
        if not application.get("viewed_by_recruiter"):
            changes["viewed_by_recruiter"] = True
            changes["viewed_at"] = now

        result = self.collection.update_one({"_id": application["_id"], "status": previous}, {"$set": changes})
        if result.matched_count != 1:
            if self.collection.find_one({"_id": application["_id"]}, {"_id": 1}) is None:
                raise NotFoundError("Application not found")
            raise ConflictError("Application status changed meanwhile, reload and try again")

        if update.status == "Accepted" and previous != "Accepted":
            self.users.mark_placed(application["student_id"])

        self.activity.log(recruiter_id, "APPLICATION_UPDATE", "Application", application["_id"],
                          details={"from": previous, "to": update.status}, meta=meta)
        self.notifications.application_status_updated(
            application["student_id"], job["title"], update.status, application["_id"], recruiter_id,
        )
        return serialize_doc(self.collection.find_one({"_id": application["_id"]}))
