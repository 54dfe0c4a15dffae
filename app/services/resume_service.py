"""
Resume Service - one structured resume per student.

Students create, read, update and export their own resume. Recruiters
and TnP officers can read any student's resume.
"""

from datetime import datetime
from typing import Any, Optional

from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from app.core.errors import ConflictError, NotFoundError
from app.db.mongodb import get_collection, COLLECTIONS
from app.schemas.schemas import ResumeCreate, ResumeUpdate
from app.services.mongo_service import ActivityLogService, sanitize_user, serialize_doc, to_object_id
from app.services.pdf_service import render_resume_pdf


def is_resume_complete(resume: dict) -> bool:
    """Complete once it has contact details, education and at least one technical skill."""
    personal = resume.get("personal_details") or {}
    skills = resume.get("skills") or {}
    return bool(
        personal.get("name") and personal.get("email") and personal.get("phone")
        and resume.get("education")
        and skills.get("technical")
    )


class ResumeService:

    def __init__(self, db: Database = None):
        self.collection: Collection = get_collection(COLLECTIONS["resumes"], db)
        self.users: Collection = get_collection(COLLECTIONS["users"], db)
        self.activity = ActivityLogService(db)

    def _for_student(self, student_id: Any) -> Optional[dict]:
        return self.collection.find_one({"student_id": to_object_id(student_id, "Student")})

    def create(self, student_id: str, payload: ResumeCreate, meta: Optional[dict] = None) -> dict:
        if self._for_student(student_id):
            raise ConflictError("Resume already exists. Use update endpoint instead.")

        now = datetime.utcnow()
        doc = payload.model_dump()
        doc.update({
            "student_id": to_object_id(student_id),
            "last_updated": now,
            "created_at": now,
            "updated_at": now,
        })
        doc["is_complete"] = is_resume_complete(doc)
        try:
            self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError("Resume already exists. Use update endpoint instead.")

        self.activity.log(student_id, "RESUME_CREATE", "Resume", doc["_id"], meta=meta)
        return serialize_doc(doc)

    def get_own(self, student_id: str) -> dict:
        resume = self._for_student(student_id)
        if not resume:
            raise NotFoundError("Resume not found. Please create one first.")
        return serialize_doc(resume)

    def update(self, student_id: str, patch: ResumeUpdate, meta: Optional[dict] = None) -> dict:
        resume = self._for_student(student_id)
        if not resume:
            raise NotFoundError("Resume not found. Please create one first.")

        updates = patch.model_dump(exclude_none=True)
        # personal details merge field by field
        personal = updates.pop("personal_details", None)
        if personal:
            for field, value in personal.items():
                updates[f"personal_details.{field}"] = value

        now = datetime.utcnow()
        updates.update({"last_updated": now, "updated_at": now})
        self.collection.update_one({"_id": resume["_id"]}, {"$set": updates})

        resume = self.collection.find_one({"_id": resume["_id"]})
        complete = is_resume_complete(resume)
        if complete != resume.get("is_complete"):
            self.collection.update_one({"_id": resume["_id"]}, {"$set": {"is_complete": complete}})
            resume["is_complete"] = complete

        self.activity.log(student_id, "RESUME_UPDATE", "Resume", resume["_id"], meta=meta)
        return serialize_doc(resume)

    def get_for_student(self, student_id: Any) -> dict:
        """Recruiter/TnP view with the student's basic profile attached."""
        resume = self._for_student(student_id)
        if not resume:
            raise NotFoundError("Resume not found")
        student = self.users.find_one(
            {"_id": resume["student_id"]},
            {"full_name": 1, "email": 1, "details": 1},
        )
        out = serialize_doc(resume)
        out["student"] = sanitize_user(student)
        return out

    def render_pdf(self, student_id: str):
        """Returns (pdf_bytes, download_filename)."""
        resume = self._for_student(student_id)
        if not resume:
            raise NotFoundError("Resume not found")
        name = (resume.get("personal_details") or {}).get("name") or "resume"
        filename = "_".join(name.split()) + "_resume.pdf"
        return render_resume_pdf(resume), filename
