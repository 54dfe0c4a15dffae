"""
User Service - identity, credentials and role-tagged profiles.

A user document carries `role` and a single `details` sub-document whose
shape is chosen by the role:

    Student   -> course_name, college, is_verified, placement_status, ...
    Recruiter -> company_name, industry, designation, verification_status, ...
    TnP       -> college, designation, employee_id

The register payload is a discriminated union, so the stored shape always
matches the role.
"""

import logging
import re
from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from app.core.auth import hash_password, verify_password, token_for_user
from app.core.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError, UnauthorizedError
from app.db.mongodb import get_collection, COLLECTIONS
from app.schemas.schemas import DETAILS_UPDATE_MODELS, ProfileUpdate, RecruiterVerification, RegisterRequest
from app.services.authorization import ensure_role, ensure_same_college
from app.services.college_service import CollegeService, college_summary
from app.services.mongo_service import ActivityLogService, sanitize_user, to_object_id
from app.services.notification_service import NotificationService
from app.utils.file_upload import remove_stored_file

logger = logging.getLogger(__name__)


def _student_details(details: dict) -> dict:
    return {
        "course_name": details["course_name"],
        "college": to_object_id(details["college"]),
        "is_verified": False,
        "placement_status": "Not Placed",
        "cgpa": details.get("cgpa"),
        "year_of_completion": details.get("year_of_completion"),
        "registration_number": details.get("registration_number"),
        "address": None,
        "tenth_marks": {"percentage": None, "marksheet": None},
        "twelfth_marks": {"percentage": None, "marksheet": None},
        "last_semester_marksheet": None,
        "area_of_interest": [],
    }


def _recruiter_details(details: dict) -> dict:
    return {
        "company_name": details["company_name"],
        "industry": details["industry"],
        "designation": details["designation"],
        "company_info": details.get("company_info"),
        "company_website": details.get("company_website"),
        # recruiters are verified on sign-up
        "verification_status": RecruiterVerification.verified.value,
    }


def _tnp_details(details: dict) -> dict:
    return {
        "college": to_object_id(details["college"]),
        "designation": details["designation"],
        "employee_id": details.get("employee_id"),
    }


DETAILS_BUILDERS = {
    "Student": _student_details,
    "Recruiter": _recruiter_details,
    "TnP": _tnp_details,
}


def validation_details(exc: ValidationError, prefix: str = "") -> list:
    return [
        {"field": ".".join([prefix] + [str(p) for p in err["loc"]]).strip("."), "message": err["msg"]}
        for err in exc.errors()
    ]


class UserService:

    def __init__(self, db: Database = None):
        self.db = db
        self.collection: Collection = get_collection(COLLECTIONS["users"], db)
        self.colleges = CollegeService(db)
        self.activity = ActivityLogService(db)
        self.notifications = NotificationService(db)

    # ------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------

    def get(self, user_id: Any) -> Optional[dict]:
        return self.collection.find_one({"_id": to_object_id(user_id, "User")})

    def get_or_404(self, user_id: Any) -> dict:
        user = self.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def populate(self, user: dict) -> dict:
        """Sanitized user with its college (if any) expanded."""
        out = sanitize_user(user)
        college_id = (user.get("details") or {}).get("college")
        if college_id is not None:
            out["details"]["college"] = college_summary(self.colleges.get(college_id)) or str(college_id)
        return out

    def officer_college(self, tnp_id: Any):
        officer = self.get_or_404(tnp_id)
        college = (officer.get("details") or {}).get("college")
        if officer.get("role") != "TnP" or college is None:
            raise NotFoundError("TnP college information not found")
        return college

    # ------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------

    def register(self, payload: RegisterRequest, meta: Optional[dict] = None):
        """Create a user and return (sanitized_user, token)."""
        email = payload.email.lower()
        if self.collection.find_one({"email": email}):
            raise ConflictError("Email already registered")

        details = payload.details.model_dump()
        if "college" in details and not self.colleges.exists(details["college"]):
            raise BadRequestError("Validation failed", [{"field": "details.college", "message": "College not found"}])

        now = datetime.utcnow()
        doc = {
            "full_name": payload.full_name,
            "email": email,
            "mobile_number": payload.mobile_number,
            "password_hash": hash_password(payload.password),
            "role": payload.role,
            "profile_avatar": "",
            "is_active": True,
            "last_login": None,
            "details": DETAILS_BUILDERS[payload.role](details),
            "created_at": now,
            "updated_at": now,
        }
        try:
            self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError("Email already registered")

        self.activity.log(doc["_id"], "USER_REGISTER", "User", doc["_id"], meta=meta)
        logger.info("Registered %s %s", payload.role, email)
        return self.populate(doc), token_for_user(doc)

    def login(self, email: str, password: str, meta: Optional[dict] = None):
        """Check credentials and return (sanitized_user, token)."""
        user = self.collection.find_one({"email": email.lower()})
        if not user:
            raise UnauthorizedError("Invalid credentials")
        if not user.get("is_active", True):
            raise ForbiddenError("Account has been deactivated")
        if not verify_password(password, user["password_hash"]):
            raise UnauthorizedError("Invalid credentials")

        now = datetime.utcnow()
        self.collection.update_one({"_id": user["_id"]}, {"$set": {"last_login": now}})
        user["last_login"] = now

        self.activity.log(user["_id"], "USER_LOGIN", meta=meta)
        return self.populate(user), token_for_user(user)

    def logout(self, user_id: Any, meta: Optional[dict] = None) -> None:
        self.activity.log(user_id, "USER_LOGOUT", meta=meta)

    def change_password(self, user_id: Any, current_password: str, new_password: str,
                        meta: Optional[dict] = None) -> None:
        user = self.get_or_404(user_id)
        if not verify_password(current_password, user["password_hash"]):
            raise BadRequestError("Current password is incorrect")

        self.collection.update_one(
            {"_id": user["_id"]},
            {"$set": {"password_hash": hash_password(new_password), "updated_at": datetime.utcnow()}},
        )
        self.activity.log(user["_id"], "PASSWORD_CHANGE", meta=meta)

    # ------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------

    def get_profile(self, user_id: Any) -> dict:
        return self.populate(self.get_or_404(user_id))

    def update_profile(self, user_id: Any, data: ProfileUpdate, meta: Optional[dict] = None) -> dict:
        """Update top-level fields and the caller's own role details only."""
        user = self.get_or_404(user_id)
        updates = {
            field: value for field, value in data.model_dump(exclude={"details"}).items()
            if value is not None
        }

        if data.details:
            model = DETAILS_UPDATE_MODELS[user["role"]]
            try:
                patch = model.model_validate(data.details).model_dump(exclude_none=True)
            except ValidationError as e:
                raise BadRequestError("Validation failed", validation_details(e, "details"))

            # percentages live inside the marks sub-documents
            for kind in ("tenth", "twelfth"):
                if f"{kind}_percentage" in patch:
                    updates[f"details.{kind}_marks.percentage"] = patch.pop(f"{kind}_percentage")
            for field, value in patch.items():
                updates[f"details.{field}"] = value

        if not updates:
            raise BadRequestError("No fields to update")

        updates["updated_at"] = datetime.utcnow()
        self.collection.update_one({"_id": user["_id"]}, {"$set": updates})
        self.activity.log(user["_id"], "PROFILE_UPDATE", "User", user["_id"], meta=meta)
        return self.get_profile(user["_id"])

    def set_avatar(self, user_id: Any, path: str, meta: Optional[dict] = None) -> dict:
        """Point the profile at a newly stored avatar and drop the previous file."""
        user = self.get_or_404(user_id)
        previous = user.get("profile_avatar")
        self.collection.update_one(
            {"_id": user["_id"]},
            {"$set": {"profile_avatar": path, "updated_at": datetime.utcnow()}},
        )
        if previous and previous != path:
            remove_stored_file(previous)
        self.activity.log(user["_id"], "AVATAR_UPLOAD", "User", user["_id"], details={"path": path}, meta=meta)
        return self.get_profile(user["_id"])

    def set_marksheet(self, user_id: Any, kind: str, path: str, meta: Optional[dict] = None) -> dict:
        user = self.get_or_404(user_id)
        ensure_role({"role": user["role"]}, "Student", message="Only students can upload marksheets")
        details = user.get("details") or {}
        if kind == "last_semester":
            field = "details.last_semester_marksheet"
            previous = details.get("last_semester_marksheet")
        else:
            field = f"details.{kind}_marks.marksheet"
            previous = (details.get(f"{kind}_marks") or {}).get("marksheet")
        self.collection.update_one(
            {"_id": user["_id"]},
            {"$set": {field: path, "updated_at": datetime.utcnow()}},
        )
        if previous and previous != path:
            remove_stored_file(previous)
        self.activity.log(user["_id"], "MARKSHEET_UPLOAD", "User", user["_id"],
                          details={"kind": kind, "path": path}, meta=meta)
        return self.get_profile(user["_id"])

    # ------------------------------------------------------------
    # TnP student management
    # ------------------------------------------------------------

    def list_students(self, tnp_id: Any, skip: int, limit: int,
                      search: Optional[str] = None, course: Optional[str] = None,
                      verified: Optional[bool] = None, placement: Optional[str] = None):
        """Students of the officer's college. Returns (students, total)."""
        query = {"role": "Student", "details.college": self.officer_college(tnp_id)}
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [{"full_name": pattern}, {"email": pattern}]
        if course:
            query["details.course_name"] = course
        if verified is not None:
            query["details.is_verified"] = verified
        if placement:
            query["details.placement_status"] = placement

        total = self.collection.count_documents(query)
        cursor = self.collection.find(query).sort("created_at", -1).skip(skip).limit(limit)
        return [self.populate(s) for s in cursor], total

    def _student_in_officer_college(self, tnp_id: Any, student_id: Any, message: str) -> dict:
        student = self.collection.find_one({"_id": to_object_id(student_id, "Student"), "role": "Student"})
        if not student:
            raise NotFoundError("Student not found")
        ensure_same_college(student["details"].get("college"), self.officer_college(tnp_id), message)
        return student

    def verify_student(self, tnp_id: Any, student_id: Any, is_verified: bool,
                       reason: Optional[str] = None, meta: Optional[dict] = None) -> dict:
        student = self._student_in_officer_college(
            tnp_id, student_id, "You can only verify students from your college"
        )
        self.collection.update_one(
            {"_id": student["_id"]},
            {"$set": {"details.is_verified": is_verified, "updated_at": datetime.utcnow()}},
        )
        self.activity.log(
            tnp_id, "STUDENT_VERIFY" if is_verified else "STUDENT_UNVERIFY",
            "User", student["_id"], details={"reason": reason}, meta=meta,
        )
        if is_verified:
            self.notifications.student_verified(student["_id"])
        return self.get_profile(student["_id"])

    def deactivate_student(self, tnp_id: Any, student_id: Any, meta: Optional[dict] = None) -> None:
        student = self._student_in_officer_college(
            tnp_id, student_id, "You can only manage students from your college"
        )
        self.collection.update_one(
            {"_id": student["_id"]},
            {"$set": {"is_active": False, "updated_at": datetime.utcnow()}},
        )
        self.activity.log(tnp_id, "STUDENT_DEACTIVATE", "User", student["_id"], meta=meta)

    def mark_placed(self, student_id: Any) -> None:
        self.collection.update_one(
            {"_id": to_object_id(student_id), "role": "Student"},
            {"$set": {"details.placement_status": "Placed", "updated_at": datetime.utcnow()}},
        )
