"""
Dashboard Service - read-only, role-scoped counts.

Student   -> own application pipeline
Recruiter -> own jobs and the applications they received
TnP       -> own college's students plus system-wide job counts
"""

from datetime import datetime
from typing import Any, Optional

from pymongo.database import Database

from app.db.mongodb import get_collection, COLLECTIONS
from app.services.authorization import ensure_role
from app.services.mongo_service import to_object_id
from app.services.user_service import UserService


def placement_rate(placed: int, total: int) -> str:
    """Percentage with two decimals; "0" when there are no students."""
    if not total:
        return "0"
    return f"{placed / total * 100:.2f}"


class DashboardService:

    def __init__(self, db: Database = None):
        self.users = get_collection(COLLECTIONS["users"], db)
        self.jobs = get_collection(COLLECTIONS["jobs"], db)
        self.applications = get_collection(COLLECTIONS["applications"], db)
        self.user_service = UserService(db)

    def for_principal(self, principal: dict) -> dict:
        role = principal["role"]
        if role == "Student":
            return self.student_stats(principal["user_id"])
        if role == "Recruiter":
            return self.recruiter_stats(principal["user_id"])
        ensure_role(principal, "TnP")
        return self.tnp_stats(principal["user_id"])

    def student_stats(self, student_id: Any) -> dict:
        student = self.user_service.get_or_404(student_id)
        query = {"student_id": student["_id"]}
        count = self.applications.count_documents
        return {
            "applications_count": count(query),
            "interview_scheduled": count({**query, "status": "Interview Scheduled"}),
            "shortlisted": count({**query, "status": "Shortlisted"}),
            "accepted": count({**query, "status": "Accepted"}),
            "placement_status": (student.get("details") or {}).get("placement_status", "Not Placed"),
        }

    def recruiter_stats(self, recruiter_id: Any) -> dict:
        posted_by = to_object_id(recruiter_id)
        job_ids = [j["_id"] for j in self.jobs.find({"posted_by": posted_by}, {"_id": 1})]
        in_jobs = {"job_id": {"$in": job_ids}}
        return {
            "jobs_posted": len(job_ids),
            "active_jobs": self.jobs.count_documents({"posted_by": posted_by, "status": "Approved", "is_active": True}),
            "pending_jobs": self.jobs.count_documents({"posted_by": posted_by, "status": "Pending"}),
            "applications_received": self.applications.count_documents(in_jobs),
            "shortlisted": self.applications.count_documents({**in_jobs, "status": "Shortlisted"}),
        }

    def tnp_stats(self, tnp_id: Any) -> dict:
        college = self.user_service.officer_college(tnp_id)
        students = {"role": "Student", "details.college": college}
        total = self.users.count_documents(students)
        placed = self.users.count_documents({**students, "details.placement_status": "Placed"})
        return {
            "total_students": total,
            "verified_students": self.users.count_documents({**students, "details.is_verified": True}),
            "placed_students": placed,
            "pending_jobs": self.jobs.count_documents({"status": "Pending"}),
            "approved_jobs": self.jobs.count_documents({"status": "Approved", "is_active": True}),
            "placement_rate": placement_rate(placed, total),
        }

    def placement_report(self, tnp_id: Any, start_date: Optional[datetime] = None,
                         end_date: Optional[datetime] = None) -> dict:
        """Placement totals and per-course breakdown for the officer's college."""
        college = self.user_service.officer_college(tnp_id)
        query = {"role": "Student", "details.college": college}
        window = {}
        if start_date:
            window["$gte"] = start_date
        if end_date:
            window["$lte"] = end_date
        if window:
            query["created_at"] = window

        courses = {}
        total = placed = 0
        cursor = self.users.find(query, {"details.course_name": 1, "details.placement_status": 1})
        for student in cursor:
            details = student.get("details") or {}
            stats = courses.setdefault(details.get("course_name") or "Unknown", {"total": 0, "placed": 0})
            stats["total"] += 1
            total += 1
            if details.get("placement_status") == "Placed":
                stats["placed"] += 1
                placed += 1

        course_wise = [
            {
                "course_name": name,
                "total": stats["total"],
                "placed": stats["placed"],
                "placement_rate": placement_rate(stats["placed"], stats["total"]),
            }
            for name, stats in sorted(courses.items())
        ]
        return {
            "total_students": total,
            "placed_students": placed,
            "placement_rate": placement_rate(placed, total),
            "course_wise_stats": course_wise,
            "start_date": start_date,
            "end_date": end_date,
        }
