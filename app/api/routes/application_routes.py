"""
Application Routes

POST /applications/apply/{job_id} - Apply with a PDF resume (multipart field `resume`)
GET /applications/my-applications - Own applications (student only)
GET /applications/job/{job_id} - Applications for a job (owner recruiter or TnP)
PUT /applications/{application_id}/status - Move an application along the pipeline (recruiter)
DELETE /applications/{application_id} - Withdraw while still Applied (student)
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from pymongo.database import Database

from app.db.mongodb import get_db
from app.core.auth import get_current_recruiter, get_current_student, request_meta, require_roles
from app.schemas.schemas import ApplicationStatus, ApplicationStatusUpdate
from app.services.application_service import ApplicationService
from app.utils.responses import PageParams, api_success, build_pagination

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("/apply/{job_id}", status_code=201)
async def apply_to_job(
    job_id: str,
    request: Request,
    resume: Optional[UploadFile] = File(None),
    student: dict = Depends(get_current_student),
    db: Database = Depends(get_db),
):
    """
    Apply to an approved job.

    The student must be verified and not yet placed. One application
    per job; the resume must be a readable PDF.
    """
    application = await ApplicationService(db).apply(student["user_id"], job_id, resume, request_meta(request))
    return api_success(application, "Application submitted successfully")


@router.get("/my-applications")
async def my_applications(
    page: PageParams = Depends(),
    status: Optional[ApplicationStatus] = Query(None),
    student: dict = Depends(get_current_student),
    db: Database = Depends(get_db),
):
    applications, total = ApplicationService(db).list_mine(
        student["user_id"], page.skip, page.limit, status.value if status else None
    )
    return api_success(applications, "Applications fetched successfully", build_pagination(total, page))


@router.get("/job/{job_id}")
async def job_applications(
    job_id: str,
    page: PageParams = Depends(),
    status: Optional[ApplicationStatus] = Query(None),
    user: dict = Depends(require_roles("Recruiter", "TnP")),
    db: Database = Depends(get_db),
):
    applications, total = ApplicationService(db).list_for_job(
        user, job_id, page.skip, page.limit, status.value if status else None
    )
    return api_success(applications, "Applications fetched successfully", build_pagination(total, page))


@router.put("/{application_id}/status")
async def update_application_status(
    application_id: str,
    payload: ApplicationStatusUpdate,
    request: Request,
    recruiter: dict = Depends(get_current_recruiter),
    db: Database = Depends(get_db),
):
    application = ApplicationService(db).update_status(
        recruiter["user_id"], application_id, payload, request_meta(request)
    )
    return api_success(application, "Application status updated successfully")


@router.delete("/{application_id}")
async def withdraw_application(
    application_id: str,
    request: Request,
    student: dict = Depends(get_current_student),
    db: Database = Depends(get_db),
):
    ApplicationService(db).withdraw(student["user_id"], application_id, request_meta(request))
    return api_success(message="Application withdrawn successfully")
