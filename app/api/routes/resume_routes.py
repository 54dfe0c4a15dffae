"""
Resume Builder Routes

POST /resume - Create own resume (student, one per student)
GET /resume - Get own resume (student)
PUT /resume - Update own resume (student)
GET /resume/pdf - Download own resume as PDF (student)
GET /resume/{student_id} - View a student's resume (recruiter or TnP)
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from pymongo.database import Database

from app.db.mongodb import get_db
from app.core.auth import get_current_student, request_meta, require_roles
from app.schemas.schemas import ResumeCreate, ResumeUpdate
from app.services.resume_service import ResumeService
from app.utils.responses import api_success

router = APIRouter(prefix="/resume", tags=["Resume"])


@router.post("", status_code=201)
async def create_resume(
    payload: ResumeCreate,
    request: Request,
    student: dict = Depends(get_current_student),
    db: Database = Depends(get_db),
):
    resume = ResumeService(db).create(student["user_id"], payload, request_meta(request))
    return api_success(resume, "Resume created successfully")


@router.get("")
async def get_resume(student: dict = Depends(get_current_student), db: Database = Depends(get_db)):
    return api_success(ResumeService(db).get_own(student["user_id"]), "Resume fetched successfully")


@router.put("")
async def update_resume(
    payload: ResumeUpdate,
    request: Request,
    student: dict = Depends(get_current_student),
    db: Database = Depends(get_db),
):
    resume = ResumeService(db).update(student["user_id"], payload, request_meta(request))
    return api_success(resume, "Resume updated successfully")


@router.get("/pdf")
async def download_resume_pdf(student: dict = Depends(get_current_student), db: Database = Depends(get_db)):
    """Render the stored resume to PDF."""
    pdf, filename = ResumeService(db).render_pdf(student["user_id"])
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{student_id}")
async def get_student_resume(
    student_id: str,
    user: dict = Depends(require_roles("Recruiter", "TnP")),
    db: Database = Depends(get_db),
):
    return api_success(ResumeService(db).get_for_student(student_id), "Resume fetched successfully")
