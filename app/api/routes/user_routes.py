"""
User Routes

GET /users/me - Get own profile (college populated)
PUT /users/me - Update own profile and role details
POST /users/me/avatar - Upload profile picture
POST /users/me/marksheet - Upload a marksheet (student only)
GET /users/students - List students of own college (TnP only)
PUT /users/students/{student_id}/verify - Verify / unverify a student (TnP only)
DELETE /users/students/{student_id} - Deactivate a student (TnP only)
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from pymongo.database import Database

from app.db.mongodb import get_db
from app.core.auth import get_current_student, get_current_tnp, get_current_user, request_meta
from app.schemas.schemas import MarksheetKind, PlacementStatus, ProfileUpdate, VerifyStudentRequest
from app.services.user_service import UserService
from app.utils.file_upload import save_upload
from app.utils.responses import PageParams, api_success, build_pagination

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me")
async def get_me(user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    """Get current authenticated user's profile."""
    return api_success(UserService(db).get_profile(user["user_id"]), "Profile fetched successfully")


@router.put("/me")
async def update_me(
    payload: ProfileUpdate,
    request: Request,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """
    Update profile.

    `details` accepts only the editable fields of the caller's role;
    students cannot change college, verification or placement status.
    """
    profile = UserService(db).update_profile(user["user_id"], payload, request_meta(request))
    return api_success(profile, "Profile updated successfully")


@router.post("/me/avatar")
async def upload_avatar(
    request: Request,
    avatar: Optional[UploadFile] = File(None),
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    stored = await save_upload(avatar, "avatar")
    profile = UserService(db).set_avatar(user["user_id"], stored["path"], request_meta(request))
    return api_success(profile, "Avatar uploaded successfully")


@router.post("/me/marksheet")
async def upload_marksheet(
    request: Request,
    kind: MarksheetKind = Form(...),
    marksheet: Optional[UploadFile] = File(None),
    student: dict = Depends(get_current_student),
    db: Database = Depends(get_db),
):
    """Upload a tenth, twelfth or last-semester marksheet (PDF or image)."""
    stored = await save_upload(marksheet, "marksheet")
    profile = UserService(db).set_marksheet(student["user_id"], kind.value, stored["path"], request_meta(request))
    return api_success(profile, "Marksheet uploaded successfully")


@router.get("/students")
async def list_students(
    page: PageParams = Depends(),
    search: Optional[str] = Query(None, description="Name or email"),
    course: Optional[str] = Query(None),
    verified: Optional[bool] = Query(None),
    placement_status: Optional[PlacementStatus] = Query(None),
    tnp: dict = Depends(get_current_tnp),
    db: Database = Depends(get_db),
):
    students, total = UserService(db).list_students(
        tnp["user_id"], page.skip, page.limit,
        search=search, course=course, verified=verified,
        placement=placement_status.value if placement_status else None,
    )
    return api_success(students, "Students fetched successfully", build_pagination(total, page))


@router.put("/students/{student_id}/verify")
async def verify_student(
    student_id: str,
    payload: VerifyStudentRequest,
    request: Request,
    tnp: dict = Depends(get_current_tnp),
    db: Database = Depends(get_db),
):
    student = UserService(db).verify_student(
        tnp["user_id"], student_id, payload.is_verified, payload.reason, request_meta(request)
    )
    message = "Student verified successfully" if payload.is_verified else "Student verification revoked"
    return api_success(student, message)


@router.delete("/students/{student_id}")
async def deactivate_student(
    student_id: str,
    request: Request,
    tnp: dict = Depends(get_current_tnp),
    db: Database = Depends(get_db),
):
    UserService(db).deactivate_student(tnp["user_id"], student_id, request_meta(request))
    return api_success(message="Student deactivated successfully")
