"""
Job Routes

POST /jobs - Create job posting (recruiter only, starts Pending)
GET /jobs - List jobs visible to the caller
GET /jobs/{job_id} - Get job details
PUT /jobs/{job_id} - Update a pending job (owner only)
DELETE /jobs/{job_id} - Soft delete (owner or TnP, no applications)
PUT /jobs/{job_id}/approve - Approve a pending job (TnP only)
PUT /jobs/{job_id}/reject - Reject a pending job (TnP only)

Visibility:
- Students see Approved, active jobs whose deadline has not passed
- Recruiters see their own jobs
- TnP officers see every job
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from pymongo.database import Database

from app.db.mongodb import get_db
from app.core.auth import get_current_recruiter, get_current_tnp, get_current_user, request_meta, require_roles
from app.schemas.schemas import ApproveJobRequest, JobCreate, JobStatus, JobType, JobUpdate, RejectJobRequest
from app.services.job_service import JobService
from app.utils.responses import PageParams, api_success, build_pagination

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("", status_code=201)
async def create_job(
    job: JobCreate,
    request: Request,
    recruiter: dict = Depends(get_current_recruiter),
    db: Database = Depends(get_db),
):
    """Create a new job posting. It stays Pending until a TnP officer reviews it."""
    created = JobService(db).create(recruiter["user_id"], job, request_meta(request))
    return api_success(created, "Job created successfully. Waiting for TnP approval.")


@router.get("")
async def list_jobs(
    page: PageParams = Depends(),
    status: Optional[JobStatus] = Query(None, description="Ignored for students"),
    job_type: Optional[JobType] = Query(None),
    location: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Title or company name"),
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    jobs, total = JobService(db).list(
        user, page.skip, page.limit,
        status=status.value if status else None,
        job_type=job_type.value if job_type else None,
        location=location,
        search=search,
    )
    return api_success(jobs, "Jobs fetched successfully", build_pagination(total, page))


@router.get("/{job_id}")
async def get_job(job_id: str, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    return api_success(JobService(db).get(user, job_id), "Job fetched successfully")


@router.put("/{job_id}")
async def update_job(
    job_id: str,
    patch: JobUpdate,
    request: Request,
    recruiter: dict = Depends(get_current_recruiter),
    db: Database = Depends(get_db),
):
    updated = JobService(db).update(recruiter["user_id"], job_id, patch, request_meta(request))
    return api_success(updated, "Job updated successfully")


@router.delete("/{job_id}")
async def delete_job(
    job_id: str,
    request: Request,
    user: dict = Depends(require_roles("Recruiter", "TnP")),
    db: Database = Depends(get_db),
):
    JobService(db).delete(user, job_id, request_meta(request))
    return api_success(message="Job deleted successfully")


@router.put("/{job_id}/approve")
async def approve_job(
    job_id: str,
    request: Request,
    payload: Optional[ApproveJobRequest] = Body(None),
    tnp: dict = Depends(get_current_tnp),
    db: Database = Depends(get_db),
):
    notes = payload.approval_notes if payload else None
    job = JobService(db).approve(tnp["user_id"], job_id, notes, request_meta(request))
    return api_success(job, "Job approved successfully")


@router.put("/{job_id}/reject")
async def reject_job(
    job_id: str,
    payload: RejectJobRequest,
    request: Request,
    tnp: dict = Depends(get_current_tnp),
    db: Database = Depends(get_db),
):
    job = JobService(db).reject(tnp["user_id"], job_id, payload.rejection_reason, request_meta(request))
    return api_success(job, "Job rejected")
