"""
College Routes

GET /colleges - Public, searchable college directory (used by the sign-up form)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from app.db.mongodb import get_db
from app.services.college_service import CollegeService
from app.utils.responses import PageParams, api_success, build_pagination

router = APIRouter(prefix="/colleges", tags=["Colleges"])


@router.get("")
async def list_colleges(
    page: PageParams = Depends(),
    search: Optional[str] = Query(None, description="Case-insensitive name match"),
    db: Database = Depends(get_db),
):
    colleges, total = CollegeService(db).list(page.skip, page.limit, search)
    return api_success(colleges, "Colleges fetched successfully", build_pagination(total, page))
