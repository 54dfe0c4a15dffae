"""
Analytics Routes

GET /analytics/dashboard - Role-scoped dashboard counts
GET /analytics/reports - Placement report with course-wise breakdown (TnP only)
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from app.db.mongodb import get_db
from app.core.auth import get_current_tnp, get_current_user
from app.schemas.schemas import to_naive_utc
from app.services.dashboard_service import DashboardService
from app.utils.responses import api_success

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/dashboard")
async def dashboard(user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    stats = DashboardService(db).for_principal(user)
    return api_success(stats, "Dashboard stats fetched successfully")


@router.get("/reports")
async def placement_report(
    start_date: Optional[datetime] = Query(None, description="Students created on/after"),
    end_date: Optional[datetime] = Query(None, description="Students created on/before"),
    tnp: dict = Depends(get_current_tnp),
    db: Database = Depends(get_db),
):
    report = DashboardService(db).placement_report(
        tnp["user_id"],
        to_naive_utc(start_date) if start_date else None,
        to_naive_utc(end_date) if end_date else None,
    )
    return api_success(report, "Placement report generated successfully")
