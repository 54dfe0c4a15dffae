"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.auth_routes import router as auth_router
from app.api.routes.user_routes import router as user_router
from app.api.routes.college_routes import router as college_router
from app.api.routes.job_routes import router as job_router
from app.api.routes.application_routes import router as application_router
from app.api.routes.resume_routes import router as resume_router
from app.api.routes.notification_routes import router as notification_router
from app.api.routes.analytics_routes import router as analytics_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(college_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(resume_router)
api_router.include_router(notification_router)
api_router.include_router(analytics_router)
