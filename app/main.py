"""
Placement Portal - Main Application

FastAPI backend with:
- MongoDB for every collection
- JWT authentication (Bearer header or `token` cookie)
- Role-based access for Students, Recruiters and TnP officers
- Uploaded files served from /uploads

Run: uvicorn app.main:app --reload
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.errors import PyMongoError
from slowapi.middleware import SlowAPIMiddleware

from app.api.routes import api_router
from app.db.mongodb import check_mongo_connection, init_mongo_indexes
from app.core.config import get_settings
from app.core.errors import register_exception_handlers
from app.core.logging import log_requests, setup_logging
from app.core.rate_limit import limiter

settings = get_settings()
setup_logging(settings)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Placement Portal",
    description="""
    Placement management backend.

    ## Features
    - **Authentication**: JWT auth for Students, Recruiters and TnP officers
    - **Jobs**: Recruiters post, TnP officers approve or reject, students browse
    - **Applications**: PDF resume upload, recruiter review pipeline, withdrawal
    - **Resume Builder**: Structured resume with PDF export
    - **Notifications**: Lifecycle notifications with read state and expiry
    - **Analytics**: Role-scoped dashboards and placement reports
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# default per-IP limit for every route not exempted below
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(log_requests)

register_exception_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api")

# Serve uploaded files
os.makedirs(settings.upload_dir, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except PyMongoError:
        logger.exception("MongoDB index initialization failed")


@app.get("/health", tags=["Health"])
@limiter.exempt
async def health_check():
    """Liveness plus database reachability."""
    mongo_ok = check_mongo_connection()
    return {
        "success": True,
        "data": {
            "status": "healthy" if mongo_ok else "degraded",
            "mongodb": "connected" if mongo_ok else "disconnected",
        },
        "message": "Server is running",
    }
