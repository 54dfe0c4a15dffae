"""
Authentication Routes

POST /auth/register - Register a Student, Recruiter or TnP officer
POST /auth/login - Login and get JWT token (also set as `token` cookie); rate limited
POST /auth/logout - Clear the token cookie
GET /auth/verify-token - Return the authenticated principal
PUT /auth/change-password - Change own password
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Request, Response
from pymongo.database import Database

from app.db.mongodb import get_db
from app.core.auth import TOKEN_COOKIE, get_current_user, request_meta, set_token_cookie
from app.core.rate_limit import login_limit
from app.schemas.schemas import ChangePasswordRequest, LoginRequest, RegisterRequest
from app.services.user_service import UserService
from app.utils.responses import api_success

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", status_code=201)
async def register(
    payload: Annotated[RegisterRequest, Body(discriminator="role")],
    request: Request,
    response: Response,
    db: Database = Depends(get_db),
):
    """
    Register a new user account.

    `role` selects the shape of `details`:
    Student (course_name, college), Recruiter (company_name, industry,
    designation) or TnP (college, designation).
    """
    user, token = UserService(db).register(payload, request_meta(request))
    set_token_cookie(response, token)
    return api_success({"user": user, "token": token}, "User registered successfully")


@router.post("/login")
@login_limit
async def login(payload: LoginRequest, request: Request, response: Response, db: Database = Depends(get_db)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user, token = UserService(db).login(payload.email, payload.password, request_meta(request))
    set_token_cookie(response, token)
    return api_success({"user": user, "token": token}, "Login successful")


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    UserService(db).logout(user["user_id"], request_meta(request))
    response.delete_cookie(TOKEN_COOKIE)
    return api_success(message="Logout successful")


@router.get("/verify-token")
async def verify_token(user: dict = Depends(get_current_user)):
    """Check a token is still valid and return who it belongs to."""
    return api_success(user, "Token is valid")


@router.put("/change-password")
async def change_password(
    payload: ChangePasswordRequest,
    request: Request,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    UserService(db).change_password(
        user["user_id"], payload.current_password, payload.new_password, request_meta(request)
    )
    return api_success(message="Password changed successfully")
