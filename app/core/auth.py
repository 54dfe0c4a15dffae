"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependencies for protected routes (Bearer header or `token` cookie)
"""

from datetime import datetime, timedelta
from typing import Optional
from bson import ObjectId
from bson.errors import InvalidId
from jose import JWTError, ExpiredSignatureError, jwt
from passlib.context import CryptContext
from fastapi import Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pymongo.database import Database

from app.core.config import get_settings
from app.core.errors import ForbiddenError, UnauthorizedError
from app.db.mongodb import get_db, COLLECTIONS
from app.services.authorization import ensure_role

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)

# Bearer token extractor (cookie is the fallback, so no auto 403)
bearer_scheme = HTTPBearer(auto_error=False)

TOKEN_COOKIE = "token"


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and verify JWT token. Raises UnauthorizedError."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")


def token_for_user(user: dict) -> str:
    """Issue a token for a stored user document."""
    return create_access_token(data={
        "sub": str(user["_id"]),
        "email": user["email"],
        "role": user["role"],
    })


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return request.cookies.get(TOKEN_COOKIE)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Database = Depends(get_db),
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    token = _extract_token(request, credentials)
    if not token:
        raise UnauthorizedError("Not authorized to access this route")

    payload = decode_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid or expired token")

    # Verify user still exists and is active
    try:
        oid = ObjectId(user_id)
    except (InvalidId, TypeError):
        raise UnauthorizedError("Invalid or expired token")

    user = db[COLLECTIONS["users"]].find_one({"_id": oid}, {"email": 1, "role": 1, "is_active": 1})
    if not user:
        raise UnauthorizedError("Invalid or expired token")

    if not user.get("is_active", True):
        raise ForbiddenError("Account has been deactivated")

    return {"user_id": str(user["_id"]), "email": user["email"], "role": user["role"]}


def request_meta(request: Request) -> dict:
    """Client details recorded on activity logs."""
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


def set_token_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        TOKEN_COOKIE, token,
        max_age=settings.jwt_expire_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict" if settings.cookie_secure else "lax",
    )


def require_roles(*roles: str):
    """Dependency factory - allow only the listed roles."""
    async def dependency(user: dict = Depends(get_current_user)) -> dict:
        ensure_role(user, *roles)
        return user
    return dependency


get_current_student = require_roles("Student")
get_current_recruiter = require_roles("Recruiter")
get_current_tnp = require_roles("TnP")
