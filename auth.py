"""
Authentication routes and dependencies
"""

from types import SimpleNamespace
from typing import Optional
from fastapi import APIRouter, HTTPException, Header, Depends, Cookie
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from database import get_db
from database_models import ROLE_ADMIN
from crud.user import UserRepository
from auth_utils import hash_password, verify_password, create_jwt, decode_jwt, TOKEN_TTL
from models.gym import UserOut, dump
from utils.shared_utils import get_cached
from utils.security_utils import validate_email, validate_password_strength

logger = logging.getLogger(__name__)

# Create auth router
auth_router = APIRouter(prefix="/api/auth", tags=["auth"])

AUTH_COOKIE = "auth_token"
TOKEN_MAX_AGE = int(TOKEN_TTL.total_seconds())


# Request models
class SignupRequest(BaseModel):
    email: str
    password: str
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")

    model_config = {"populate_by_name": True}


class LoginRequest(BaseModel):
    email: str
    password: str


def _token_response(user_id: str) -> JSONResponse:
    """Build the signup/login response carrying the httpOnly auth cookie."""
    token = create_jwt(user_id)
    response = JSONResponse(
        content={
            "ok": True,
            "user_id": user_id
        }
    )
    response.set_cookie(
        key=AUTH_COOKIE,
        value=token,
        httponly=True,
        secure=True,
        samesite="Lax",
        max_age=TOKEN_MAX_AGE
    )
    return response


@auth_router.post("/signup")
async def signup(request: SignupRequest, db: AsyncSession = Depends(get_db)):
    """Create a new member account"""
    try:
        # Validate email format
        if not validate_email(request.email):
            raise HTTPException(status_code=400, detail="Invalid email format")

        # Validate password strength
        try:
            validate_password_strength(request.password)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        user_repo = UserRepository(db)

        # Check if email already exists
        existing_user = await user_repo.get_user_by_email(request.email.lower())
        if existing_user:
            raise HTTPException(status_code=400, detail="Email already registered")

        user = await user_repo.create_user({
            "email": request.email.lower(),
            "hashed_password": hash_password(request.password),
            "first_name": request.first_name,
            "last_name": request.last_name,
            "is_active": True,
        })
        logger.info(f"User {user.id} signed up")

        return _token_response(user.id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Signup failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Signup failed")


@auth_router.post("/login")
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Login and get JWT token"""
    try:
        user_repo = UserRepository(db)

        user = await user_repo.get_user_by_email(request.email.lower())
        if not user:
            raise HTTPException(status_code=401, detail="Invalid email or password")

        if not verify_password(request.password, user.hashed_password):
            raise HTTPException(status_code=401, detail="Invalid email or password")

        if not user.is_active:
            raise HTTPException(status_code=401, detail="User account is inactive")

        return _token_response(user.id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Login failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Login failed")


@auth_router.post("/logout")
async def logout():
    """Logout and clear auth token cookie"""
    response = JSONResponse(
        content={
            "ok": True,
            "message": "Logged out successfully"
        }
    )
    # Clear the auth_token cookie by setting max_age=0
    response.set_cookie(
        key=AUTH_COOKIE,
        value="",
        httponly=True,
        secure=True,
        samesite="Lax",
        max_age=0
    )
    return response


async def _get_user_data_with_caching(user_id: str, user_repo: UserRepository) -> dict:
    """
    Fetch the fields needed for authorization, cached for 5 minutes when
    Redis is available.

    Raises:
        HTTPException: If user is not found
    """
    async def fetch_user():
        user = await user_repo.get_user_by_id(user_id)
        if not user:
            raise HTTPException(status_code=401, detail="User not found")
        return {
            "id": user.id,
            "email": user.email,
            "role": user.role,
            "is_active": user.is_active,
            "membership_type": user.membership_type,
        }

    return await get_cached(
        key=f"user:{user_id}",
        fallback_func=fetch_user,
        ttl_seconds=300
    )


def _extract_token(auth_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
    # Cookie first (browser clients), then Bearer header (API consumers)
    if auth_token:
        return auth_token
    if authorization and authorization.startswith("Bearer "):
        return authorization.replace("Bearer ", "").strip()
    return None


# Dependency for protected routes
async def get_current_user(
    auth_token: Optional[str] = Cookie(None),
    authorization: Optional[str] = Header(None, alias="Authorization"),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    Dependency function to get current authenticated user.

    Authentication priority:
    1. Check auth_token cookie first (httpOnly cookie set by login/signup)
    2. Fallback to Authorization header (Bearer token) for API consumers
    3. Raise 401 if neither is found
    """
    token = _extract_token(auth_token, authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Missing authentication token")

    payload = decode_jwt(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user_repo = UserRepository(db)
    user = SimpleNamespace(**await _get_user_data_with_caching(str(user_id), user_repo))

    if not user.is_active:
        raise HTTPException(status_code=401, detail="User account is inactive")

    return {
        "user_id": user.id,
        "email": user.email,
        "role": user.role,
        "is_active": user.is_active,
        "membership_type": user.membership_type,
    }


async def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    """Dependency for admin-only routes"""
    if current_user.get("role") != ROLE_ADMIN:
        raise HTTPException(status_code=403, detail="Access denied")
    return current_user


@auth_router.get("/user")
@auth_router.get("/me")
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the full profile of the authenticated user"""
    user = await UserRepository(db).get_user_by_id(current_user["user_id"])
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"ok": True, "user": dump(UserOut, user)}
