# crudsuite/api/v1/auth.py
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pymongo.errors import DuplicateKeyError

from crudsuite.core.config import Deployment
from crudsuite.core.errors import ConflictError, ForbiddenError, UnauthorizedError, ValidationError
from crudsuite.core.security import DEFAULT_ROLE, SELF_ASSIGNABLE_ROLES, Role
from crudsuite.models.user import LoginIn, RegisterIn, public_user
from crudsuite.repositories import users as users_repo
from crudsuite.services.auth import (
    TokenExpired,
    TokenInvalid,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

# auto_error=False so a missing header gets our own 401 message
security = HTTPBearer(auto_error=False)


async def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> dict:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access token required")
    try:
        td = decode_access_token(credentials.credentials)
    except TokenExpired:
        raise UnauthorizedError("Token has expired")
    except TokenInvalid:
        raise UnauthorizedError("Invalid token")
    user = await users_repo.get_user(td.sub)
    if not user:
        # principal deleted after the token was issued
        raise UnauthorizedError("Invalid token")
    return public_user(user)


def require_roles(*roles: Role):
    """Dependency that runs the base gate first, then checks the role allow-list."""
    allowed = {r.value for r in roles}

    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        if current_user.get("role") not in allowed:
            raise ForbiddenError(f"Access denied. Required role: {' or '.join(sorted(allowed))}")
        return current_user

    return role_checker


def _profile_defaults(deployment: Deployment, role: str) -> dict:
    if deployment is Deployment.QUIZ:
        return {"quizzes_created": 0, "quizzes_taken": 0}
    if deployment is Deployment.JOBS and role == Role.STUDENT.value:
        return {"bio": "", "skills": [], "resume": None, "profile_photo": None}
    if deployment is Deployment.JOBS and role == Role.RECRUITER.value:
        return {"company_name": "", "company_description": "", "company_logo": None}
    return {}


@router.post("/register", status_code=201)
async def register(payload: RegisterIn, request: Request):
    deployment: Deployment = request.app.state.deployment
    role = payload.role or (DEFAULT_ROLE[deployment].value if DEFAULT_ROLE[deployment] else None)
    if role is None:
        raise ValidationError("role: Field required")
    if role not in {r.value for r in SELF_ASSIGNABLE_ROLES[deployment]}:
        raise ValidationError("Invalid role")

    if await users_repo.get_user_by_email(payload.email):
        raise ConflictError("Email already registered")
    try:
        user = await users_repo.create_user(
            name=payload.name,
            email=payload.email,
            password_hash=hash_password(payload.password),
            role=role,
            extra=_profile_defaults(deployment, role),
        )
    except DuplicateKeyError:
        # lost a race with a concurrent registration for the same email
        raise ConflictError("Email already registered")

    logger.info("Registered %s user %s", role, user["id"])
    return {
        "message": "User registered successfully",
        "token": create_access_token(user),
        "user": public_user(user),
    }


@router.post("/login")
async def login(payload: LoginIn):
    user = await users_repo.get_user_by_email(payload.email)
    if not user or not verify_password(payload.password, user.get("password_hash", "")):
        raise UnauthorizedError("Invalid email or password")
    user = await users_repo.update_user(user["id"], {"last_login": datetime.utcnow()}) or user
    return {
        "message": "Login successful",
        "token": create_access_token(user),
        "user": public_user(user),
    }


@router.get("/me")
async def me(current_user: dict = Depends(get_current_user)):
    return current_user
