import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.database import get_db
from school_admin.schemas.auth import LoginRequest, LoginResponse, VerifyResponse, PasswordChange, MessageResponse
from school_admin.config import settings
from school_admin.services.access import UserAccess
from school_admin.services import records
from school_admin.services.auth import (
    create_access_token, authenticate_teacher, build_access_claims, verify_password, get_password_hash
)
from school_admin.middleware.authentication import get_current_access

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/auth/login", response_model=LoginResponse)
async def login_for_access_token(
    form_data: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Authenticate a teacher and return a signed access token with their profile.
    """
    teacher = await authenticate_teacher(form_data.email, form_data.password, db)
    if not teacher:
        logger.info(f"Failed login attempt for {form_data.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    claims = build_access_claims(teacher)
    access_token = create_access_token(
        data=claims,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    profile = {
        "id": teacher.id,
        "email": teacher.email,
        "name": f"{teacher.first_name} {teacher.last_name}",
        "first_name": teacher.first_name,
        "last_name": teacher.last_name,
        "role": claims["role"],
        "gender": teacher.gender,
        "classes": claims["classes"],
        "subjects": claims["subjects"],
        "form_class": teacher.form_class,
        "requires_password_change": bool(teacher.requires_password_change),
    }

    return {
        "status": "success",
        "data": profile,
        "token": access_token,
        "requires_password_change": profile["requires_password_change"],
    }

@router.get("/auth/verify", response_model=VerifyResponse)
async def verify_token(
    current_user: UserAccess = Depends(get_current_access)
):
    """
    Confirm the caller's token and echo back the access it grants.
    """
    return {
        "status": "success",
        "data": {
            "user_id": current_user.user_id,
            "email": current_user.email,
            "role": current_user.role.value,
            "classes": sorted(current_user.assigned_classes),
            "subjects": sorted(current_user.assigned_subjects),
        },
    }

@router.post("/auth/change-password", response_model=MessageResponse)
async def change_password(
    password_data: PasswordChange,
    db: AsyncSession = Depends(get_db),
    current_user: UserAccess = Depends(get_current_access)
):
    """
    Change the caller's password and clear any forced-change flag.

    The current password is required unless the account was flagged to
    change its password at next login.
    """
    teacher = await records.find_teacher(db, current_user.user_id) if current_user.user_id is not None else None
    if not teacher:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Teacher not found"
        )

    if not teacher.requires_password_change and not verify_password(
        password_data.current_password or "", teacher.hashed_password
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect"
        )

    if verify_password(password_data.new_password, teacher.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="New password must be different from current password"
        )

    await records.update_password(db, teacher, get_password_hash(password_data.new_password))

    logger.info(f"Password changed for teacher {teacher.id} [request_id: {current_user.request_id}]")

    return {"status": "success", "message": "Password changed successfully"}
