"""
Authentication API endpoints
"""

import asyncio
import logging

from fastapi import APIRouter, HTTPException, status, Depends
from pydantic import BaseModel, EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import verify_password, create_access_token
from app.core.config import settings
from app.db.session import get_db
from app.repos.member_repo import get_member_by_user_id
from app.repos.user_repo import get_user_by_email

logger = logging.getLogger(__name__)

router = APIRouter()


class UserLogin(BaseModel):
    """User login request model"""
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Token response model"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    role: str


@router.post("/auth/login", response_model=TokenResponse)
async def login_user(
    login_data: UserLogin,
    session: AsyncSession = Depends(get_db)
):
    """
    Login with email/password.

    Deactivated members cannot log in; administrators always can.
    """
    user = await get_user_by_email(session, login_data.email.lower())
    if not user or not await asyncio.to_thread(verify_password, login_data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    if not user.is_admin:
        member = await get_member_by_user_id(session, user.id)
        if member is None or not member.active:
            logger.info(f"Login refused for inactive user {user.id}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is not active"
            )

    access_token = create_access_token(data={"sub": str(user.id), "role": user.role.value})
    return TokenResponse(
        access_token=access_token,
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        role=user.role.value,
    )
