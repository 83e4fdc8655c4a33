"""
User repository with async CRUD operations
"""

from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.models.user import User
from app.models.enums import UserRole


async def create_user(
    session: AsyncSession,
    email: str,
    password_hash: str,
    role: UserRole = UserRole.MEMBER
) -> User:
    """
    Create a new user.

    Args:
        session: Database session
        email: Email (must be unique)
        password_hash: Already-hashed password
        role: User role (default: MEMBER)

    Returns:
        Created User instance
    """
    user = User(
        email=email,
        password_hash=password_hash,
        role=role
    )
    session.add(user)
    await session.flush()
    return user


async def get_user_by_id(session: AsyncSession, user_id: UUID) -> Optional[User]:
    """
    Get user by ID.

    Args:
        session: Database session
        user_id: User UUID

    Returns:
        User instance or None if not found
    """
    result = await session.execute(
        select(User).where(User.id == user_id)
    )
    return result.scalar_one_or_none()


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    """
    Get user by email.

    Args:
        session: Database session
        email: Normalised email

    Returns:
        User instance or None if not found
    """
    result = await session.execute(
        select(User).where(User.email == email)
    )
    return result.scalar_one_or_none()
