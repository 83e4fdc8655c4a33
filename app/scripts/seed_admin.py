#!/usr/bin/env python3
"""
Seed an administrator account.
Usage:
  ADMIN_EMAIL=admin@example.com ADMIN_PASSWORD=ChangeMeNow! python -m app.scripts.seed_admin
"""
import asyncio
import os

from app.core.auth import get_password_hash
from app.db.session import AsyncSessionLocal
from app.models.enums import UserRole
from app.repos.user_repo import create_user, get_user_by_email

ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "ChangeMeNow!")


async def seed_admin(session_factory=AsyncSessionLocal, email: str = ADMIN_EMAIL, password: str = ADMIN_PASSWORD) -> bool:
    """Create the admin user unless one with this email exists. Returns True if created."""
    email = email.strip().lower()
    async with session_factory() as session:
        async with session.begin():
            if await get_user_by_email(session, email):
                print("Admin exists:", email)
                return False
            await create_user(session, email=email, password_hash=get_password_hash(password), role=UserRole.ADMIN)
    print("Created admin:", email)
    return True


if __name__ == "__main__":
    asyncio.run(seed_admin())
