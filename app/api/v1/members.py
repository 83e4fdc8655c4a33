"""
Member registration and profile API endpoints
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from app.api.deps import get_admission_service, get_member_directory
from app.core.auth import require_admin, require_member
from app.models.member import Member
from app.models.user import User
from app.services.admission import AdmissionService
from app.services.members import MemberDirectory, MemberProfile

router = APIRouter()


class MemberRegister(BaseModel):
    """Invitation redemption request model"""
    token: str = Field(..., max_length=256)
    full_name: str = Field(..., max_length=255)
    phone: str = Field(..., max_length=32)
    password: str = Field(..., max_length=128)


class MemberResponse(BaseModel):
    """Member profile response model"""
    id: str
    email: str
    full_name: str
    active: bool


class MemberActiveUpdate(BaseModel):
    """Admin activation request model"""
    active: bool


def _to_response(profile: MemberProfile) -> MemberResponse:
    return MemberResponse(
        id=str(profile.id),
        email=profile.email,
        full_name=profile.full_name,
        active=profile.active,
    )


@router.post("/members/register", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def register_member_endpoint(
    register_data: MemberRegister,
    service: AdmissionService = Depends(get_admission_service)
):
    """
    Redeem an invitation token and create the member account.

    The account email is the one from the approved application.
    """
    profile = await service.register(
        token=register_data.token,
        full_name=register_data.full_name,
        phone=register_data.phone,
        password=register_data.password,
    )
    return _to_response(profile)


@router.get("/members/me", response_model=MemberResponse)
async def get_my_profile_endpoint(
    current_member: Member = Depends(require_member),
    directory: MemberDirectory = Depends(get_member_directory)
):
    """Get the authenticated member's profile."""
    return _to_response(await directory.get_profile(current_member.id))


@router.patch("/admin/members/{member_id}", response_model=MemberResponse)
async def set_member_active_endpoint(
    member_id: UUID,
    update_data: MemberActiveUpdate,
    current_admin: User = Depends(require_admin),
    directory: MemberDirectory = Depends(get_member_directory)
):
    """Activate or deactivate a member."""
    profile = await directory.set_active(member_id, update_data.active, actor_id=current_admin.id)
    return _to_response(profile)
