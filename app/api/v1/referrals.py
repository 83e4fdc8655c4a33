"""
Referral API endpoints
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from app.api.deps import get_referral_service
from app.core.auth import require_member
from app.models.enums import ReferralStatus
from app.models.member import Member
from app.models.referral import Referral
from app.services.referrals import ReferralService

router = APIRouter()


class ReferralCreate(BaseModel):
    """Referral creation request model"""
    to_member_id: UUID
    contact_name: str = Field(..., max_length=255)
    contact_company: Optional[str] = Field(None, max_length=255)
    description: str = Field(..., max_length=4000)


class ReferralStatusUpdate(BaseModel):
    """Referral status change request model"""
    status: ReferralStatus


class ReferralResponse(BaseModel):
    """Referral response model"""
    id: str
    from_member_id: str
    to_member_id: str
    contact_name: str
    contact_company: Optional[str]
    description: str
    status: str
    created_at: Optional[str]
    updated_at: Optional[str]


class MemberReferralsResponse(BaseModel):
    """Referrals made and received by a member"""
    made: List[ReferralResponse]
    received: List[ReferralResponse]


def _to_response(referral: Referral) -> ReferralResponse:
    return ReferralResponse(**referral.to_dict())


@router.post("/referrals", response_model=ReferralResponse, status_code=status.HTTP_201_CREATED)
async def create_referral_endpoint(
    referral_data: ReferralCreate,
    current_member: Member = Depends(require_member),
    service: ReferralService = Depends(get_referral_service)
):
    """Send a business lead to another active member."""
    referral = await service.create(
        from_member_id=current_member.id,
        to_member_id=referral_data.to_member_id,
        contact_name=referral_data.contact_name,
        contact_company=referral_data.contact_company,
        description=referral_data.description,
    )
    return _to_response(referral)


@router.get("/referrals/mine", response_model=MemberReferralsResponse)
async def list_my_referrals_endpoint(
    current_member: Member = Depends(require_member),
    service: ReferralService = Depends(get_referral_service)
):
    """List referrals the authenticated member sent and received."""
    referrals = await service.list_for_member(current_member.id)
    return MemberReferralsResponse(
        made=[_to_response(r) for r in referrals.made],
        received=[_to_response(r) for r in referrals.received],
    )


@router.patch("/referrals/{referral_id}/status", response_model=ReferralResponse)
async def update_referral_status_endpoint(
    referral_id: UUID,
    status_data: ReferralStatusUpdate,
    current_member: Member = Depends(require_member),
    service: ReferralService = Depends(get_referral_service)
):
    """
    Move a received referral along its lifecycle.

    sent -> negotiating | rejected; negotiating -> closed | rejected.
    """
    referral = await service.update_status(referral_id, current_member.id, status_data.status)
    return _to_response(referral)
