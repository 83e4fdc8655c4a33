"""
Invitation lookup API endpoint
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.api.deps import get_admission_service
from app.services.admission import AdmissionService

router = APIRouter()


class InvitationLookupRequest(BaseModel):
    """Token lookup request model"""
    token: str = Field(..., max_length=256)


class InvitationLookupResponse(BaseModel):
    """Token lookup response model"""
    valid: bool
    email: Optional[str] = None


@router.post("/invitations/lookup", response_model=InvitationLookupResponse)
async def lookup_invitation_endpoint(
    lookup_data: InvitationLookupRequest,
    service: AdmissionService = Depends(get_admission_service)
):
    """
    Check whether an invitation token can still be redeemed.

    Unknown, expired and used tokens all answer {"valid": false}.
    """
    lookup = await service.lookup_invitation(lookup_data.token)
    return InvitationLookupResponse(valid=lookup.valid, email=lookup.email)
