"""
Membership application API endpoints
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, EmailStr, Field

from app.api.deps import get_admission_service
from app.core.auth import require_admin
from app.models.enums import ApplicationStatus, ReviewDecision
from app.models.user import User
from app.services.admission import AdmissionService

router = APIRouter()


class ApplicationCreate(BaseModel):
    """Application submission request model"""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    company: Optional[str] = Field(None, max_length=255)
    reason: Optional[str] = Field(None, max_length=2000)


class ApplicationResponse(BaseModel):
    """Application response model"""
    id: str
    name: str
    email: str
    company: Optional[str]
    reason: Optional[str]
    status: str
    reviewer_id: Optional[str]
    reviewed_at: Optional[str]
    created_at: Optional[str]


class DecisionRequest(BaseModel):
    """Admin decision request model"""
    decision: ReviewDecision


@router.post("/applications", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_application_endpoint(
    application_data: ApplicationCreate,
    service: AdmissionService = Depends(get_admission_service)
):
    """
    Submit a membership application.

    The applicant receives an acknowledgement email; the application waits
    for an administrator's decision.
    """
    application = await service.submit_application(
        name=application_data.name,
        email=application_data.email,
        company=application_data.company,
        reason=application_data.reason,
    )
    return ApplicationResponse(**application.to_dict())


@router.get("/admin/applications", response_model=List[ApplicationResponse])
async def list_applications_endpoint(
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_admin: User = Depends(require_admin),
    service: AdmissionService = Depends(get_admission_service)
):
    """List applications newest first, optionally filtered by status."""
    applications = await service.list_applications(status_filter, limit=limit, offset=offset)
    return [ApplicationResponse(**application.to_dict()) for application in applications]


@router.post("/admin/applications/{application_id}/decision", response_model=ApplicationResponse)
async def decide_application_endpoint(
    application_id: UUID,
    decision_data: DecisionRequest,
    current_admin: User = Depends(require_admin),
    service: AdmissionService = Depends(get_admission_service)
):
    """
    Approve or reject a pending application.

    Approval issues a single-use invitation and emails the registration link.
    """
    application = await service.decide_application(application_id, current_admin.id, decision_data.decision)
    return ApplicationResponse(**application.to_dict())
