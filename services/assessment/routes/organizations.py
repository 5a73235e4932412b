"""
Organizations Routes
====================

Per-organization views of a framework: assessments and compliance score.

Version: 0.1.0
"""

import uuid

from fastapi import APIRouter, Query

from services.assessment.dependencies import Coordinator
from services.assessment.models.enums import ControlStatus
from services.assessment.models.schemas import ComplianceScore, ControlAssessment
from services.assessment.services.score import compliance_score
from shared.auth import CurrentUser
from shared.models.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PaginatedResponse


router = APIRouter()


@router.get(
    "/{organization_id}/frameworks/{framework_id}/assessments",
    response_model=PaginatedResponse[ControlAssessment],
)
async def list_organization_assessments(
    organization_id: uuid.UUID,
    framework_id: uuid.UUID,
    user: CurrentUser,
    coordinator: Coordinator,
    status: ControlStatus | None = Query(default=None, description="Filter by status"),
    family: str | None = Query(default=None, description="Filter by control family"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> PaginatedResponse[ControlAssessment]:
    """List an organization's control assessments for a framework, newest first."""
    coordinator.ensure_same_organization(user, organization_id)

    assessments, total = await coordinator.ledger.list_control_assessments(
        organization_id=organization_id,
        framework_id=framework_id,
        status=status,
        family=family,
        page=page,
        page_size=page_size,
    )
    items = [ControlAssessment.model_validate(a) for a in assessments]
    return PaginatedResponse.build(items, total, page, page_size)


@router.get(
    "/{organization_id}/frameworks/{framework_id}/score",
    response_model=ComplianceScore,
)
async def get_compliance_score(
    organization_id: uuid.UUID,
    framework_id: uuid.UUID,
    user: CurrentUser,
    coordinator: Coordinator,
) -> ComplianceScore:
    """Compliance score of an organization against a framework."""
    coordinator.ensure_same_organization(user, organization_id)
    return await compliance_score(
        coordinator.catalogue,
        coordinator.ledger,
        organization_id,
        framework_id,
    )
