"""
Frameworks Routes
=================

API endpoints for browsing frameworks and their controls.

Version: 0.1.0
"""

import uuid

from fastapi import APIRouter, Query

from services.assessment.dependencies import Coordinator
from services.assessment.models.enums import ControlStatus
from services.assessment.models.schemas import (
    Control,
    ControlAssessment,
    ControlWithAssessment,
    Framework,
)
from shared.auth import CurrentUser
from shared.models.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PaginatedResponse


router = APIRouter()


@router.get("", response_model=list[Framework])
async def list_frameworks(
    user: CurrentUser,
    coordinator: Coordinator,
) -> list[Framework]:
    """List available compliance frameworks."""
    frameworks = await coordinator.catalogue.list_frameworks()
    return [Framework.model_validate(f) for f in frameworks]


@router.get("/{framework_id}/controls", response_model=PaginatedResponse[ControlWithAssessment])
async def list_framework_controls(
    framework_id: uuid.UUID,
    user: CurrentUser,
    coordinator: Coordinator,
    status: ControlStatus | None = Query(default=None, description="Filter by assessment status"),
    family: str | None = Query(default=None, description="Filter by control family"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> PaginatedResponse[ControlWithAssessment]:
    """
    List a framework's controls joined with the caller's assessment of each.
    """
    rows, total = await coordinator.ledger.list_controls_with_assessments(
        organization_id=user.organization_id,
        framework_id=framework_id,
        status=status,
        family=family,
        page=page,
        page_size=page_size,
    )

    items = [
        ControlWithAssessment(
            control=Control.model_validate(control),
            assessment=ControlAssessment.model_validate(assessment) if assessment else None,
        )
        for control, assessment in rows
    ]
    return PaginatedResponse.build(items, total, page, page_size)


@router.get("/{framework_id}/families", response_model=list[str])
async def list_control_families(
    framework_id: uuid.UUID,
    user: CurrentUser,
    coordinator: Coordinator,
) -> list[str]:
    """List the distinct control families of a framework."""
    return await coordinator.catalogue.list_control_families(framework_id)
