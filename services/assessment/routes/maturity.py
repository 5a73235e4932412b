"""
Maturity Routes
===============

API endpoints for the maturity model catalogue and maturity assessments.

Version: 0.1.0
"""

import uuid

from fastapi import APIRouter, Query

from services.assessment.dependencies import Coordinator
from services.assessment.models.schemas import (
    MaturityAssessment,
    MaturityAssessmentDetail,
    MaturityDomain,
    MaturityPractice,
    MaturitySummary,
)
from shared.auth import CurrentUser


router = APIRouter()


@router.get("/domains", response_model=list[MaturityDomain])
async def list_domains(user: CurrentUser, coordinator: Coordinator) -> list[MaturityDomain]:
    """List maturity model domains."""
    domains = await coordinator.catalogue.list_domains()
    return [MaturityDomain.model_validate(d) for d in domains]


@router.get("/domains/{domain_id}/practices", response_model=list[MaturityPractice])
async def list_domain_practices(
    domain_id: uuid.UUID,
    user: CurrentUser,
    coordinator: Coordinator,
) -> list[MaturityPractice]:
    """List the practices of one domain."""
    practices = await coordinator.catalogue.list_practices(domain_id)
    return [MaturityPractice.model_validate(p) for p in practices]


@router.get("/practices", response_model=list[MaturityPractice])
async def list_practices(
    user: CurrentUser,
    coordinator: Coordinator,
    domain_id: uuid.UUID | None = Query(default=None, description="Filter by domain"),
) -> list[MaturityPractice]:
    """List all maturity practices."""
    practices = await coordinator.catalogue.list_practices(domain_id)
    return [MaturityPractice.model_validate(p) for p in practices]


@router.post("/assessments", response_model=MaturityAssessment)
async def start_maturity_assessment(user: CurrentUser, coordinator: Coordinator) -> MaturityAssessment:
    """Get or create the caller's maturity assessment."""
    return await coordinator.start_maturity_assessment(user)


@router.get("/assessments/{assessment_id}", response_model=MaturityAssessmentDetail)
async def get_maturity_assessment(
    assessment_id: uuid.UUID,
    user: CurrentUser,
    coordinator: Coordinator,
) -> MaturityAssessmentDetail:
    """Get a maturity assessment with its practice evaluations."""
    return await coordinator.get_maturity_assessment(user, assessment_id)


@router.get("/assessments/{assessment_id}/summary", response_model=MaturitySummary)
async def get_maturity_summary(
    assessment_id: uuid.UUID,
    user: CurrentUser,
    coordinator: Coordinator,
) -> MaturitySummary:
    """Per-domain maturity breakdown."""
    return await coordinator.get_maturity_summary(user, assessment_id)
