"""
Assessments Routes
==================

API endpoints for control assessments, their evidence, and practice
evaluations.

Version: 0.1.0
"""

import json
import uuid

from fastapi import APIRouter, File, Form, Query, UploadFile
from pydantic import ValidationError as PydanticValidationError

from services.assessment.dependencies import Coordinator
from services.assessment.models.schemas import (
    AssessmentSubmission,
    ControlAssessment,
    EvidenceURLResponse,
    PracticeEvaluationIn,
    PracticeResultResponse,
    SubmissionResponse,
)
from services.assessment.services.evidence import EvidenceFile
from shared.auth import CurrentUser
from shared.config import settings
from shared.exceptions import ValidationError
from shared.logging import get_logger
from shared.storage import MAX_SIGNED_URL_TTL_MINUTES


logger = get_logger(__name__)

router = APIRouter()


def _parse_submission(data: str) -> AssessmentSubmission:
    try:
        return AssessmentSubmission.model_validate_json(data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid assessment data",
            details={"errors": json.loads(e.json(include_url=False, include_input=False))},
        ) from None


@router.post("", response_model=SubmissionResponse)
async def submit_assessment(
    user: CurrentUser,
    coordinator: Coordinator,
    data: str = Form(..., description="Assessment JSON"),
    evidence_file: UploadFile | None = File(default=None, description="Optional evidence file"),
) -> SubmissionResponse:
    """
    Create or update a control assessment.

    Multipart form with a `data` JSON field and an optional `evidence_file`.
    """
    submission = _parse_submission(data)

    evidence = None
    if evidence_file is not None and evidence_file.filename:
        # One byte past the limit is enough to reject oversized files
        content = await evidence_file.read(settings.evidence.max_file_size_bytes + 1)
        evidence = EvidenceFile(
            filename=evidence_file.filename,
            content=content,
            declared_content_type=evidence_file.content_type,
        )

    result = await coordinator.submit_control_assessment(user, submission, evidence)

    return SubmissionResponse(
        assessment=result.control_assessment,
        achieved_tier=result.achieved_tier,
    )


@router.get("/controls/{control_id}", response_model=ControlAssessment)
async def get_control_assessment(
    control_id: uuid.UUID,
    user: CurrentUser,
    coordinator: Coordinator,
) -> ControlAssessment:
    """Get the caller's assessment of a control."""
    assessment = await coordinator.ledger.get_control_assessment(user.organization_id, control_id)
    return ControlAssessment.model_validate(assessment)


@router.get("/{assessment_id}/evidence-url", response_model=EvidenceURLResponse)
async def get_evidence_url(
    assessment_id: uuid.UUID,
    user: CurrentUser,
    coordinator: Coordinator,
    ttl_minutes: int | None = Query(default=None, ge=1, le=MAX_SIGNED_URL_TTL_MINUTES),
) -> EvidenceURLResponse:
    """Get a time-limited URL for an assessment's evidence."""
    return await coordinator.evidence_url(user, assessment_id, ttl_minutes)


@router.delete("/{assessment_id}/evidence", response_model=ControlAssessment)
async def delete_evidence(
    assessment_id: uuid.UUID,
    user: CurrentUser,
    coordinator: Coordinator,
) -> ControlAssessment:
    """Remove the evidence attached to an assessment."""
    return await coordinator.delete_evidence(user, assessment_id)


@router.post(
    "/{assessment_id}/practices/{practice_id}",
    response_model=PracticeResultResponse,
)
async def evaluate_practice(
    assessment_id: uuid.UUID,
    practice_id: uuid.UUID,
    body: PracticeEvaluationIn,
    user: CurrentUser,
    coordinator: Coordinator,
) -> PracticeResultResponse:
    """Set a practice's status within a maturity assessment and rescore it."""
    result = await coordinator.evaluate_practice(user, assessment_id, practice_id, body.status)
    return PracticeResultResponse(
        evaluation=result.evaluation,
        achieved_tier=result.achieved_tier,
    )
