"""
Compliance Score
================

Summarizes an organization's control assessments against one framework.

Scoring Model:
- score: mean stored score of assessed controls, excluding not_applicable
- coverage: assessed controls / total controls
- Unassessed controls do not lower the score, only the coverage

Version: 0.1.0
"""

import uuid
from collections import Counter
from collections.abc import Sequence

from services.assessment.models.enums import ControlStatus
from services.assessment.models.schemas import ComplianceScore
from services.assessment.models.tables import ControlAssessmentModel
from services.assessment.services.catalogue import ControlCatalogue
from services.assessment.services.ledger import AssessmentLedger
from shared.logging import get_logger


logger = get_logger(__name__)


def calculate_compliance_score(
    organization_id: uuid.UUID,
    framework_id: uuid.UUID,
    framework_name: str,
    total_controls: int,
    assessments: Sequence[ControlAssessmentModel],
) -> ComplianceScore:
    """Pure score computation over a framework's assessments."""
    counts = Counter(assessment.status for assessment in assessments)

    scored = [a for a in assessments if a.status != ControlStatus.NOT_APPLICABLE]
    score_sum = sum(a.score or 0 for a in scored)
    score = score_sum / len(scored) if scored else 0.0

    coverage = len(assessments) / total_controls * 100 if total_controls else 0.0

    return ComplianceScore(
        organization_id=organization_id,
        framework_id=framework_id,
        framework_name=framework_name,
        total_controls=total_controls,
        assessed_controls=len(assessments),
        score=round(score, 2),
        coverage=round(coverage, 2),
        status_counts={status: counts.get(status, 0) for status in ControlStatus},
    )


async def compliance_score(
    catalogue: ControlCatalogue,
    ledger: AssessmentLedger,
    organization_id: uuid.UUID,
    framework_id: uuid.UUID,
) -> ComplianceScore:
    """Load the framework and the organization's assessments, then score them."""
    framework = await catalogue.get_framework(framework_id)
    controls = await catalogue.list_controls(framework_id)
    assessments, _ = await ledger.list_control_assessments(organization_id, framework_id)

    result = calculate_compliance_score(
        organization_id,
        framework_id,
        framework.name,
        len(controls),
        assessments,
    )

    logger.info(
        "compliance_score_calculated",
        organization_id=str(organization_id),
        framework_id=str(framework_id),
        score=result.score,
        coverage=result.coverage,
    )
    return result
