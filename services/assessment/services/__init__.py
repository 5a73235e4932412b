"""Assessment Service Business Logic."""

from services.assessment.services.catalogue import ControlCatalogue
from services.assessment.services.coordinator import (
    AssessmentCoordinator,
    PracticeResult,
    SubmissionResult,
)
from services.assessment.services.ledger import AssessmentLedger
from services.assessment.services.maturity import (
    MaturityScoringEngine,
    calculate_achieved_tier,
    summarize_by_domain,
)
from services.assessment.services.score import calculate_compliance_score, compliance_score


__all__ = [
    "ControlCatalogue",
    "AssessmentLedger",
    "MaturityScoringEngine",
    "calculate_achieved_tier",
    "summarize_by_domain",
    "calculate_compliance_score",
    "compliance_score",
    "AssessmentCoordinator",
    "SubmissionResult",
    "PracticeResult",
]
