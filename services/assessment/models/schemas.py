"""
Assessment API Schemas
======================

Pydantic models for request bodies and responses of the assessment service.

Version: 0.1.0
"""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from services.assessment.models.enums import ControlStatus, PracticeStatus


class _ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Catalogue
# =============================================================================


class Framework(_ORMModel):
    """Compliance framework."""

    id: uuid.UUID
    name: str
    description: str = ""
    version: str = ""


class Control(_ORMModel):
    """Control within a framework."""

    id: uuid.UUID
    framework_id: uuid.UUID
    control_code: str
    description: str = ""
    family: str = ""


class MaturityDomain(_ORMModel):
    """Maturity model domain."""

    id: uuid.UUID
    name: str
    code: str


class MaturityPractice(_ORMModel):
    """Practice tagged with the minimum tier it belongs to."""

    id: uuid.UUID
    domain_id: uuid.UUID
    code: str
    description: str = ""
    target_tier: int = Field(..., ge=1)


# =============================================================================
# Control Assessments
# =============================================================================


class ControlAssessment(_ORMModel):
    """Persisted control assessment."""

    id: uuid.UUID
    organization_id: uuid.UUID
    control_id: uuid.UUID
    status: ControlStatus
    score: int | None = None
    assessment_date: date
    evidence_ref: str | None = None
    comments: str | None = None
    created_at: datetime
    updated_at: datetime


class ControlWithAssessment(BaseModel):
    """Catalogue control joined with the caller's assessment, if any."""

    control: Control
    assessment: ControlAssessment | None = None


class AssessmentSubmission(BaseModel):
    """JSON part of a control assessment submission."""

    control_id: uuid.UUID
    status: ControlStatus
    score: int | None = Field(default=None, ge=0, le=100)
    assessment_date: date | None = None
    evidence_url: str | None = Field(default=None, max_length=1024)
    comments: str | None = None
    organization_id: uuid.UUID | None = Field(
        default=None,
        description="Target organization; defaults to the caller's",
    )
    practice_evaluations: dict[uuid.UUID, PracticeStatus] | None = Field(
        default=None,
        description="Practice ID -> status applied to the organization's maturity assessment",
    )


class SubmissionResponse(BaseModel):
    """Result of a control assessment submission."""

    assessment: ControlAssessment
    achieved_tier: int | None = None


class EvidenceURLResponse(BaseModel):
    """Time-boxed evidence access URL."""

    url: str
    expires_in_minutes: int
    external: bool = False


# =============================================================================
# Maturity
# =============================================================================


class PracticeEvaluationIn(BaseModel):
    """Body of a practice evaluation request."""

    status: PracticeStatus


class PracticeEvaluation(_ORMModel):
    """Persisted practice evaluation."""

    id: uuid.UUID
    assessment_id: uuid.UUID
    practice_id: uuid.UUID
    status: PracticeStatus
    updated_at: datetime


class PracticeResultResponse(BaseModel):
    """Practice evaluation plus the recomputed tier."""

    evaluation: PracticeEvaluation
    achieved_tier: int


class MaturityAssessment(_ORMModel):
    """Maturity assessment aggregate."""

    id: uuid.UUID
    organization_id: uuid.UUID
    achieved_tier: int
    assessment_date: date | None = None
    comments: str | None = None
    created_at: datetime
    updated_at: datetime


class MaturityAssessmentDetail(MaturityAssessment):
    """Maturity assessment with its practice evaluations."""

    evaluations: list[PracticeEvaluation] = Field(default_factory=list)


class DomainMaturity(BaseModel):
    """Per-domain maturity breakdown."""

    domain_id: uuid.UUID
    domain_code: str
    domain_name: str
    achieved_tier: int
    total_practices: int
    evaluated_practices: int
    status_counts: dict[PracticeStatus, int] = Field(default_factory=dict)


class MaturitySummary(BaseModel):
    """Overall tier plus the per-domain breakdown."""

    assessment_id: uuid.UUID
    organization_id: uuid.UUID
    achieved_tier: int
    max_tier: int
    domains: list[DomainMaturity] = Field(default_factory=list)


# =============================================================================
# Compliance Score
# =============================================================================


class ComplianceScore(BaseModel):
    """Compliance posture of an organization against one framework."""

    organization_id: uuid.UUID
    framework_id: uuid.UUID
    framework_name: str
    total_controls: int
    assessed_controls: int
    score: float = Field(..., ge=0, le=100, description="Average score of assessed controls")
    coverage: float = Field(..., ge=0, le=100, description="Assessed controls as a percentage")
    status_counts: dict[ControlStatus, int] = Field(default_factory=dict)
