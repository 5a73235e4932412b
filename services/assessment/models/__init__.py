"""Assessment Service Models."""

from services.assessment.models.enums import (
    DEFAULT_CONTROL_SCORES,
    ControlStatus,
    PracticeStatus,
)
from services.assessment.models.tables import (
    ControlAssessmentModel,
    ControlModel,
    FrameworkModel,
    MaturityAssessmentModel,
    MaturityDomainModel,
    MaturityPracticeModel,
    PracticeEvaluationModel,
)


__all__ = [
    "ControlStatus",
    "PracticeStatus",
    "DEFAULT_CONTROL_SCORES",
    "FrameworkModel",
    "ControlModel",
    "ControlAssessmentModel",
    "MaturityDomainModel",
    "MaturityPracticeModel",
    "MaturityAssessmentModel",
    "PracticeEvaluationModel",
]
