"""
Assessment Enumerations
=======================

Closed status sets for control assessments and practice evaluations.

Version: 0.1.0
"""

from enum import Enum


class ControlStatus(str, Enum):
    """Compliance status of a single control for an organization."""

    COMPLIANT = "compliant"
    PARTIALLY_COMPLIANT = "partially_compliant"
    NON_COMPLIANT = "non_compliant"
    NOT_APPLICABLE = "not_applicable"


class PracticeStatus(str, Enum):
    """Implementation status of a maturity practice."""

    NOT_IMPLEMENTED = "not_implemented"
    PARTIALLY_IMPLEMENTED = "partially_implemented"
    FULLY_IMPLEMENTED = "fully_implemented"


# Score stored when a submission carries a status but no score
DEFAULT_CONTROL_SCORES: dict[ControlStatus, int] = {
    ControlStatus.COMPLIANT: 100,
    ControlStatus.PARTIALLY_COMPLIANT: 50,
    ControlStatus.NON_COMPLIANT: 0,
    ControlStatus.NOT_APPLICABLE: 0,
}
