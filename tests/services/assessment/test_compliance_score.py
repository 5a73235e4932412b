"""
Compliance Score Tests
======================

Tests for the per-framework compliance score.

Version: 0.1.0
"""

import uuid
from types import SimpleNamespace

import pytest

from services.assessment.models.enums import ControlStatus
from services.assessment.services.catalogue import ControlCatalogue
from services.assessment.services.ledger import AssessmentLedger
from services.assessment.services.score import calculate_compliance_score, compliance_score


def assessment(status: ControlStatus, score: int | None) -> SimpleNamespace:
    return SimpleNamespace(status=status, score=score)


class TestCalculateComplianceScore:
    """Tests for the pure score computation."""

    def test_average_of_assessed_controls(self) -> None:
        result = calculate_compliance_score(
            uuid.uuid4(),
            uuid.uuid4(),
            "Framework",
            total_controls=4,
            assessments=[
                assessment(ControlStatus.COMPLIANT, 100),
                assessment(ControlStatus.PARTIALLY_COMPLIANT, 50),
            ],
        )

        assert result.score == 75.0
        assert result.coverage == 50.0
        assert result.assessed_controls == 2
        assert result.status_counts[ControlStatus.COMPLIANT] == 1
        assert result.status_counts[ControlStatus.NON_COMPLIANT] == 0

    def test_not_applicable_excluded_from_average(self) -> None:
        result = calculate_compliance_score(
            uuid.uuid4(),
            uuid.uuid4(),
            "Framework",
            total_controls=2,
            assessments=[
                assessment(ControlStatus.COMPLIANT, 80),
                assessment(ControlStatus.NOT_APPLICABLE, 0),
            ],
        )

        assert result.score == 80.0
        assert result.coverage == 100.0

    def test_nothing_assessed(self) -> None:
        result = calculate_compliance_score(uuid.uuid4(), uuid.uuid4(), "Empty", 0, [])

        assert result.score == 0.0
        assert result.coverage == 0.0


class TestComplianceScoreService:
    """Tests for scoring against the database."""

    @pytest.mark.asyncio
    async def test_score_for_organization(self, db_session, seeded_catalogue, org_id, other_org_id) -> None:
        """Only the organization's own assessments count."""
        catalogue = ControlCatalogue(db_session)
        ledger = AssessmentLedger(db_session, catalogue)
        ids = seeded_catalogue.control_ids

        await ledger.upsert_control_assessment(org_id, ids["AC-1"], ControlStatus.COMPLIANT)
        await ledger.upsert_control_assessment(org_id, ids["AC-2"], ControlStatus.NON_COMPLIANT)
        await ledger.upsert_control_assessment(other_org_id, ids["AU-1"], ControlStatus.COMPLIANT)

        result = await compliance_score(catalogue, ledger, org_id, seeded_catalogue.framework_id)

        assert result.framework_name == "Test Framework"
        assert result.total_controls == 3
        assert result.assessed_controls == 2
        assert result.score == 50.0
