"""
Maturity Scoring Engine
=======================

Derives a maturity indicator level (MIL) from practice evaluations.

Tiers are cumulative prerequisites: tier n is achieved only when every
practice with target_tier <= n is fully implemented. Scoring walks tiers
upward from 1 and stops at the first tier with an unmet practice. A tier
that defines no practices is satisfied and does not block advancement.

Version: 0.1.0
"""

import uuid
from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Protocol, assert_never

from services.assessment.models.enums import PracticeStatus
from services.assessment.models.schemas import DomainMaturity
from services.assessment.services.catalogue import ControlCatalogue
from services.assessment.services.ledger import AssessmentLedger
from shared.logging import get_logger


logger = get_logger(__name__)


class Practice(Protocol):
    id: uuid.UUID
    domain_id: uuid.UUID
    target_tier: int


class Evaluation(Protocol):
    practice_id: uuid.UUID
    status: PracticeStatus


class Domain(Protocol):
    id: uuid.UUID
    code: str
    name: str


# =============================================================================
# Pure scoring
# =============================================================================


def is_satisfied(status: PracticeStatus) -> bool:
    """Whether a practice status counts toward its tier."""
    match status:
        case PracticeStatus.FULLY_IMPLEMENTED:
            return True
        case PracticeStatus.PARTIALLY_IMPLEMENTED | PracticeStatus.NOT_IMPLEMENTED:
            return False
        case _:
            assert_never(status)


def calculate_achieved_tier(
    practices: Sequence[Practice],
    evaluations: Iterable[Evaluation],
) -> int:
    """
    Compute the highest fully satisfied tier.

    Args:
        practices: The full practice catalogue to score against
        evaluations: At most one evaluation per practice

    Returns:
        Achieved tier; 0 when tier 1 is unmet or no practices exist
    """
    by_practice = {evaluation.practice_id: evaluation.status for evaluation in evaluations}

    practices_by_tier: dict[int, list[Practice]] = {}
    for practice in practices:
        practices_by_tier.setdefault(practice.target_tier, []).append(practice)

    max_tier = max(practices_by_tier, default=0)

    achieved = 0
    for tier in range(1, max_tier + 1):
        all_satisfied = True
        for practice in practices_by_tier.get(tier, []):
            status = by_practice.get(practice.id)
            if status is None or not is_satisfied(status):
                all_satisfied = False
                break

        if not all_satisfied:
            break
        achieved = tier

    return achieved


def summarize_by_domain(
    practices: Sequence[Practice],
    evaluations: Iterable[Evaluation],
    domains: Sequence[Domain],
) -> list[DomainMaturity]:
    """Per-domain tier and status breakdown, in the order domains are given."""
    evaluations = list(evaluations)
    by_practice = {evaluation.practice_id: evaluation for evaluation in evaluations}

    summaries = []
    for domain in domains:
        domain_practices = [p for p in practices if p.domain_id == domain.id]
        domain_evaluations = [by_practice[p.id] for p in domain_practices if p.id in by_practice]
        counts = Counter(evaluation.status for evaluation in domain_evaluations)

        summaries.append(
            DomainMaturity(
                domain_id=domain.id,
                domain_code=domain.code,
                domain_name=domain.name,
                achieved_tier=calculate_achieved_tier(domain_practices, domain_evaluations),
                total_practices=len(domain_practices),
                evaluated_practices=len(domain_evaluations),
                status_counts={status: counts.get(status, 0) for status in PracticeStatus},
            )
        )

    return summaries


# =============================================================================
# Engine
# =============================================================================


class MaturityScoringEngine:
    """Recomputes and persists an assessment's achieved tier."""

    def __init__(self, catalogue: ControlCatalogue, ledger: AssessmentLedger) -> None:
        self.catalogue = catalogue
        self.ledger = ledger

    async def rescore(self, assessment_id: uuid.UUID) -> int:
        """
        Re-read the practice catalogue and the assessment's evaluations,
        then store the resulting tier.
        """
        practices = await self.catalogue.list_practices()
        evaluations = await self.ledger.list_practice_evaluations(assessment_id)

        tier = calculate_achieved_tier(practices, evaluations)
        assessment = await self.ledger.set_achieved_tier(assessment_id, tier)

        logger.info(
            "maturity_tier_recomputed",
            assessment_id=str(assessment_id),
            organization_id=str(assessment.organization_id),
            achieved_tier=tier,
            practices=len(practices),
            evaluations=len(evaluations),
        )
        return tier
