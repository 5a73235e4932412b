"""
Assessment Coordinator
======================

Boundary orchestration for assessment writes.

Order of a control assessment submission:
1. Caller's organization must match the target organization
2. Evidence file (if any) is validated and uploaded
3. Ledger upsert with the new evidence reference, plus any practice
   evaluations, committed together
4. Maturity tier recomputed from the committed evaluations
5. Best-effort notification

An upload failure aborts before step 3, so no ledger row ever references
evidence that was not stored. A failed recompute leaves the stored tier
in place; the next evaluation recomputes from scratch.

Version: 0.1.0
"""

import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from services.assessment.models.enums import PracticeStatus
from services.assessment.models.schemas import (
    AssessmentSubmission,
    ControlAssessment,
    EvidenceURLResponse,
    MaturityAssessment,
    MaturityAssessmentDetail,
    MaturitySummary,
    PracticeEvaluation,
)
from services.assessment.services.catalogue import ControlCatalogue
from services.assessment.services.evidence import (
    EvidenceFile,
    evidence_object_name,
    validate_evidence,
)
from services.assessment.services.ledger import AssessmentLedger
from services.assessment.services.maturity import MaturityScoringEngine, summarize_by_domain
from shared.auth import User
from shared.config import Settings, settings
from shared.exceptions import AssessmentError, ForbiddenError, NotFoundError, ValidationError
from shared.logging import get_logger
from shared.notifications import AssessmentEvent, AssessmentEventType, Notifier
from shared.storage import EvidenceStore, is_owned_by


logger = get_logger(__name__)


def is_external_reference(evidence_ref: str) -> bool:
    """Evidence given as a link rather than a stored object."""
    return evidence_ref.startswith(("http://", "https://"))


@dataclass
class SubmissionResult:
    """Outcome of a control assessment submission."""

    control_assessment: ControlAssessment
    achieved_tier: int | None = None


@dataclass
class PracticeResult:
    """Outcome of a practice evaluation."""

    evaluation: PracticeEvaluation
    achieved_tier: int


class AssessmentCoordinator:
    """
    Request-scoped orchestration over the catalogue, ledger, scoring engine,
    evidence store and notifier.

    The evidence store and notifier are built once at startup and passed in.
    """

    def __init__(
        self,
        session: AsyncSession,
        evidence_store: EvidenceStore,
        notifier: Notifier,
        config: Settings | None = None,
    ) -> None:
        self.session = session
        self.evidence_store = evidence_store
        self.notifier = notifier
        self.settings = config or settings

        self.catalogue = ControlCatalogue(session)
        self.ledger = AssessmentLedger(session, self.catalogue)
        self.engine = MaturityScoringEngine(self.catalogue, self.ledger)

    # =========================================================================
    # Scoping
    # =========================================================================

    @staticmethod
    def ensure_same_organization(identity: User, organization_id: uuid.UUID) -> None:
        """
        Raises:
            ForbiddenError: the caller acts for a different organization
        """
        if not identity.belongs_to(organization_id):
            logger.warning(
                "cross_organization_access_denied",
                user_id=identity.id,
                caller_organization_id=str(identity.organization_id),
                target_organization_id=str(organization_id),
            )
            raise ForbiddenError("Access denied to the specified organization")

    # =========================================================================
    # Control assessments
    # =========================================================================

    async def submit_control_assessment(
        self,
        identity: User,
        submission: AssessmentSubmission,
        evidence: EvidenceFile | None = None,
    ) -> SubmissionResult:
        """
        Create or update a control assessment, optionally with evidence and
        practice evaluations.

        Raises:
            ForbiddenError: target organization is not the caller's
            NotFoundError: unknown control or practice
            ValidationError: bad score, evidence link or file
            StorageUnavailableError: evidence could not be stored
        """
        organization_id = submission.organization_id or identity.organization_id
        self.ensure_same_organization(identity, organization_id)

        await self.catalogue.get_control(submission.control_id)

        evidence_ref = submission.evidence_url
        if evidence_ref is not None and not is_external_reference(evidence_ref):
            raise ValidationError(
                "evidence_url must be an http(s) URL",
                details={"evidence_url": evidence_ref},
            )

        uploaded_key = None
        if evidence is not None:
            content_type = validate_evidence(evidence, self.settings.evidence.max_file_size_bytes)
            uploaded_key = await self.evidence_store.upload(
                organization_id,
                evidence_object_name(submission.control_id, evidence.filename),
                evidence.content,
                content_type,
            )
            evidence_ref = uploaded_key

        maturity_id = None
        stale_tier = 0
        try:
            record = await self.ledger.upsert_control_assessment(
                organization_id=organization_id,
                control_id=submission.control_id,
                status=submission.status,
                score=submission.score,
                evidence_ref=evidence_ref,
                assessment_date=submission.assessment_date,
                comments=submission.comments,
            )
            control_assessment = ControlAssessment.model_validate(record)

            if submission.practice_evaluations:
                maturity = await self.ledger.get_or_create_maturity_assessment(organization_id)
                maturity_id, stale_tier = maturity.id, maturity.achieved_tier
                for practice_id, status in submission.practice_evaluations.items():
                    await self.ledger.upsert_practice_evaluation(
                        organization_id, maturity_id, practice_id, status
                    )

            await self.session.commit()
        except Exception:
            await self.session.rollback()
            if uploaded_key is not None:
                await self._discard_upload(uploaded_key)
            raise

        achieved_tier = None
        if maturity_id is not None:
            achieved_tier = await self._rescore(maturity_id, stale_tier)

        await self._notify(
            AssessmentEventType.CONTROL_ASSESSMENT_UPDATED,
            organization_id,
            control_assessment.id,
            {
                "control_id": str(control_assessment.control_id),
                "status": control_assessment.status.value,
                "score": control_assessment.score,
            },
        )
        if maturity_id is not None:
            await self._notify(
                AssessmentEventType.MATURITY_ASSESSMENT_UPDATED,
                organization_id,
                maturity_id,
                {"achieved_tier": achieved_tier},
            )

        return SubmissionResult(control_assessment=control_assessment, achieved_tier=achieved_tier)

    async def evidence_url(
        self,
        identity: User,
        assessment_id: uuid.UUID,
        ttl_minutes: int | None = None,
    ) -> EvidenceURLResponse:
        """Time-boxed URL for an assessment's evidence. External links are returned as is."""
        record = await self.ledger.get_control_assessment_by_id(assessment_id)
        self.ensure_same_organization(identity, record.organization_id)

        evidence_ref = record.evidence_ref
        if not evidence_ref:
            raise NotFoundError(
                "No evidence is attached to this assessment",
                details={"assessment_id": str(assessment_id)},
            )

        if is_external_reference(evidence_ref):
            return EvidenceURLResponse(url=evidence_ref, expires_in_minutes=0, external=True)

        self._ensure_owned(evidence_ref, record.organization_id)

        ttl = ttl_minutes or self.settings.evidence.signed_url_ttl_minutes
        url = await self.evidence_store.get_signed_url(evidence_ref, ttl)
        return EvidenceURLResponse(url=url, expires_in_minutes=ttl)

    async def delete_evidence(self, identity: User, assessment_id: uuid.UUID) -> ControlAssessment:
        """
        Detach evidence from an assessment.

        Stored objects are deleted from the evidence store first; external
        links are only cleared. Deleting when nothing is attached succeeds.
        """
        record = await self.ledger.get_control_assessment_by_id(assessment_id)
        self.ensure_same_organization(identity, record.organization_id)

        evidence_ref = record.evidence_ref
        if not evidence_ref:
            return ControlAssessment.model_validate(record)

        if not is_external_reference(evidence_ref):
            self._ensure_owned(evidence_ref, record.organization_id)
            await self.evidence_store.delete(evidence_ref)

        record = await self.ledger.clear_evidence(record)
        control_assessment = ControlAssessment.model_validate(record)
        await self.session.commit()

        await self._notify(
            AssessmentEventType.CONTROL_ASSESSMENT_UPDATED,
            record.organization_id,
            control_assessment.id,
            {"control_id": str(control_assessment.control_id), "evidence_removed": True},
        )
        return control_assessment

    # =========================================================================
    # Maturity
    # =========================================================================

    async def start_maturity_assessment(self, identity: User) -> MaturityAssessment:
        """Get or create the caller's maturity assessment."""
        record = await self.ledger.get_or_create_maturity_assessment(identity.organization_id)
        result = MaturityAssessment.model_validate(record)
        await self.session.commit()
        return result

    async def get_maturity_assessment(
        self,
        identity: User,
        assessment_id: uuid.UUID,
    ) -> MaturityAssessmentDetail:
        record = await self.ledger.get_maturity_assessment(assessment_id, identity.organization_id)
        evaluations = await self.ledger.list_practice_evaluations(assessment_id)
        return MaturityAssessmentDetail.model_validate(
            {
                **MaturityAssessment.model_validate(record).model_dump(),
                "evaluations": [PracticeEvaluation.model_validate(e) for e in evaluations],
            }
        )

    async def evaluate_practice(
        self,
        identity: User,
        assessment_id: uuid.UUID,
        practice_id: uuid.UUID,
        status: PracticeStatus,
    ) -> PracticeResult:
        """
        Set a practice's status and recompute the achieved tier.

        Raises:
            NotFoundError: unknown assessment or practice
            ForbiddenError: assessment belongs to another organization
        """
        maturity = await self.ledger.get_maturity_assessment(assessment_id, identity.organization_id)
        stale_tier = maturity.achieved_tier

        record = await self.ledger.upsert_practice_evaluation(
            identity.organization_id, assessment_id, practice_id, status
        )
        evaluation = PracticeEvaluation.model_validate(record)
        await self.session.commit()

        achieved_tier = await self._rescore(assessment_id, stale_tier)

        await self._notify(
            AssessmentEventType.MATURITY_ASSESSMENT_UPDATED,
            identity.organization_id,
            assessment_id,
            {
                "practice_id": str(practice_id),
                "status": status.value,
                "achieved_tier": achieved_tier,
            },
        )
        return PracticeResult(evaluation=evaluation, achieved_tier=achieved_tier)

    async def get_maturity_summary(self, identity: User, assessment_id: uuid.UUID) -> MaturitySummary:
        """Overall tier with a per-domain breakdown."""
        record = await self.ledger.get_maturity_assessment(assessment_id, identity.organization_id)

        domains = await self.catalogue.list_domains()
        practices = await self.catalogue.list_practices()
        evaluations = await self.ledger.list_practice_evaluations(assessment_id)

        return MaturitySummary(
            assessment_id=record.id,
            organization_id=record.organization_id,
            achieved_tier=record.achieved_tier,
            max_tier=max((p.target_tier for p in practices), default=0),
            domains=summarize_by_domain(practices, evaluations, domains),
        )

    # =========================================================================
    # Internals
    # =========================================================================

    def _ensure_owned(self, evidence_ref: str, organization_id: uuid.UUID) -> None:
        if not is_owned_by(evidence_ref, organization_id):
            logger.warning(
                "evidence_outside_namespace",
                organization_id=str(organization_id),
                object_name=evidence_ref,
            )
            raise ForbiddenError("Evidence object is outside the organization's namespace")

    async def _rescore(self, assessment_id: uuid.UUID, stale_tier: int) -> int:
        """Recompute and commit the tier. On failure keep and return the stored one."""
        try:
            tier = await self.engine.rescore(assessment_id)
            await self.session.commit()
        except (SQLAlchemyError, AssessmentError) as e:
            logger.error(
                "maturity_rescore_failed",
                assessment_id=str(assessment_id),
                error=str(e),
                error_type=type(e).__name__,
                stale_tier=stale_tier,
            )
            await self.session.rollback()
            return stale_tier
        return tier

    async def _discard_upload(self, object_name: str) -> None:
        try:
            await self.evidence_store.delete(object_name)
        except AssessmentError as e:
            logger.warning(
                "orphaned_evidence_cleanup_failed",
                object_name=object_name,
                error_code=e.error_code,
            )
        else:
            logger.info("orphaned_evidence_removed", object_name=object_name)

    async def _notify(
        self,
        event_type: AssessmentEventType,
        organization_id: uuid.UUID,
        subject_id: uuid.UUID,
        data: dict[str, Any],
    ) -> None:
        event = AssessmentEvent(
            event_type=event_type,
            organization_id=str(organization_id),
            subject_id=str(subject_id),
            data=data,
        )
        try:
            await self.notifier.notify(event)
        except Exception as e:
            logger.warning(
                "notification_failed",
                event_type=event_type.value,
                error=str(e),
                error_type=type(e).__name__,
            )
