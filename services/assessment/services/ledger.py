"""
Assessment Ledger
=================

Persistent store of per-organization control assessments, maturity
assessments and practice evaluations.

Writes are single INSERT .. ON CONFLICT DO UPDATE statements keyed on the
natural unique constraints, so two racing submissions for the same row
resolve to "last write wins" inside the database. The ledger flushes; the
caller owns the commit.

Version: 0.1.0
"""

import uuid
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import and_, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import join, outerjoin
from sqlalchemy.sql import Executable, Select

from services.assessment.models.enums import (
    DEFAULT_CONTROL_SCORES,
    ControlStatus,
    PracticeStatus,
)
from services.assessment.models.tables import (
    ControlAssessmentModel,
    ControlModel,
    MaturityAssessmentModel,
    PracticeEvaluationModel,
)
from services.assessment.services.catalogue import ControlCatalogue
from shared.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from shared.logging import get_logger


logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AssessmentLedger:
    """Ledger operations bound to a request-scoped session."""

    def __init__(self, session: AsyncSession, catalogue: ControlCatalogue | None = None) -> None:
        self.session = session
        self.catalogue = catalogue or ControlCatalogue(session)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _insert(self, model: type) -> Any:
        """Dialect-specific INSERT supporting ON CONFLICT."""
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(model)
        if dialect == "sqlite":
            return sqlite.insert(model)
        raise NotImplementedError(f"Upserts are not supported on {dialect}")

    async def _write(self, stmt: Executable, operation: str) -> None:
        try:
            await self.session.execute(stmt)
        except IntegrityError as e:
            logger.warning(
                "ledger_write_conflict",
                operation=operation,
                error_type=type(e.orig).__name__,
            )
            raise ConflictError(
                "The record was modified concurrently, retry the request",
                details={"operation": operation},
            ) from e

    async def _reload(self, stmt: Select) -> Any:
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    # =========================================================================
    # Control assessments
    # =========================================================================

    async def upsert_control_assessment(
        self,
        organization_id: uuid.UUID,
        control_id: uuid.UUID,
        status: ControlStatus,
        score: int | None = None,
        evidence_ref: str | None = None,
        assessment_date: date | None = None,
        comments: str | None = None,
    ) -> ControlAssessmentModel:
        """
        Create or update the organization's assessment of a control.

        When score is omitted the status default is stored. A None
        evidence_ref keeps whatever reference is already stored.

        Raises:
            ValidationError: score outside 0..100
            NotFoundError: unknown control
            ConflictError: uniqueness violation from a concurrent write
        """
        if score is not None and not 0 <= score <= 100:
            raise ValidationError(
                "score must be between 0 and 100",
                details={"score": score},
            )

        await self.catalogue.get_control(control_id)

        now = _utcnow()
        stmt = self._insert(ControlAssessmentModel).values(
            id=uuid.uuid4(),
            organization_id=organization_id,
            control_id=control_id,
            status=status,
            score=score if score is not None else DEFAULT_CONTROL_SCORES[status],
            assessment_date=assessment_date or now.date(),
            evidence_ref=evidence_ref,
            comments=comments,
            created_at=now,
            updated_at=now,
        )

        changes = {
            "status": stmt.excluded.status,
            "score": stmt.excluded.score,
            "assessment_date": stmt.excluded.assessment_date,
            "comments": stmt.excluded.comments,
            "updated_at": stmt.excluded.updated_at,
        }
        if evidence_ref is not None:
            changes["evidence_ref"] = stmt.excluded.evidence_ref

        stmt = stmt.on_conflict_do_update(
            index_elements=["organization_id", "control_id"],
            set_=changes,
        )
        await self._write(stmt, "upsert_control_assessment")

        assessment = await self._reload(
            select(ControlAssessmentModel).where(
                ControlAssessmentModel.organization_id == organization_id,
                ControlAssessmentModel.control_id == control_id,
            )
        )

        logger.info(
            "control_assessment_upserted",
            organization_id=str(organization_id),
            control_id=str(control_id),
            status=status.value,
            score=assessment.score,
            has_evidence=assessment.evidence_ref is not None,
        )
        return assessment

    def _assessment_filters(
        self,
        framework_id: uuid.UUID,
        status: ControlStatus | None,
        family: str | None,
    ) -> list[Any]:
        filters: list[Any] = [ControlModel.framework_id == framework_id]
        if status is not None:
            filters.append(ControlAssessmentModel.status == status)
        if family:
            filters.append(ControlModel.family == family)
        return filters

    async def list_control_assessments(
        self,
        organization_id: uuid.UUID,
        framework_id: uuid.UUID,
        status: ControlStatus | None = None,
        family: str | None = None,
        page: int | None = None,
        page_size: int | None = None,
    ) -> tuple[list[ControlAssessmentModel], int]:
        """
        List an organization's assessments for one framework.

        Returns:
            (assessments newest first, total matching before pagination)
        """
        await self.catalogue.get_framework(framework_id)

        joined = join(
            ControlAssessmentModel,
            ControlModel,
            ControlModel.id == ControlAssessmentModel.control_id,
        )
        filters = [
            ControlAssessmentModel.organization_id == organization_id,
            *self._assessment_filters(framework_id, status, family),
        ]

        total = await self.session.scalar(
            select(func.count()).select_from(joined).where(*filters)
        )

        stmt = (
            select(ControlAssessmentModel)
            .select_from(joined)
            .where(*filters)
            .order_by(
                ControlAssessmentModel.assessment_date.desc(),
                ControlModel.control_code,
            )
        )
        if page is not None and page_size is not None:
            stmt = stmt.offset((page - 1) * page_size).limit(page_size)

        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def list_controls_with_assessments(
        self,
        organization_id: uuid.UUID,
        framework_id: uuid.UUID,
        status: ControlStatus | None = None,
        family: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[tuple[ControlModel, ControlAssessmentModel | None]], int]:
        """
        Page through a framework's controls joined with the organization's
        assessment of each. Filtering by status only returns assessed controls.
        """
        await self.catalogue.get_framework(framework_id)

        joined = outerjoin(
            ControlModel,
            ControlAssessmentModel,
            and_(
                ControlAssessmentModel.control_id == ControlModel.id,
                ControlAssessmentModel.organization_id == organization_id,
            ),
        )
        filters = self._assessment_filters(framework_id, status, family)

        total = await self.session.scalar(
            select(func.count()).select_from(joined).where(*filters)
        )

        result = await self.session.execute(
            select(ControlModel, ControlAssessmentModel)
            .select_from(joined)
            .where(*filters)
            .order_by(ControlModel.control_code)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        rows = [(control, assessment) for control, assessment in result.all()]
        return rows, total or 0

    async def get_control_assessment(
        self,
        organization_id: uuid.UUID,
        control_id: uuid.UUID,
    ) -> ControlAssessmentModel:
        result = await self.session.execute(
            select(ControlAssessmentModel).where(
                ControlAssessmentModel.organization_id == organization_id,
                ControlAssessmentModel.control_id == control_id,
            )
        )
        assessment = result.scalar_one_or_none()
        if assessment is None:
            raise NotFoundError(
                "Control assessment not found",
                details={"control_id": str(control_id)},
            )
        return assessment

    async def get_control_assessment_by_id(self, assessment_id: uuid.UUID) -> ControlAssessmentModel:
        assessment = await self.session.get(ControlAssessmentModel, assessment_id)
        if assessment is None:
            raise NotFoundError(
                "Control assessment not found",
                details={"assessment_id": str(assessment_id)},
            )
        return assessment

    async def clear_evidence(self, assessment: ControlAssessmentModel) -> ControlAssessmentModel:
        """Drop the evidence reference from an assessment."""
        assessment.evidence_ref = None
        assessment.updated_at = _utcnow()
        await self.session.flush()

        logger.info(
            "control_assessment_evidence_cleared",
            assessment_id=str(assessment.id),
            organization_id=str(assessment.organization_id),
        )
        return assessment

    # =========================================================================
    # Maturity assessments
    # =========================================================================

    async def get_or_create_maturity_assessment(self, organization_id: uuid.UUID) -> MaturityAssessmentModel:
        """Return the organization's maturity assessment, creating it at tier 0."""
        now = _utcnow()
        stmt = (
            self._insert(MaturityAssessmentModel)
            .values(
                id=uuid.uuid4(),
                organization_id=organization_id,
                achieved_tier=0,
                assessment_date=now.date(),
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=["organization_id"])
        )
        await self._write(stmt, "create_maturity_assessment")

        return await self._reload(
            select(MaturityAssessmentModel).where(
                MaturityAssessmentModel.organization_id == organization_id
            )
        )

    async def get_maturity_assessment(
        self,
        assessment_id: uuid.UUID,
        organization_id: uuid.UUID,
    ) -> MaturityAssessmentModel:
        """
        Raises:
            NotFoundError: unknown assessment
            ForbiddenError: assessment belongs to another organization
        """
        assessment = await self.session.get(MaturityAssessmentModel, assessment_id)
        if assessment is None:
            raise NotFoundError(
                "Maturity assessment not found",
                details={"assessment_id": str(assessment_id)},
            )
        if assessment.organization_id != organization_id:
            logger.warning(
                "maturity_assessment_cross_org_access",
                assessment_id=str(assessment_id),
                organization_id=str(organization_id),
            )
            raise ForbiddenError("Maturity assessment belongs to another organization")
        return assessment

    async def upsert_practice_evaluation(
        self,
        organization_id: uuid.UUID,
        assessment_id: uuid.UUID,
        practice_id: uuid.UUID,
        status: PracticeStatus,
    ) -> PracticeEvaluationModel:
        """
        Create or update the status of a practice within an assessment.

        Raises:
            NotFoundError: unknown assessment or practice
            ForbiddenError: assessment belongs to another organization
        """
        await self.get_maturity_assessment(assessment_id, organization_id)
        await self.catalogue.get_practice(practice_id)

        now = _utcnow()
        stmt = self._insert(PracticeEvaluationModel).values(
            id=uuid.uuid4(),
            assessment_id=assessment_id,
            practice_id=practice_id,
            status=status,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["assessment_id", "practice_id"],
            set_={
                "status": stmt.excluded.status,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self._write(stmt, "upsert_practice_evaluation")

        evaluation = await self._reload(
            select(PracticeEvaluationModel).where(
                PracticeEvaluationModel.assessment_id == assessment_id,
                PracticeEvaluationModel.practice_id == practice_id,
            )
        )

        logger.info(
            "practice_evaluation_upserted",
            assessment_id=str(assessment_id),
            practice_id=str(practice_id),
            status=status.value,
        )
        return evaluation

    async def list_practice_evaluations(self, assessment_id: uuid.UUID) -> list[PracticeEvaluationModel]:
        result = await self.session.execute(
            select(PracticeEvaluationModel)
            .where(PracticeEvaluationModel.assessment_id == assessment_id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def set_achieved_tier(self, assessment_id: uuid.UUID, tier: int) -> MaturityAssessmentModel:
        """Persist a recomputed tier. Only the scoring engine calls this."""
        await self._write(
            update(MaturityAssessmentModel)
            .where(MaturityAssessmentModel.id == assessment_id)
            .values(achieved_tier=tier, updated_at=_utcnow()),
            "set_achieved_tier",
        )

        assessment = await self._reload(
            select(MaturityAssessmentModel).where(MaturityAssessmentModel.id == assessment_id)
        )
        if assessment is None:
            raise NotFoundError(
                "Maturity assessment not found",
                details={"assessment_id": str(assessment_id)},
            )
        return assessment
