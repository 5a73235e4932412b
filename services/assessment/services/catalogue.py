"""
Control Catalogue
=================

Read-only access to compliance frameworks, their controls, and the
maturity model's domains and practices. Reference data is seeded
externally; this service never writes it.

Version: 0.1.0
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.assessment.models.tables import (
    ControlModel,
    FrameworkModel,
    MaturityDomainModel,
    MaturityPracticeModel,
)
from shared.exceptions import NotFoundError


class ControlCatalogue:
    """Catalogue queries bound to a request-scoped session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # =========================================================================
    # Frameworks and controls
    # =========================================================================

    async def list_frameworks(self) -> list[FrameworkModel]:
        result = await self.session.execute(select(FrameworkModel).order_by(FrameworkModel.name))
        return list(result.scalars().all())

    async def get_framework(self, framework_id: uuid.UUID) -> FrameworkModel:
        framework = await self.session.get(FrameworkModel, framework_id)
        if framework is None:
            raise NotFoundError(
                "Framework not found",
                details={"framework_id": str(framework_id)},
            )
        return framework

    async def list_controls(self, framework_id: uuid.UUID) -> list[ControlModel]:
        """
        List a framework's controls ordered by control code.

        An empty list means the framework has no controls; an unknown
        framework raises NotFoundError.
        """
        await self.get_framework(framework_id)
        result = await self.session.execute(
            select(ControlModel)
            .where(ControlModel.framework_id == framework_id)
            .order_by(ControlModel.control_code)
        )
        return list(result.scalars().all())

    async def get_control(self, control_id: uuid.UUID) -> ControlModel:
        control = await self.session.get(ControlModel, control_id)
        if control is None:
            raise NotFoundError(
                "Control not found",
                details={"control_id": str(control_id)},
            )
        return control

    async def list_control_families(self, framework_id: uuid.UUID) -> list[str]:
        """Distinct non-empty control families of a framework."""
        await self.get_framework(framework_id)
        result = await self.session.execute(
            select(ControlModel.family)
            .where(ControlModel.framework_id == framework_id, ControlModel.family != "")
            .distinct()
            .order_by(ControlModel.family)
        )
        return list(result.scalars().all())

    # =========================================================================
    # Maturity model
    # =========================================================================

    async def list_domains(self) -> list[MaturityDomainModel]:
        result = await self.session.execute(
            select(MaturityDomainModel).order_by(MaturityDomainModel.code)
        )
        return list(result.scalars().all())

    async def list_practices(self, domain_id: uuid.UUID | None = None) -> list[MaturityPracticeModel]:
        """List practices, optionally restricted to one domain."""
        stmt = select(MaturityPracticeModel).order_by(MaturityPracticeModel.code)

        if domain_id is not None:
            domain = await self.session.get(MaturityDomainModel, domain_id)
            if domain is None:
                raise NotFoundError(
                    "Maturity domain not found",
                    details={"domain_id": str(domain_id)},
                )
            stmt = stmt.where(MaturityPracticeModel.domain_id == domain_id)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_practice(self, practice_id: uuid.UUID) -> MaturityPracticeModel:
        practice = await self.session.get(MaturityPracticeModel, practice_id)
        if practice is None:
            raise NotFoundError(
                "Maturity practice not found",
                details={"practice_id": str(practice_id)},
            )
        return practice
