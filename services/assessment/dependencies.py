"""
Assessment Service Dependencies
===============================

Request-scoped wiring of the coordinator. The evidence store and notifier
are built once in the lifespan handler and read from app.state here.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from services.assessment.services.coordinator import AssessmentCoordinator
from shared.config import settings
from shared.database.postgres import get_postgres_session


async def get_coordinator(
    request: Request,
    db: AsyncSession = Depends(get_postgres_session),
) -> AssessmentCoordinator:
    """Build a coordinator for the current request."""
    return AssessmentCoordinator(
        session=db,
        evidence_store=request.app.state.evidence_store,
        notifier=request.app.state.notifier,
        config=settings,
    )


Coordinator = Annotated[AssessmentCoordinator, Depends(get_coordinator)]
