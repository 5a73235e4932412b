"""
Database Module
===============

Async relational storage for the assessment ledger and reference catalogue.

Usage:
    from shared.database import get_postgres_session

    @router.get("/example")
    async def example(
        db: AsyncSession = Depends(get_postgres_session),
    ):
        result = await db.execute(select(Framework))
        ...
"""

from shared.database.postgres import (
    Base,
    PostgresClient,
    get_postgres_session,
    postgres_session,
)


__all__ = [
    "get_postgres_session",
    "postgres_session",
    "PostgresClient",
    "Base",
]
