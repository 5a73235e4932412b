"""
Test Configuration
==================

Pytest fixtures for Bastion tests.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any, BinaryIO

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["POSTGRES_URL"] = "sqlite+aiosqlite://"
os.environ["STORAGE_PROVIDER"] = "none"

from shared.auth import User  # noqa: E402
from shared.notifications import AssessmentEvent, Notifier  # noqa: E402
from shared.storage import EvidenceStore  # noqa: E402


# =============================================================================
# Fakes
# =============================================================================


class InMemoryEvidenceStore(EvidenceStore):
    """Evidence store keeping objects in a dict. Can simulate an outage."""

    transient_errors = (ConnectionError,)

    def __init__(self) -> None:
        super().__init__(operation_timeout=5.0)
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str | None] = {}
        self.deleted: list[str] = []
        self.fail_uploads = False

    @property
    def name(self) -> str:
        return "memory"

    def _put(self, key: str, stream: BinaryIO, content_type: str | None) -> None:
        if self.fail_uploads:
            raise ConnectionError("simulated backend outage")
        self.objects[key] = stream.read()
        self.content_types[key] = content_type

    def _remove(self, key: str) -> None:
        self.deleted.append(key)
        self.objects.pop(key, None)

    def _sign(self, key: str, ttl_minutes: int) -> str:
        return f"https://evidence.test/{key}?expires={ttl_minutes * 60}"

    def _probe(self) -> dict[str, Any]:
        return {"objects": len(self.objects)}


class RecordingNotifier(Notifier):
    """Collects events; optionally fails every delivery."""

    def __init__(self) -> None:
        self.events: list[AssessmentEvent] = []
        self.fail = False

    async def notify(self, event: AssessmentEvent) -> None:
        if self.fail:
            raise RuntimeError("webhook unreachable")
        self.events.append(event)


@dataclass
class SeededCatalogue:
    """IDs of the reference data loaded by the seeded_catalogue fixture."""

    framework_id: uuid.UUID
    empty_framework_id: uuid.UUID
    control_ids: dict[str, uuid.UUID] = field(default_factory=dict)
    domain_ids: dict[str, uuid.UUID] = field(default_factory=dict)
    practice_ids: dict[str, uuid.UUID] = field(default_factory=dict)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


# =============================================================================
# Database
# =============================================================================


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created."""
    import services.assessment.models  # noqa: F401
    from shared.database.postgres import Base

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_catalogue(session_factory: async_sessionmaker[AsyncSession]) -> SeededCatalogue:
    """
    One framework with three controls, an empty framework, and a maturity
    model with practices P1 (tier 1), P2 (tier 1) and P3 (tier 2).
    """
    from services.assessment.models import (
        ControlModel,
        FrameworkModel,
        MaturityDomainModel,
        MaturityPracticeModel,
    )

    async with session_factory() as session:
        framework = FrameworkModel(name="Test Framework", version="1.0")
        empty = FrameworkModel(name="Empty Framework", version="0.1")
        session.add_all([framework, empty])
        await session.flush()

        seeded = SeededCatalogue(framework_id=framework.id, empty_framework_id=empty.id)

        for code, family in [("AC-1", "Access Control"), ("AC-2", "Access Control"), ("AU-1", "Audit")]:
            control = ControlModel(framework_id=framework.id, control_code=code, family=family)
            session.add(control)
            await session.flush()
            seeded.control_ids[code] = control.id

        risk = MaturityDomainModel(code="RISK", name="Risk Management")
        asset = MaturityDomainModel(code="ASSET", name="Asset Management")
        session.add_all([risk, asset])
        await session.flush()
        seeded.domain_ids = {"RISK": risk.id, "ASSET": asset.id}

        for code, domain, tier in [("P1", risk, 1), ("P2", asset, 1), ("P3", risk, 2)]:
            practice = MaturityPracticeModel(domain_id=domain.id, code=code, target_tier=tier)
            session.add(practice)
            await session.flush()
            seeded.practice_ids[code] = practice.id

        await session.commit()

    return seeded


# =============================================================================
# Identities and collaborators
# =============================================================================


@pytest.fixture
def org_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def other_org_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def identity(org_id: uuid.UUID) -> User:
    return User(id="test-user-id", organization_id=org_id, role="admin")


@pytest.fixture
def evidence_store() -> InMemoryEvidenceStore:
    return InMemoryEvidenceStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def coordinator(db_session: AsyncSession, evidence_store: InMemoryEvidenceStore, notifier: RecordingNotifier):
    from services.assessment.services import AssessmentCoordinator
    from shared.config import settings

    return AssessmentCoordinator(db_session, evidence_store, notifier, settings)


# =============================================================================
# HTTP
# =============================================================================


@pytest_asyncio.fixture
async def assessment_client(
    session_factory: async_sessionmaker[AsyncSession],
    evidence_store: InMemoryEvidenceStore,
    notifier: RecordingNotifier,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client for the Assessment Service backed by SQLite."""
    from services.assessment.main import app
    from shared.database.postgres import get_postgres_session

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_postgres_session] = override_session
    app.state.evidence_store = evidence_store
    app.state.notifier = notifier

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(org_id: uuid.UUID) -> dict[str, str]:
    """Generate test authentication headers."""
    from shared.auth import create_access_token

    token = create_access_token({
        "sub": "test-user-id",
        "email": "test@bastion.io",
        "organization_id": str(org_id),
        "role": "admin",
    })
    return {"Authorization": f"Bearer {token}"}
