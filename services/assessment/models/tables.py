"""
Assessment Database Models
==========================

SQLAlchemy ORM models for the control catalogue, the maturity practice
hierarchy, and the per-organization assessment ledger.

Reference tables (frameworks, controls, maturity_domains,
maturity_practices) are seeded externally and only read by the service.

Version: 0.1.0
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)

from services.assessment.models.enums import ControlStatus, PracticeStatus
from shared.database.postgres import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _enum_column(enum_cls: type, length: int) -> SQLEnum:
    # Store the lowercase values, not member names
    return SQLEnum(
        enum_cls,
        native_enum=False,
        length=length,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


# =============================================================================
# Control Catalogue
# =============================================================================


class FrameworkModel(Base):
    """A compliance framework (NIST CSF 2.0, ISO 27001, ...)."""

    __tablename__ = "frameworks"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=False, default="")
    version = Column(String(50), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class ControlModel(Base):
    """A single control in a framework's catalogue."""

    __tablename__ = "controls"
    __table_args__ = (
        UniqueConstraint("framework_id", "control_code"),
        Index("ix_controls_family", "framework_id", "family"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    framework_id = Column(
        Uuid,
        ForeignKey("frameworks.id", ondelete="CASCADE"),
        nullable=False,
    )
    control_code = Column(String(50), nullable=False)  # AC-1, PR.AA-01
    description = Column(Text, nullable=False, default="")
    family = Column(String(100), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


# =============================================================================
# Maturity Model Catalogue
# =============================================================================


class MaturityDomainModel(Base):
    """Grouping of maturity practices (Risk Management, Asset Management, ...)."""

    __tablename__ = "maturity_domains"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)
    code = Column(String(20), nullable=False, unique=True)  # RISK, ASSET


class MaturityPracticeModel(Base):
    """A practice and the lowest maturity tier it is required for."""

    __tablename__ = "maturity_practices"
    __table_args__ = (
        CheckConstraint("target_tier >= 1", name="target_tier_positive"),
        Index("ix_maturity_practices_domain", "domain_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    domain_id = Column(
        Uuid,
        ForeignKey("maturity_domains.id", ondelete="CASCADE"),
        nullable=False,
    )
    code = Column(String(20), nullable=False, unique=True)  # RISK-1a
    description = Column(Text, nullable=False, default="")
    target_tier = Column(Integer, nullable=False)


# =============================================================================
# Assessment Ledger
# =============================================================================


class ControlAssessmentModel(Base):
    """An organization's evaluation of one control. One row per (org, control)."""

    __tablename__ = "control_assessments"
    __table_args__ = (
        UniqueConstraint("organization_id", "control_id"),
        CheckConstraint("score IS NULL OR (score >= 0 AND score <= 100)", name="score_range"),
        Index("ix_control_assessments_org_status", "organization_id", "status"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, nullable=False)
    control_id = Column(
        Uuid,
        ForeignKey("controls.id", ondelete="CASCADE"),
        nullable=False,
    )

    status = Column(_enum_column(ControlStatus, 30), nullable=False)
    score = Column(Integer)
    assessment_date = Column(Date, nullable=False)

    # Tenant-scoped object store key, or an external http(s) link
    evidence_ref = Column(String(1024))
    comments = Column(Text)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class MaturityAssessmentModel(Base):
    """Aggregate root carrying an organization's achieved maturity tier."""

    __tablename__ = "maturity_assessments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, nullable=False, unique=True)

    # Written only by the scoring engine
    achieved_tier = Column(Integer, nullable=False, default=0)

    assessment_date = Column(Date)
    comments = Column(Text)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class PracticeEvaluationModel(Base):
    """Status of one practice within a maturity assessment."""

    __tablename__ = "practice_evaluations"
    __table_args__ = (UniqueConstraint("assessment_id", "practice_id"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    assessment_id = Column(
        Uuid,
        ForeignKey("maturity_assessments.id", ondelete="CASCADE"),
        nullable=False,
    )
    practice_id = Column(
        Uuid,
        ForeignKey("maturity_practices.id", ondelete="CASCADE"),
        nullable=False,
    )
    status = Column(_enum_column(PracticeStatus, 30), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
