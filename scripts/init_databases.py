#!/usr/bin/env python3
"""
Database Initialization Script
==============================

Create the Bastion schema and optionally load a small demo catalogue
(one framework with a handful of controls, two maturity domains).

Reference data in real deployments comes from an external seeding
process; the demo catalogue is for local development only.

Usage:
    python scripts/init_databases.py
    python scripts/init_databases.py --seed-demo

Version: 0.1.0
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shared.logging import get_logger, setup_logging

setup_logging(log_level="INFO", json_logs=False, service_name="init-db")
logger = get_logger(__name__)


DEMO_FRAMEWORK = {
    "name": "NIST CSF 2.0",
    "description": "NIST Cybersecurity Framework 2.0",
    "version": "2.0",
}

DEMO_CONTROLS = [
    ("GV.OC-01", "Govern", "Organizational mission is understood and informs risk management"),
    ("GV.RM-01", "Govern", "Risk management objectives are established and agreed to"),
    ("ID.AM-01", "Identify", "Inventories of hardware managed by the organization are maintained"),
    ("ID.AM-02", "Identify", "Inventories of software and services are maintained"),
    ("PR.AA-01", "Protect", "Identities and credentials for authorized users are managed"),
    ("PR.DS-01", "Protect", "The confidentiality and integrity of data-at-rest are protected"),
    ("DE.CM-01", "Detect", "Networks and network services are monitored"),
    ("RS.MA-01", "Respond", "The incident response plan is executed once an incident is declared"),
    ("RC.RP-01", "Recover", "The recovery portion of the incident response plan is executed"),
]

DEMO_DOMAINS = {
    ("ASSET", "Asset, Change, and Configuration Management"): [
        ("ASSET-1a", 1, "There is an inventory of IT assets important to the delivery of the function"),
        ("ASSET-1b", 1, "There is an inventory of information assets"),
        ("ASSET-2a", 2, "Inventory attributes include information to support the cybersecurity strategy"),
        ("ASSET-3a", 3, "Inventories are updated according to defined triggers"),
    ],
    ("RISK", "Risk Management"): [
        ("RISK-1a", 1, "Cybersecurity risks are identified"),
        ("RISK-2a", 2, "A strategy for cybersecurity risk management is established"),
        ("RISK-2b", 2, "Identified risks are prioritized"),
        ("RISK-3a", 3, "Risk management activities are guided by documented policies"),
    ],
}


async def init_postgres() -> bool:
    """Create all tables."""
    from sqlalchemy import text

    # Registers the ORM tables on Base
    import services.assessment.models  # noqa: F401
    from shared.database.postgres import PostgresClient

    logger.info("postgres_initializing")

    try:
        await PostgresClient.create_schema()

        async with PostgresClient.get_engine().connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            result.scalar()

        logger.info("postgres_initialized")
        return True

    except Exception as e:
        logger.error("postgres_initialization_failed", error=str(e))
        return False


async def seed_demo_catalogue() -> bool:
    """Load the demo framework and maturity model. Skips rows that exist."""
    from sqlalchemy import select

    from services.assessment.models import (
        ControlModel,
        FrameworkModel,
        MaturityDomainModel,
        MaturityPracticeModel,
    )
    from shared.database.postgres import postgres_session

    logger.info("demo_catalogue_seeding")

    try:
        async with postgres_session() as session:
            framework = await session.scalar(
                select(FrameworkModel).where(FrameworkModel.name == DEMO_FRAMEWORK["name"])
            )
            if framework is None:
                framework = FrameworkModel(**DEMO_FRAMEWORK)
                session.add(framework)
                await session.flush()
                session.add_all(
                    ControlModel(
                        framework_id=framework.id,
                        control_code=code,
                        family=family,
                        description=description,
                    )
                    for code, family, description in DEMO_CONTROLS
                )
                logger.info("demo_framework_created", controls=len(DEMO_CONTROLS))

            for (domain_code, domain_name), practices in DEMO_DOMAINS.items():
                domain = await session.scalar(
                    select(MaturityDomainModel).where(MaturityDomainModel.code == domain_code)
                )
                if domain is not None:
                    continue

                domain = MaturityDomainModel(code=domain_code, name=domain_name)
                session.add(domain)
                await session.flush()
                session.add_all(
                    MaturityPracticeModel(
                        domain_id=domain.id,
                        code=code,
                        target_tier=tier,
                        description=description,
                    )
                    for code, tier, description in practices
                )
                logger.info("demo_domain_created", domain=domain_code, practices=len(practices))

        logger.info("demo_catalogue_seeded")
        return True

    except Exception as e:
        logger.error("demo_catalogue_seeding_failed", error=str(e))
        return False


async def main(seed_demo: bool) -> int:
    from shared.database.postgres import PostgresClient

    try:
        ok = await init_postgres()
        if ok and seed_demo:
            ok = await seed_demo_catalogue()
    finally:
        await PostgresClient.close()

    if ok:
        logger.info("database_initialization_complete")
        return 0

    logger.error("database_initialization_failed")
    return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Initialize Bastion databases")
    parser.add_argument(
        "--seed-demo",
        action="store_true",
        help="Load the demo framework and maturity model",
    )
    args = parser.parse_args()

    sys.exit(asyncio.run(main(seed_demo=args.seed_demo)))
