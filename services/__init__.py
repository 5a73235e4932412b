"""
BASTION Services
================

Services for the Bastion compliance platform.

Services:
- assessment: Control assessments, evidence and maturity scoring
"""

__all__ = [
    "assessment",
]
