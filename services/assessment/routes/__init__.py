"""
Assessment Routes
=================

API route handlers for the Assessment Service.
"""

from services.assessment.routes import assessments, frameworks, maturity, organizations


__all__ = ["assessments", "frameworks", "maturity", "organizations"]
