"""
Assessment Service
==================

Compliance assessment and maturity scoring service.

Features:
- Framework and control catalogue browsing
- Control assessment submission with evidence upload
- Maturity indicator level (MIL) scoring from practice evaluations
- Compliance score per framework

Port: 8003
"""

__version__ = "0.1.0"
