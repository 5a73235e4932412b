"""
Bastion Test Suite
==================

Test organization:
- tests/unit/                  - Shared library tests (auth, storage, notifications, logging)
- tests/services/assessment/   - Assessment service tests on in-memory SQLite

Run tests:
    pytest                              # All tests
    pytest tests/unit                   # Shared library only
    pytest tests/services/assessment    # Assessment service only
"""
