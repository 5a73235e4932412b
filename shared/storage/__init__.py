"""
Evidence Storage Module
=======================

Provider-neutral object storage for assessment evidence.

Backends:
- Amazon S3 (boto3)
- Google Cloud Storage (google-cloud-storage)
- Disabled (no backend configured)

Usage:
    from shared.storage import build_evidence_store

    store = build_evidence_store(settings)  # once, at startup

    key = await store.upload(org_id, "evidence/ctrl/report.pdf", data)
    url = await store.get_signed_url(key, ttl_minutes=15)
    await store.delete(key)
"""

from shared.storage.disabled import DisabledEvidenceStore
from shared.storage.factory import build_evidence_store
from shared.storage.provider import (
    MAX_SIGNED_URL_TTL_MINUTES,
    EvidenceStore,
    evidence_key,
    is_owned_by,
    normalize_object_name,
)


__all__ = [
    # Base
    "EvidenceStore",
    "MAX_SIGNED_URL_TTL_MINUTES",
    "evidence_key",
    "is_owned_by",
    "normalize_object_name",
    # Selection
    "build_evidence_store",
    # Implementations
    "DisabledEvidenceStore",
]
