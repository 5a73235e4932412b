"""
Evidence Store Selection
========================

Chooses the evidence backend once during process bootstrap. The result is
handed to the coordinator explicitly; nothing reads it from module state
at request time.

Version: 0.1.0
"""

from shared.config import Settings, StorageBackend
from shared.logging import get_logger
from shared.storage.disabled import DisabledEvidenceStore
from shared.storage.provider import EvidenceStore


logger = get_logger(__name__)


def build_evidence_store(config: Settings) -> EvidenceStore:
    """
    Build the evidence store selected by configuration.

    Missing bucket/region/project settings, an unknown provider, or a client
    that cannot be constructed all yield a DisabledEvidenceStore so the
    service still starts; uploads then fail with storage_not_configured.

    Args:
        config: Application settings

    Returns:
        EvidenceStore instance
    """
    provider = config.storage.provider
    timeout = config.evidence.operation_timeout_seconds

    if provider == StorageBackend.S3:
        s3 = config.storage.s3
        if not s3.is_configured:
            return _disabled("AWS_S3_BUCKET or AWS_REGION not set")
        try:
            from shared.storage.s3 import S3EvidenceStore

            store: EvidenceStore = S3EvidenceStore(
                bucket=s3.bucket,
                region=s3.region,
                endpoint_url=s3.endpoint_url,
                operation_timeout=timeout,
            )
        except Exception as e:
            logger.error("s3_evidence_store_init_failed", error=str(e))
            return _disabled("S3 client could not be created")

    elif provider == StorageBackend.GCS:
        gcs = config.storage.gcs
        if not gcs.is_configured:
            return _disabled("GCS_PROJECT_ID or GCS_BUCKET_NAME not set")
        try:
            from shared.storage.gcs import GCSEvidenceStore

            store = GCSEvidenceStore(
                project_id=gcs.project_id,
                bucket_name=gcs.bucket_name,
                operation_timeout=timeout,
            )
        except Exception as e:
            logger.error("gcs_evidence_store_init_failed", error=str(e))
            return _disabled("GCS client could not be created")

    else:
        return _disabled(f"storage provider is '{provider.value}'")

    logger.info("evidence_store_selected", backend=store.name)
    return store


def _disabled(reason: str) -> DisabledEvidenceStore:
    logger.warning("evidence_store_disabled", reason=reason)
    return DisabledEvidenceStore(reason=reason)
