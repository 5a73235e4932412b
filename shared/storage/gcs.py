"""
Google Cloud Storage Evidence Store
===================================

Evidence backend on a GCS bucket. Objects are written private; reads go
through V4 signed URLs.

Version: 0.1.0
"""

from datetime import timedelta
from typing import Any, BinaryIO

from google.api_core import exceptions as gcs_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import storage

from shared.logging import get_logger
from shared.storage.provider import EvidenceStore


logger = get_logger(__name__)


class GCSEvidenceStore(EvidenceStore):
    """Evidence store backed by a Google Cloud Storage bucket."""

    transient_errors = (gcs_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError)

    def __init__(
        self,
        project_id: str,
        bucket_name: str,
        client: Any | None = None,
        operation_timeout: float = 60.0,
    ) -> None:
        """
        Initialize the GCS store.

        Args:
            project_id: GCP project owning the bucket
            bucket_name: Target bucket name
            client: Pre-built storage.Client (tests inject a fake)
            operation_timeout: Per-operation deadline in seconds
        """
        super().__init__(operation_timeout=operation_timeout)
        self._project_id = project_id

        # GOOGLE_APPLICATION_CREDENTIALS or workload identity
        self._client = client or storage.Client(project=project_id)
        self._bucket = self._client.bucket(bucket_name)

        logger.info("gcs_evidence_store_initialized", project_id=project_id)

    @property
    def name(self) -> str:
        return "gcs"

    def _put(self, key: str, stream: BinaryIO, content_type: str | None) -> None:
        blob = self._bucket.blob(key)
        blob.upload_from_file(stream, content_type=content_type, rewind=True)

    def _remove(self, key: str) -> None:
        try:
            self._bucket.blob(key).delete()
        except gcs_exceptions.NotFound:
            logger.debug("gcs_delete_missing_object", object_name=key)

    def _sign(self, key: str, ttl_minutes: int) -> str:
        return self._bucket.blob(key).generate_signed_url(
            version="v4",
            expiration=timedelta(minutes=ttl_minutes),
            method="GET",
        )

    def _probe(self) -> dict[str, Any]:
        self._bucket.reload()
        return {"project_id": self._project_id}
