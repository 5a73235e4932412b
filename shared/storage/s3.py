"""
Amazon S3 Evidence Store
========================

Evidence backend on Amazon S3 (or any S3-compatible endpoint).

Uploads go through the boto3 managed transfer so large files are sent as
multipart uploads. Objects stay private; access is only ever granted
through presigned GET URLs.

Version: 0.1.0
"""

from typing import Any, BinaryIO

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from shared.logging import get_logger
from shared.storage.provider import EvidenceStore


logger = get_logger(__name__)

_MISSING_OBJECT_CODES = {"404", "NoSuchKey", "NotFound"}


class S3EvidenceStore(EvidenceStore):
    """Evidence store backed by an S3 bucket."""

    transient_errors = (BotoCoreError, ClientError)

    def __init__(
        self,
        bucket: str,
        region: str,
        endpoint_url: str | None = None,
        client: Any | None = None,
        operation_timeout: float = 60.0,
    ) -> None:
        """
        Initialize the S3 store.

        Args:
            bucket: Target bucket name
            region: Bucket region
            endpoint_url: Override for S3-compatible services
            client: Pre-built boto3 S3 client (tests inject a fake)
            operation_timeout: Per-operation deadline in seconds
        """
        super().__init__(operation_timeout=operation_timeout)
        self._bucket = bucket
        self._region = region

        # Credentials come from the default chain (env, profile, IAM role).
        # No SDK retries: failures go straight back to the caller.
        self._client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            config=Config(
                signature_version="s3v4",
                retries={"max_attempts": 1, "mode": "standard"},
            ),
        )

        logger.info("s3_evidence_store_initialized", region=region)

    @property
    def name(self) -> str:
        return "s3"

    def _put(self, key: str, stream: BinaryIO, content_type: str | None) -> None:
        extra_args = {"ContentType": content_type} if content_type else None
        self._client.upload_fileobj(stream, self._bucket, key, ExtraArgs=extra_args)

    def _remove(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_OBJECT_CODES:
                logger.debug("s3_delete_missing_object", object_name=key)
                return
            raise

    def _sign(self, key: str, ttl_minutes: int) -> str:
        return self._client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self._bucket, "Key": key},
            ExpiresIn=ttl_minutes * 60,
        )

    def _probe(self) -> dict[str, Any]:
        self._client.head_bucket(Bucket=self._bucket)
        return {"region": self._region}
