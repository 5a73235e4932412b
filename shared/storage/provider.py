"""
Evidence Store Base
===================

Provider-neutral interface over the object store that holds evidence files.

Every stored object lives under a key prefixed with the owning
organization id, so an organization can never read or overwrite another
organization's evidence by guessing a name. Backends only implement the
raw put/remove/sign primitives; key building, validation, timeouts and
error translation live here.

Version: 0.1.0
"""

import asyncio
import io
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, BinaryIO, TypeVar

from shared.exceptions import StorageUnavailableError, ValidationError
from shared.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")

# S3 and GCS v4 signatures are capped at seven days
MAX_SIGNED_URL_TTL_MINUTES = 7 * 24 * 60


def normalize_object_name(object_name: str) -> str:
    """
    Normalize a client-relative object name.

    Backslashes become slashes and leading slashes are dropped. Empty,
    "." and ".." segments are rejected so a name can never climb out of
    the organization prefix.

    Raises:
        ValidationError: if the name is empty or contains a bad segment
    """
    cleaned = object_name.strip().replace("\\", "/").lstrip("/")
    segments = cleaned.split("/")

    if not cleaned or any(seg in ("", ".", "..") for seg in segments):
        raise ValidationError(
            "Invalid evidence object name",
            details={"object_name": object_name},
        )

    return "/".join(segments)


def evidence_key(organization_id: uuid.UUID | str, object_name: str) -> str:
    """Build the tenant-scoped key for an object name."""
    return f"{organization_id}/{normalize_object_name(object_name)}"


def is_owned_by(object_name: str, organization_id: uuid.UUID | str) -> bool:
    """Check that a stored key sits inside the organization's namespace."""
    return object_name.startswith(f"{organization_id}/")


class EvidenceStore(ABC):
    """
    Abstract base class for evidence object stores.

    Implementations are constructed once at process start and shared by
    all requests; they must be safe for concurrent use.
    """

    #: Exceptions raised by the backend SDK that mean "try again later"
    transient_errors: tuple[type[BaseException], ...] = ()

    def __init__(self, operation_timeout: float = 60.0) -> None:
        self._operation_timeout = operation_timeout

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name."""
        ...

    @property
    def enabled(self) -> bool:
        """Whether uploads are possible at all."""
        return True

    @abstractmethod
    def _put(self, key: str, stream: BinaryIO, content_type: str | None) -> None:
        """Write the stream under key. Blocking; runs in a worker thread."""
        ...

    @abstractmethod
    def _remove(self, key: str) -> None:
        """Delete key. A missing object must not raise."""
        ...

    @abstractmethod
    def _sign(self, key: str, ttl_minutes: int) -> str:
        """Return a time-limited GET URL for key."""
        ...

    @abstractmethod
    def _probe(self) -> dict[str, Any]:
        """Cheap reachability check for health endpoints."""
        ...

    async def _call(self, operation: str, func: Callable[..., T], *args: Any) -> T:
        """Run a blocking SDK call off the event loop with a deadline."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args),
                timeout=self._operation_timeout,
            )
        except TimeoutError:
            logger.error(
                "evidence_store_timeout",
                backend=self.name,
                operation=operation,
                timeout_seconds=self._operation_timeout,
            )
            raise StorageUnavailableError(
                "Evidence storage timed out",
                details={"operation": operation},
            ) from None
        except self.transient_errors as e:
            logger.error(
                "evidence_store_error",
                backend=self.name,
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageUnavailableError(
                "Evidence storage is unavailable",
                details={"operation": operation},
            ) from e

    async def upload(
        self,
        organization_id: uuid.UUID | str,
        object_name: str,
        content: bytes | BinaryIO,
        content_type: str | None = None,
    ) -> str:
        """
        Store content under the organization's namespace.

        Args:
            organization_id: Owning organization
            object_name: Name relative to the organization prefix
            content: Raw bytes or a readable binary file object
            content_type: MIME type recorded on the object

        Returns:
            The canonical stored object name (not a URL)
        """
        key = evidence_key(organization_id, object_name)
        stream = io.BytesIO(content) if isinstance(content, bytes | bytearray) else content

        start = time.perf_counter()
        await self._call("upload", self._put, key, stream, content_type)

        logger.info(
            "evidence_uploaded",
            backend=self.name,
            organization_id=str(organization_id),
            object_name=key,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return key

    async def delete(self, object_name: str) -> None:
        """Delete a stored object. Deleting a missing object succeeds."""
        await self._call("delete", self._remove, object_name)
        logger.info("evidence_deleted", backend=self.name, object_name=object_name)

    async def get_signed_url(self, object_name: str, ttl_minutes: int) -> str:
        """
        Produce a time-boxed access URL.

        Raises:
            ValidationError: if ttl_minutes is outside 1..7 days
        """
        if not 1 <= ttl_minutes <= MAX_SIGNED_URL_TTL_MINUTES:
            raise ValidationError(
                f"ttl_minutes must be between 1 and {MAX_SIGNED_URL_TTL_MINUTES}",
                details={"ttl_minutes": ttl_minutes},
            )
        url = await self._call("sign", self._sign, object_name, ttl_minutes)
        logger.debug("evidence_url_signed", backend=self.name, ttl_minutes=ttl_minutes)
        return url

    async def health_check(self) -> dict[str, Any]:
        """Check backend health without raising."""
        try:
            details = await self._call("probe", self._probe)
        except StorageUnavailableError as e:
            return {"status": "unhealthy", "backend": self.name, "error": e.error_code}
        return {"status": "healthy", "backend": self.name, **details}
