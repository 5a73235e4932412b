"""
Disabled Evidence Store
=======================

Stand-in used when no evidence backend is configured. Every operation
fails fast with StorageNotConfiguredError instead of probing an external
service, so callers can tell "not configured" apart from "configured but
currently failing".

Version: 0.1.0
"""

import uuid
from typing import Any, BinaryIO, NoReturn

from shared.exceptions import StorageNotConfiguredError
from shared.storage.provider import EvidenceStore


class DisabledEvidenceStore(EvidenceStore):
    """Evidence store with no backend behind it."""

    def __init__(self, reason: str = "no storage provider configured") -> None:
        super().__init__()
        self.reason = reason

    @property
    def name(self) -> str:
        return "disabled"

    @property
    def enabled(self) -> bool:
        return False

    def _fail(self) -> NoReturn:
        raise StorageNotConfiguredError("Evidence storage is not configured")

    def _put(self, key: str, stream: BinaryIO, content_type: str | None) -> None:
        self._fail()

    def _remove(self, key: str) -> None:
        self._fail()

    def _sign(self, key: str, ttl_minutes: int) -> str:
        self._fail()

    def _probe(self) -> dict[str, Any]:
        self._fail()

    async def upload(
        self,
        organization_id: uuid.UUID | str,
        object_name: str,
        content: bytes | BinaryIO,
        content_type: str | None = None,
    ) -> str:
        self._fail()

    async def delete(self, object_name: str) -> None:
        self._fail()

    async def get_signed_url(self, object_name: str, ttl_minutes: int) -> str:
        self._fail()

    async def health_check(self) -> dict[str, Any]:
        return {"status": "disabled", "backend": self.name, "reason": self.reason}
