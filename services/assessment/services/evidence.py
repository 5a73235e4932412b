"""
Evidence File Validation
========================

Checks uploaded evidence before it reaches the object store.

The content type is sniffed from the file signature rather than trusted
from the client. Office Open XML files are ZIP containers, so a ZIP is
accepted only when the filename says .docx or .xlsx; legacy Office files
share the OLE signature and are told apart the same way.

Version: 0.1.0
"""

import re
import uuid
from dataclasses import dataclass
from pathlib import PurePosixPath

from shared.exceptions import ValidationError


DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

ALLOWED_CONTENT_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "application/pdf",
        "application/msword",
        DOCX,
        "application/vnd.ms-excel",
        XLSX,
        "text/plain",
    }
)

_SIGNATURES: list[tuple[bytes, str]] = [
    (b"%PDF-", "application/pdf"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
]

_ZIP_MAGIC = b"PK\x03\x04"
_OLE_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

_ZIP_BY_EXTENSION = {".docx": DOCX, ".xlsx": XLSX}
_OLE_BY_EXTENSION = {".doc": "application/msword", ".xls": "application/vnd.ms-excel"}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class EvidenceFile:
    """An uploaded evidence file held in memory."""

    filename: str
    content: bytes
    declared_content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return PurePosixPath(self.filename.lower()).suffix


def sniff_content_type(evidence: EvidenceFile) -> str:
    """Detect the content type from leading bytes and the file extension."""
    head = evidence.content[:512]

    for magic, content_type in _SIGNATURES:
        if head.startswith(magic):
            return content_type

    if head.startswith(_ZIP_MAGIC):
        return _ZIP_BY_EXTENSION.get(evidence.extension, "application/zip")

    if head.startswith(_OLE_MAGIC):
        return _OLE_BY_EXTENSION.get(evidence.extension, "application/x-ole-storage")

    if b"\x00" not in head:
        try:
            head.decode("utf-8")
        except UnicodeDecodeError:
            # A multi-byte character may be cut at the 512 byte boundary
            try:
                head[:-3].decode("utf-8")
            except UnicodeDecodeError:
                return "application/octet-stream"
        return "text/plain"

    return "application/octet-stream"


def validate_evidence(evidence: EvidenceFile, max_size_bytes: int) -> str:
    """
    Validate size and type of an evidence file.

    Returns:
        The detected content type

    Raises:
        ValidationError: empty, oversized, or disallowed file
    """
    if evidence.size == 0:
        raise ValidationError("Evidence file is empty", details={"filename": evidence.filename})

    if evidence.size > max_size_bytes:
        raise ValidationError(
            "Evidence file exceeds the maximum size",
            details={"size": evidence.size, "max_size": max_size_bytes},
        )

    content_type = sniff_content_type(evidence)
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(
            "Evidence file type is not allowed",
            details={
                "filename": evidence.filename,
                "detected_type": content_type,
                "allowed_types": sorted(ALLOWED_CONTENT_TYPES),
            },
        )

    return content_type


def safe_filename(filename: str) -> str:
    """Strip directories and unsafe characters from a client filename."""
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned or "evidence"


def evidence_object_name(control_id: uuid.UUID, filename: str) -> str:
    """Object name for a new upload, relative to the organization prefix."""
    return f"evidence/{control_id}/{uuid.uuid4()}_{safe_filename(filename)}"
