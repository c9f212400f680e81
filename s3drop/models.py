"""
Models for s3drop.

Immutable dataclasses; entries are replaced, never mutated in place.
"""
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterator, Optional, Tuple
from enum import Enum
import mimetypes
import uuid


MB = 1024 * 1024


class EntryStatus(Enum):
    """Upload lifecycle of a single entry."""
    QUEUED = "queued"
    REQUESTING = "requesting"
    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    UPLOAD_FAILED = "upload_failed"


class RejectionCode(Enum):
    TOO_MANY_FILES = "too-many-files"
    FILE_TOO_LARGE = "file-too-large"
    FILE_INVALID_TYPE = "file-invalid-type"


@dataclass(frozen=True)
class SelectedFile:
    """A file picked by the user: payload source plus name, size and MIME type."""
    name: str
    size: int
    content_type: str = ""
    path: Optional[Path] = None
    data: Optional[bytes] = field(default=None, repr=False)

    @classmethod
    def from_path(cls, path: Path) -> "SelectedFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            size=path.stat().st_size,
            content_type=content_type or "",
            path=path,
        )

    @classmethod
    def from_bytes(cls, name: str, data: bytes, content_type: str = "") -> "SelectedFile":
        if not content_type:
            content_type = mimetypes.guess_type(name)[0] or ""
        return cls(name=name, size=len(data), content_type=content_type, data=data)

    def iter_chunks(self, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
        """Yield the raw payload in chunks of at most ``chunk_size`` bytes."""
        if self.data is not None:
            for offset in range(0, len(self.data), chunk_size):
                yield self.data[offset:offset + chunk_size]
            return
        if self.path is None:
            raise ValueError(f"{self.name} has no payload")
        with open(self.path, "rb") as fh:
            while True:
                chunk = fh.read(chunk_size)
                if not chunk:
                    break
                yield chunk


@dataclass(frozen=True)
class FileEntry:
    """Tracked state of one accepted file."""
    file: SelectedFile
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    key: Optional[str] = None
    status: EntryStatus = EntryStatus.QUEUED
    progress: int = 0
    deleting: bool = False
    error: Optional[str] = None

    @property
    def filename(self) -> str:
        return self.file.name

    @property
    def in_flight(self) -> bool:
        return self.status in (EntryStatus.QUEUED, EntryStatus.REQUESTING, EntryStatus.UPLOADING)

    @property
    def can_delete(self) -> bool:
        """Delete control is enabled only once a key exists and no request is pending."""
        return bool(self.key) and not self.deleting and not self.in_flight

    def with_changes(self, **changes) -> "FileEntry":
        return replace(self, **changes)


@dataclass(frozen=True)
class Rejection:
    """A file refused by the accept filter."""
    filename: str
    code: RejectionCode
    message: str


@dataclass(frozen=True)
class Notification:
    """Transient user-facing message."""
    level: str  # success, error
    message: str

    @classmethod
    def success(cls, message: str) -> "Notification":
        return cls("success", message)

    @classmethod
    def error(cls, message: str) -> "Notification":
        return cls("error", message)


@dataclass(frozen=True)
class PresignedUpload:
    presigned_url: str
    key: str


@dataclass(frozen=True)
class UploadResult:
    """Immutable result of one upload sequence."""
    entry_id: str
    filename: str
    status: EntryStatus = EntryStatus.UPLOADED
    key: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == EntryStatus.UPLOADED

    @classmethod
    def ok(cls, entry_id: str, filename: str, key: str):
        return cls(entry_id=entry_id, filename=filename, key=key)

    @classmethod
    def fail(cls, entry_id: str, filename: str, error: str, key: Optional[str] = None):
        return cls(
            entry_id=entry_id,
            filename=filename,
            status=EntryStatus.UPLOAD_FAILED,
            key=key,
            error=error
        )


@dataclass(frozen=True)
class DeleteResult:
    """Immutable result of one delete sequence."""
    key: Optional[str]
    success: bool
    removed: int = 0
    message: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, key: str, removed: int, message: Optional[str] = None):
        return cls(key=key, success=True, removed=removed, message=message)

    @classmethod
    def fail(cls, key: Optional[str], error: str):
        return cls(key=key, success=False, error=error)


def _format_size(size: int) -> str:
    if size % MB == 0:
        return f"{size // MB}MB"
    return f"{size / MB:.1f}MB"


@dataclass(frozen=True)
class UploadConfig:
    """Immutable acceptance policy and endpoint configuration."""
    max_files: int = 5
    max_file_size: int = 10 * MB
    accept: Tuple[str, ...] = ("image/*",)
    presign_endpoint: str = "/api/s3/upload"
    delete_endpoint: str = "/api/s3/delete"
    chunk_size: int = 64 * 1024
    request_timeout: Optional[float] = None  # None keeps the transport default

    @property
    def max_file_size_label(self) -> str:
        return _format_size(self.max_file_size)

    def accepts_type(self, content_type: str) -> bool:
        """Match a MIME type against the allowlist (``type/*`` wildcards allowed)."""
        if not content_type:
            return False
        content_type = content_type.split(";", 1)[0].strip().lower()
        for pattern in self.accept:
            pattern = pattern.lower()
            if pattern.endswith("/*"):
                if content_type.startswith(pattern[:-1]):
                    return True
            elif content_type == pattern:
                return True
        return False
