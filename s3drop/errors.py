"""Exceptions raised by s3drop clients, server storage and CLI."""
from typing import Optional


class S3DropError(Exception):
    """Base class for s3drop errors."""


class APIError(S3DropError):
    """An API call failed: network error, non-2xx status or malformed body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PresignError(APIError):
    """Presign request failed."""


class DeleteError(APIError):
    """Delete request failed."""


class TransportError(S3DropError):
    """Binary PUT to the presigned URL could not be sent."""


class StorageError(S3DropError):
    """Object storage backend call failed (server side)."""


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""
