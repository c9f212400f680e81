"""
Protocols (Interfaces) for Dependency Inversion.

The orchestrator only talks to these; httpx-backed implementations live in
``s3drop.services``.
"""
from typing import Callable, Optional, Protocol, runtime_checkable

from .models import PresignedUpload, SelectedFile


ProgressCallback = Callable[[int, int], None]


@runtime_checkable
class IAPIClient(Protocol):
    """Interface for the presign and delete endpoints."""

    async def presign(self, filename: str, content_type: str, size: int) -> PresignedUpload:
        """Request a presigned upload URL and storage key."""
        ...

    async def delete(self, key: str) -> str:
        """Delete the object stored under ``key``; returns the server message."""
        ...


@runtime_checkable
class IUploadTransport(Protocol):
    """Interface for the binary PUT to a presigned URL."""

    async def put(
        self,
        url: str,
        file: SelectedFile,
        progress_callback: Optional[ProgressCallback] = None
    ) -> int:
        """Send the raw payload; returns the HTTP status code."""
        ...
