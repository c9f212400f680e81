"""
s3drop - Direct-to-storage image uploads through presigned URLs.

Usage:
    from s3drop import UploadOrchestrator, SelectedFile

    async with UploadOrchestrator("http://localhost:8000") as uploader:
        uploader.on_notify(lambda n: print(n.level, n.message))
        entries = await uploader.select([SelectedFile.from_path(path)])
        await uploader.wait()

        # Delete once uploaded
        await uploader.remove(entries[0].id)

The presign/delete API lives in ``s3drop.server``.
"""
__version__ = "0.1.0"

from .models import (
    DeleteResult,
    EntryStatus,
    FileEntry,
    Notification,
    PresignedUpload,
    Rejection,
    RejectionCode,
    SelectedFile,
    UploadConfig,
    UploadResult,
)
from .orchestrator import UploadOrchestrator, AcceptFilter, FileCollector
from .services import HTTPAPIClient, PresignedUploadTransport

__all__ = [
    # Main
    "UploadOrchestrator",
    "AcceptFilter",
    "FileCollector",
    # Models
    "DeleteResult",
    "EntryStatus",
    "FileEntry",
    "Notification",
    "PresignedUpload",
    "Rejection",
    "RejectionCode",
    "SelectedFile",
    "UploadConfig",
    "UploadResult",
    # Services
    "HTTPAPIClient",
    "PresignedUploadTransport",
]
