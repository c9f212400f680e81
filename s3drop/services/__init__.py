"""Client-side services for s3drop."""
from .api_client import HTTPAPIClient
from .transport import PresignedUploadTransport

__all__ = [
    "HTTPAPIClient",
    "PresignedUploadTransport",
]
