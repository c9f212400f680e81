"""
Presign/delete API for direct-to-storage uploads.
"""
from .app import create_app, create_app_from_env
from .config import ServerSettings
from .storage import S3Storage, build_s3_client

__all__ = [
    "create_app",
    "create_app_from_env",
    "ServerSettings",
    "S3Storage",
    "build_s3_client",
]
