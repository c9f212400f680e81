"""
S3-compatible storage adapter.

Generates presigned PUT URLs and deletes objects. The boto3 client is passed
in, so tests and alternative backends can substitute it.
"""
import logging
import uuid
from pathlib import PurePosixPath
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import StorageError
from .config import ServerSettings

logger = logging.getLogger(__name__)


def build_s3_client(settings: ServerSettings) -> Any:
    """Create a boto3 S3 client for the configured endpoint."""
    return boto3.client(
        "s3",
        endpoint_url=settings.endpoint_url,
        aws_access_key_id=settings.access_key,
        aws_secret_access_key=settings.secret_key,
        region_name=settings.region,
        config=Config(
            signature_version="s3v4",
            s3={"addressing_style": "path" if settings.force_path_style else "virtual"},
        ),
    )


def generate_object_key(filename: str) -> str:
    """
    Unique object key for an upload.

    Pattern: {uuid4}-{basename}
    """
    name = PurePosixPath(filename.replace("\\", "/")).name or "file"
    return f"{uuid.uuid4()}-{name}"


class S3Storage:
    """Presign and delete operations against one bucket."""

    def __init__(self, client: Any, bucket: str, presign_expiration: int = 360):
        self._client = client
        self._bucket = bucket
        self._presign_expiration = presign_expiration

    @classmethod
    def from_settings(cls, settings: ServerSettings) -> "S3Storage":
        return cls(build_s3_client(settings), settings.bucket, settings.presign_expiration)

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def presign_expiration(self) -> int:
        return self._presign_expiration

    def generate_presigned_upload_url(self, key: str, content_type: str, size: int) -> str:
        """
        Presigned PUT URL for a direct upload.

        Content-Type and Content-Length are part of the signature, so the
        client must send exactly those values.

        Raises:
            StorageError: when the URL cannot be generated
        """
        try:
            url = self._client.generate_presigned_url(
                ClientMethod="put_object",
                Params={
                    "Bucket": self._bucket,
                    "Key": key,
                    "ContentType": content_type,
                    "ContentLength": size,
                },
                ExpiresIn=self._presign_expiration,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to generate presigned URL for {key}: {e}")
            raise StorageError(f"Failed to generate presigned URL: {e}") from e

        logger.debug(f"Generated presigned URL for {key}")
        return url

    def delete_object(self, key: str) -> None:
        """
        Delete an object. Missing objects count as deleted.

        Raises:
            StorageError: on any other backend failure
        """
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in ("404", "NoSuchKey"):
                logger.debug(f"Object {key} not found (already deleted)")
                return
            logger.error(f"Failed to delete object {key}: {e}")
            raise StorageError(f"Failed to delete {key}: {e}") from e
        except BotoCoreError as e:
            logger.error(f"Failed to delete object {key}: {e}")
            raise StorageError(f"Failed to delete {key}: {e}") from e

        logger.info(f"Deleted object {key} from {self._bucket}")
