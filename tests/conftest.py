"""Shared fixtures for s3drop tests."""
from unittest.mock import AsyncMock

import pytest

from s3drop.models import MB, PresignedUpload, SelectedFile


@pytest.fixture
def api_client():
    client = AsyncMock()
    client.presign.return_value = PresignedUpload(presigned_url="https://x", key="abc123")
    client.delete.return_value = "File deleted successfully"
    return client


@pytest.fixture
def png_file():
    return SelectedFile.from_bytes("photo.png", b"\x89PNG" + b"\x00" * (2 * MB - 4), "image/png")


@pytest.fixture
def make_png():
    def _make(name: str, size: int = 1024, content_type: str = "image/png") -> SelectedFile:
        return SelectedFile(name=name, size=size, content_type=content_type, data=b"\x00" * size)
    return _make
