"""
Transport Service - Single Responsibility: send file bytes to a presigned URL.

The payload is streamed in chunks so progress can be reported per chunk.
"""
from __future__ import annotations

import inspect
import logging
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from ..errors import TransportError
from ..models import SelectedFile, UploadConfig
from ..protocols import ProgressCallback

logger = logging.getLogger(__name__)


class PresignedUploadTransport:
    """
    Binary PUT of a file to a presigned URL.

    Implements IUploadTransport protocol.
    """

    def __init__(
        self,
        config: Optional[UploadConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._config = config or UploadConfig()
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        if self._client is None:
            kwargs: Dict[str, Any] = {}
            if self._config.request_timeout is not None:
                kwargs["timeout"] = self._config.request_timeout
            self._client = httpx.AsyncClient(**kwargs)
        return self

    async def __aexit__(self, *args):
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _stream(
        self,
        file: SelectedFile,
        progress_callback: Optional[ProgressCallback],
    ) -> AsyncIterator[bytes]:
        sent = 0
        total = file.size
        for chunk in file.iter_chunks(self._config.chunk_size):
            yield chunk
            sent += len(chunk)
            if progress_callback:
                result = progress_callback(sent, total)
                if inspect.isawaitable(result):
                    await result

    async def put(
        self,
        url: str,
        file: SelectedFile,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> int:
        """
        PUT the raw payload of ``file`` to ``url``.

        Args:
            url: Presigned URL
            file: File to send
            progress_callback: Called with (bytes_sent, total_bytes) after each chunk

        Returns:
            HTTP status code of the storage response

        Raises:
            TransportError: when the request could not be completed
        """
        if not self._client:
            raise RuntimeError("PresignedUploadTransport not initialized. Use 'async with' context.")

        headers = {
            "Content-Type": file.content_type,
            "Content-Length": str(file.size),
        }
        try:
            response = await self._client.put(
                url,
                content=self._stream(file, progress_callback),
                headers=headers,
            )
        except (httpx.HTTPError, OSError) as exc:
            raise TransportError(f"Upload of {file.name} failed: {exc}") from exc

        logger.debug(f"PUT {file.name} -> {response.status_code}")
        return response.status_code
