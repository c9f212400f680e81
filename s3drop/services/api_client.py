"""HTTP adapter for the presign and delete endpoints."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..errors import DeleteError, PresignError
from ..models import PresignedUpload, UploadConfig

logger = logging.getLogger(__name__)


def _error_detail(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except Exception:
        return response.text
    if isinstance(body, dict) and "error" in body:
        return body["error"]
    return body


class HTTPAPIClient:
    """
    HTTP client adapter for API calls.

    Implements IAPIClient protocol. Requests are sent once; failures are
    raised as PresignError / DeleteError and never retried.
    """

    def __init__(
        self,
        base_url: str,
        config: Optional[UploadConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._base_url = base_url
        self._config = config or UploadConfig()
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        if self._client is None:
            kwargs: Dict[str, Any] = {"base_url": self._base_url}
            if self._config.request_timeout is not None:
                kwargs["timeout"] = self._config.request_timeout
            self._client = httpx.AsyncClient(**kwargs)
        return self

    async def __aexit__(self, *args):
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("HTTPAPIClient not initialized. Use 'async with' context.")
        return self._client

    async def _send(self, method: str, endpoint: str, json: Dict, error_cls) -> httpx.Response:
        client = self._require_client()
        try:
            response = await client.request(method, endpoint, json=json)
        except httpx.HTTPError as exc:
            raise error_cls(f"{method} {endpoint} failed: {exc}") from exc

        if not response.is_success:
            raise error_cls(
                f"API error {response.status_code} on {method} {endpoint}: {_error_detail(response)}",
                status_code=response.status_code,
            )
        return response

    async def presign(self, filename: str, content_type: str, size: int) -> PresignedUpload:
        endpoint = self._config.presign_endpoint
        response = await self._send(
            "POST",
            endpoint,
            {"filename": filename, "contentType": content_type, "size": size},
            PresignError,
        )
        try:
            body = response.json()
            presigned_url = body["presignedUrl"]
            key = body["key"]
        except (ValueError, KeyError, TypeError) as exc:
            raise PresignError(
                f"Malformed presign response: {response.text[:200]}",
                status_code=response.status_code,
            ) from exc

        if not isinstance(presigned_url, str) or not presigned_url:
            raise PresignError("Presign response has no URL", status_code=response.status_code)
        if not isinstance(key, str) or not key:
            raise PresignError("Presign response has no key", status_code=response.status_code)

        logger.debug(f"Presigned {filename} -> {key}")
        return PresignedUpload(presigned_url=presigned_url, key=key)

    async def delete(self, key: str) -> str:
        response = await self._send(
            "DELETE",
            self._config.delete_endpoint,
            {"key": key},
            DeleteError,
        )
        try:
            body = response.json()
        except ValueError:
            return ""
        if isinstance(body, dict):
            return str(body.get("message", ""))
        return ""
