"""Vercel Blob store client over its HTTP API."""

import logging
import os
from typing import Any

import httpx

from biasfeed.data import BlobObject
from biasfeed.errors import BlobNotFoundError, BlobStoreError

VERCEL_BLOB_API_URL = "https://blob.vercel-storage.com"
BLOB_API_VERSION = "11"
LIST_PAGE_LIMIT = 1000

logger = logging.getLogger(__name__)


class VercelBlobStore:
    """Blob store backed by Vercel Blob.

    The handle of an object is its public blob URL, exactly as returned by
    the list endpoint; it is what the delete endpoint expects.

    Args:
        token: Read/write token (defaults to BLOB_READ_WRITE_TOKEN env var).
        api_url: Base URL of the blob API.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        *,
        token: str | None = None,
        api_url: str = VERCEL_BLOB_API_URL,
        timeout: float = 30.0,
    ) -> None:
        self._token = token or os.environ.get("BLOB_READ_WRITE_TOKEN")
        if not self._token:
            raise ValueError(
                "Blob token required. Pass token or set BLOB_READ_WRITE_TOKEN env var."
            )
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "x-api-version": BLOB_API_VERSION,
        }

    async def list(self, prefix: str) -> list[BlobObject]:
        """List all blobs under ``prefix``, following the pagination cursor."""
        blobs: list[BlobObject] = []
        cursor: str | None = None

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            while True:
                params: dict[str, str | int] = {"prefix": prefix, "limit": LIST_PAGE_LIMIT}
                if cursor:
                    params["cursor"] = cursor
                try:
                    response = await client.get(
                        self._api_url, params=params, headers=self._headers()
                    )
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, dict):
                        raise BlobStoreError(
                            f"Listing blobs under {prefix!r} returned {type(data).__name__}, "
                            "expected an object"
                        )
                    blobs.extend(_parse_blob(raw) for raw in data.get("blobs", []))
                    cursor = data.get("cursor")
                    has_more = bool(data.get("hasMore"))
                except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
                    raise BlobStoreError(f"Listing blobs under {prefix!r} failed: {e}") from e

                if not has_more or not cursor:
                    break

        return blobs

    async def get(self, handle: str) -> Any:
        """Fetch the JSON content of a blob from its public URL."""
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.get(handle)
            except httpx.HTTPError as e:
                raise BlobStoreError(f"Fetching blob {handle} failed: {e}") from e

        if response.status_code == 404:
            raise BlobNotFoundError(f"No blob at {handle}")
        if response.status_code >= 400:
            raise BlobStoreError(
                f"Failed to fetch blob: {handle}, status: {response.status_code}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise BlobStoreError(f"Blob at {handle} is not valid JSON: {e}") from e

    async def delete(self, handle: str) -> None:
        """Delete a blob by its URL."""
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.post(
                    f"{self._api_url}/delete",
                    json={"urls": [handle]},
                    headers=self._headers(),
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise BlobStoreError(f"Deleting blob {handle} failed: {e}") from e
        logger.debug(f"Deleted blob: {handle}")


def _parse_blob(raw: dict[str, Any]) -> BlobObject:
    """Convert a list-endpoint blob entry to a BlobObject."""
    size = raw.get("size")
    return BlobObject(
        handle=str(raw["url"]),
        pathname=str(raw.get("pathname", "")),
        size=int(size) if isinstance(size, int) else None,
        uploaded_at=raw.get("uploadedAt"),
    )
