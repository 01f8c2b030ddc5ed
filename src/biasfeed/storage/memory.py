"""In-process blob store."""

import json
from typing import Any

from biasfeed.data import BlobObject
from biasfeed.errors import BlobNotFoundError, BlobStoreError


class MemoryBlobStore:
    """Blob store kept in a dict, keyed by pathname.

    Handles look like ``memory://<pathname>`` so they are distinct from
    pathnames, mirroring hosted stores where the handle is a full URL.
    Content is kept as raw bytes and decoded on ``get``.
    """

    scheme = "memory://"

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}

    def put(self, pathname: str, content: Any) -> str:
        """Store ``content`` at ``pathname`` and return its handle.

        ``bytes`` and ``str`` are stored verbatim, anything else is JSON
        encoded.
        """
        if isinstance(content, bytes):
            data = content
        elif isinstance(content, str):
            data = content.encode()
        else:
            data = json.dumps(content).encode()
        self._blobs[pathname] = data
        return self.scheme + pathname

    @property
    def pathnames(self) -> list[str]:
        return sorted(self._blobs)

    async def list(self, prefix: str) -> list[BlobObject]:
        return [
            BlobObject(handle=self.scheme + pathname, pathname=pathname, size=len(data))
            for pathname, data in sorted(self._blobs.items())
            if pathname.startswith(prefix)
        ]

    async def get(self, handle: str) -> Any:
        data = self._blobs.get(self._pathname(handle))
        if data is None:
            raise BlobNotFoundError(f"No blob at {handle}")
        try:
            return json.loads(data)
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError
            raise BlobStoreError(f"Blob at {handle} is not valid JSON: {e}") from e

    async def delete(self, handle: str) -> None:
        pathname = self._pathname(handle)
        if pathname not in self._blobs:
            raise BlobNotFoundError(f"No blob at {handle}")
        del self._blobs[pathname]

    def _pathname(self, handle: str) -> str:
        if not handle.startswith(self.scheme):
            raise BlobNotFoundError(f"Not a memory handle: {handle}")
        return handle[len(self.scheme) :]
