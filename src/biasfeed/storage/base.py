from typing import Any, Protocol

from biasfeed.data import BlobObject


class BlobStore(Protocol):
    """Interface for a key-addressed blob store."""

    async def list(self, prefix: str) -> list[BlobObject]:
        """List every object whose pathname starts with ``prefix``.

        Args:
            prefix: Namespace prefix, e.g. "news/global/".

        Returns:
            All matching objects; implementations page internally.

        Raises:
            BlobStoreError: If the listing fails.
        """
        ...

    async def get(self, handle: str) -> Any:
        """Fetch and decode the JSON content stored at ``handle``.

        Raises:
            BlobStoreError: If the object cannot be fetched or decoded.
        """
        ...

    async def delete(self, handle: str) -> None:
        """Delete the object at ``handle``.

        Raises:
            BlobStoreError: If the delete fails.
        """
        ...
