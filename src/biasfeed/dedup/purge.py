"""Delete a losing news item and its per-persona cached copies."""

import logging
from dataclasses import dataclass, field
from urllib.parse import quote

from biasfeed.data import StoredNewsItem
from biasfeed.errors import BlobStoreError
from biasfeed.storage.base import BlobStore

logger = logging.getLogger(__name__)

DEFAULT_PERSONA_PREFIX = "news/personas/"

# Characters encodeURIComponent leaves as-is, besides alphanumerics
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(value: str) -> str:
    """Percent-encode ``value`` the way JavaScript's encodeURIComponent does.

    Persona cache paths embed source URLs in this form.
    """
    return quote(value, safe=_URI_COMPONENT_SAFE)


@dataclass
class PurgeRecord:
    """Result of purging one news item."""

    handle: str
    source_url: str
    heading: str
    deleted: bool = False
    dry_run: bool = False
    persona_handles: list[str] = field(default_factory=list)
    persona_failures: int = 0
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class Purger:
    """Remove a stored news item and every persona copy of its source URL.

    The primary object is deleted first. Persona cleanup runs only after the
    primary delete succeeded, and its failures are logged without failing
    the purge.

    Args:
        store: Blob store holding both namespaces.
        persona_prefix: Namespace of per-persona cached copies.
        dry_run: Report what would be deleted without deleting anything.
    """

    def __init__(
        self,
        store: BlobStore,
        *,
        persona_prefix: str = DEFAULT_PERSONA_PREFIX,
        dry_run: bool = False,
    ) -> None:
        self._store = store
        self._persona_prefix = persona_prefix
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    async def purge(self, item: StoredNewsItem) -> PurgeRecord:
        """Delete ``item`` at its recorded handle, then its persona copies.

        Args:
            item: The losing item of a duplicate pair.

        Returns:
            PurgeRecord; ``error`` is set when the primary object was not
            deleted.
        """
        record = PurgeRecord(
            handle=item.handle,
            source_url=item.source_url,
            heading=item.heading,
            dry_run=self._dry_run,
        )

        if not item.handle:
            logger.error(f"No blob URL found for item: {item.source_url}")
            record.error = "missing storage handle"
            return record

        if self._dry_run:
            logger.info(f"[dry run] Would delete blob: {item.handle}")
            try:
                record.persona_handles = await self._persona_copies(item)
            except BlobStoreError as e:
                logger.warning(f"Error listing persona entries for {item.source_url}: {e}")
                record.persona_failures += 1
            return record

        try:
            await self._store.delete(item.handle)
        except BlobStoreError as e:
            logger.error(f"Failed to delete blob for {item.source_url}: {e}")
            record.error = str(e)
            return record

        record.deleted = True
        logger.info(f"Deleted blob: {item.handle}")

        try:
            persona_handles = await self._persona_copies(item)
        except BlobStoreError as e:
            logger.warning(f"Error cleaning up persona entries for {item.source_url}: {e}")
            record.persona_failures += 1
            return record

        for handle in persona_handles:
            try:
                await self._store.delete(handle)
            except BlobStoreError as e:
                logger.warning(f"Error cleaning up persona entry {handle}: {e}")
                record.persona_failures += 1
                continue
            record.persona_handles.append(handle)
            logger.info(f"Deleted related persona blob: {handle}")

        return record

    async def _persona_copies(self, item: StoredNewsItem) -> list[str]:
        """Handles of persona objects whose pathname embeds the item's encoded URL."""
        if not item.source_url:
            return []
        encoded = encode_uri_component(item.source_url)
        blobs = await self._store.list(self._persona_prefix)
        return [blob.handle for blob in blobs if encoded in blob.pathname]
