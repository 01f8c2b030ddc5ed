"""Load the stored news corpus together with each item's storage handle."""

import logging

from pydantic import ValidationError

from biasfeed.data import NewsItem, StoredNewsItem
from biasfeed.errors import BlobStoreError, CorpusLoadError
from biasfeed.storage.base import BlobStore

logger = logging.getLogger(__name__)

DEFAULT_GLOBAL_PREFIX = "news/global/"


async def load_corpus(
    store: BlobStore,
    prefix: str = DEFAULT_GLOBAL_PREFIX,
) -> list[StoredNewsItem]:
    """Fetch and parse every news item under ``prefix``.

    Items come back in listing order. An object that cannot be fetched or
    parsed is logged and skipped; the rest of the corpus still loads.

    Args:
        store: Blob store to read from.
        prefix: Global news namespace.

    Returns:
        Loaded items, each carrying the handle it was fetched from.

    Raises:
        CorpusLoadError: If listing fails, or objects were listed but none
            could be loaded.
    """
    try:
        blobs = await store.list(prefix)
    except BlobStoreError as e:
        raise CorpusLoadError(f"Could not list {prefix}: {e}") from e

    items: list[StoredNewsItem] = []
    for blob in blobs:
        try:
            raw = await store.get(blob.handle)
            item = NewsItem.model_validate(raw)
        except BlobStoreError as e:
            logger.warning(f"Failed to fetch blob: {blob.handle}: {e}")
            continue
        except ValidationError as e:
            logger.warning(
                f"Skipping blob {blob.handle}: not a news item ({e.error_count()} errors)"
            )
            continue
        items.append(StoredNewsItem(item=item, handle=blob.handle, pathname=blob.pathname))

    if blobs and not items:
        raise CorpusLoadError(f"None of the {len(blobs)} objects under {prefix} could be loaded")

    logger.info(f"Loaded {len(items)} of {len(blobs)} stored news items from {prefix}")
    return items
