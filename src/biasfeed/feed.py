"""Read path for the card feed: every cached news item, newest first."""

from biasfeed.data import NewsItem
from biasfeed.dedup.loader import DEFAULT_GLOBAL_PREFIX, load_corpus
from biasfeed.storage.base import BlobStore


async def fetch_cached_news(
    store: BlobStore,
    prefix: str = DEFAULT_GLOBAL_PREFIX,
) -> list[NewsItem]:
    """Load all cached news items, most recently updated first.

    Unreadable objects are skipped the same way a deduplication load skips
    them.

    Raises:
        CorpusLoadError: If nothing under ``prefix`` could be loaded.
    """
    stored = await load_corpus(store, prefix)
    items = [s.item for s in stored]
    return sorted(items, key=lambda item: item.last_updated, reverse=True)
