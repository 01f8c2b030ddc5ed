"""Shared fixtures for biasfeed tests."""

from collections.abc import Callable
from typing import Any

import pytest

from biasfeed.data import NewsItem, StoredNewsItem
from biasfeed.storage.memory import MemoryBlobStore

GLOBAL_PREFIX = "news/global/"


def _payload(
    heading: str,
    url: str,
    last_updated: str = "2026-03-01T12:00:00Z",
    **extra: Any,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "heading": heading,
        "summary": f"Summary of {heading}",
        "source": {
            "url": url,
            "name": "Example News",
            "bias": "neutral",
            "biasExplanation": "Balanced sourcing",
        },
        "lastUpdated": last_updated,
        "modelUsed": "gpt-4o",
    }
    payload.update(extra)
    return payload


@pytest.fixture
def news_payload() -> Callable[..., dict[str, Any]]:
    """Factory for stored news item JSON."""
    return _payload


@pytest.fixture
def make_item() -> Callable[..., StoredNewsItem]:
    """Factory for StoredNewsItem with a synthetic handle."""

    def _make(
        heading: str,
        last_updated: str = "2026-03-01T12:00:00Z",
        *,
        url: str | None = None,
        handle: str | None = None,
    ) -> StoredNewsItem:
        url = url or f"https://example.com/{abs(hash(heading))}"
        item = NewsItem.model_validate(_payload(heading, url, last_updated))
        return StoredNewsItem(item=item, handle=handle if handle is not None else f"memory://{url}")

    return _make


@pytest.fixture
def store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def seed(store: MemoryBlobStore) -> Callable[..., str]:
    """Store a news item under the global prefix and return its handle."""

    def _seed(
        heading: str,
        last_updated: str = "2026-03-01T12:00:00Z",
        *,
        url: str | None = None,
        key: str | None = None,
    ) -> str:
        key = key or f"item-{len(store.pathnames):03d}"
        url = url or f"https://example.com/{key}"
        return store.put(f"{GLOBAL_PREFIX}{key}.json", _payload(heading, url, last_updated))

    return _seed
