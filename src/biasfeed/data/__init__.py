"""Data models for biasfeed."""

from biasfeed.data.models import BiasTag, BlobObject, NewsItem, NewsSource, StoredNewsItem

__all__ = [
    "BiasTag",
    "BlobObject",
    "NewsItem",
    "NewsSource",
    "StoredNewsItem",
]
