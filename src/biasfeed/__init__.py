"""biasfeed: bias-aware news feed storage and near-duplicate cleanup."""

from biasfeed.classify import (
    BudgetedClassifier,
    CallBudget,
    Classification,
    Classifier,
    fallback_classification,
)
from biasfeed.config import BiasFeedConfig, create_from_config, load_config
from biasfeed.data import BiasTag, BlobObject, NewsItem, NewsSource, StoredNewsItem
from biasfeed.dedup import (
    DedupReport,
    Deduplicator,
    DuplicateDetector,
    Purger,
    PurgeRecord,
    ScanResult,
    encode_uri_component,
    load_corpus,
)
from biasfeed.errors import (
    BiasFeedError,
    BlobNotFoundError,
    BlobStoreError,
    CorpusLoadError,
    DedupInProgressError,
)
from biasfeed.feed import fetch_cached_news
from biasfeed.run_logger import RunLogger
from biasfeed.similarity import edit_distance, similarity, similarity_upper_bound
from biasfeed.storage import BlobStore, LocalBlobStore, MemoryBlobStore, VercelBlobStore

__all__ = [
    # Models
    "BiasTag",
    "BlobObject",
    "Classification",
    "NewsItem",
    "NewsSource",
    "StoredNewsItem",
    # Functions
    "edit_distance",
    "encode_uri_component",
    "fallback_classification",
    "fetch_cached_news",
    "load_corpus",
    "similarity",
    "similarity_upper_bound",
    # Protocols
    "BlobStore",
    "Classifier",
    # Stores
    "LocalBlobStore",
    "MemoryBlobStore",
    "VercelBlobStore",
    # Deduplication
    "DedupReport",
    "Deduplicator",
    "DuplicateDetector",
    "PurgeRecord",
    "Purger",
    "ScanResult",
    # Classification budget
    "BudgetedClassifier",
    "CallBudget",
    # Errors
    "BiasFeedError",
    "BlobNotFoundError",
    "BlobStoreError",
    "CorpusLoadError",
    "DedupInProgressError",
    # Logging
    "RunLogger",
    # Config
    "BiasFeedConfig",
    "create_from_config",
    "load_config",
]
