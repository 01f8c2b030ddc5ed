"""Near-duplicate detection and purge for stored news items."""

from biasfeed.dedup.detector import DEFAULT_THRESHOLD, DuplicateDetector, ScanResult
from biasfeed.dedup.loader import DEFAULT_GLOBAL_PREFIX, load_corpus
from biasfeed.dedup.purge import DEFAULT_PERSONA_PREFIX, Purger, PurgeRecord, encode_uri_component
from biasfeed.dedup.service import DedupReport, Deduplicator

__all__ = [
    "DEFAULT_GLOBAL_PREFIX",
    "DEFAULT_PERSONA_PREFIX",
    "DEFAULT_THRESHOLD",
    "DedupReport",
    "Deduplicator",
    "DuplicateDetector",
    "PurgeRecord",
    "Purger",
    "ScanResult",
    "encode_uri_component",
    "load_corpus",
]
