"""Exception types raised across biasfeed."""


class BiasFeedError(Exception):
    """Base class for biasfeed errors."""


class BlobStoreError(BiasFeedError):
    """A blob store operation (list, get, delete) failed."""


class BlobNotFoundError(BlobStoreError):
    """The addressed blob does not exist."""


class CorpusLoadError(BiasFeedError):
    """The stored corpus could not be loaded at all."""


class DedupInProgressError(BiasFeedError):
    """Another deduplication run holds the namespace."""
