"""Blob store backends."""

from biasfeed.storage.base import BlobStore
from biasfeed.storage.local import LocalBlobStore
from biasfeed.storage.memory import MemoryBlobStore
from biasfeed.storage.vercel import VercelBlobStore

__all__ = [
    "BlobStore",
    "LocalBlobStore",
    "MemoryBlobStore",
    "VercelBlobStore",
]
