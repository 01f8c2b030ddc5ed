"""Directory-backed blob store for offline runs."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from biasfeed.data import BlobObject
from biasfeed.errors import BlobNotFoundError, BlobStoreError

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """Blob store that maps pathnames to files under a root directory.

    The handle of an object is its absolute file path; the pathname is the
    POSIX path relative to ``root``.

    Args:
        root: Directory holding the objects. Created if missing.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).resolve()
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    async def list(self, prefix: str) -> list[BlobObject]:
        blobs: list[BlobObject] = []
        try:
            paths = self._files()
        except OSError as e:
            raise BlobStoreError(f"Could not list {self._root}: {e}") from e

        for path in paths:
            pathname = path.relative_to(self._root).as_posix()
            if not pathname.startswith(prefix):
                continue
            try:
                stat = path.stat()
            except FileNotFoundError:
                logger.debug(f"Skipping {path}: removed while listing")
                continue
            except OSError as e:
                raise BlobStoreError(f"Could not stat {path}: {e}") from e
            blobs.append(
                BlobObject(
                    handle=str(path),
                    pathname=pathname,
                    size=stat.st_size,
                    uploaded_at=datetime.fromtimestamp(stat.st_mtime, tz=UTC).isoformat(),
                )
            )
        return blobs

    async def get(self, handle: str) -> Any:
        path = self._resolve(handle)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise BlobNotFoundError(f"No blob at {handle}") from e
        except OSError as e:
            raise BlobStoreError(f"Could not read {handle}: {e}") from e
        except UnicodeDecodeError as e:
            raise BlobStoreError(f"Blob at {handle} is not UTF-8 text: {e}") from e
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise BlobStoreError(f"Blob at {handle} is not valid JSON: {e}") from e

    async def delete(self, handle: str) -> None:
        path = self._resolve(handle)
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise BlobNotFoundError(f"No blob at {handle}") from e
        except OSError as e:
            raise BlobStoreError(f"Could not delete {handle}: {e}") from e
        logger.debug(f"Removed file {path}")

    def _files(self) -> list[Path]:
        return sorted(p for p in self._root.rglob("*") if p.is_file())

    def _resolve(self, handle: str) -> Path:
        path = Path(handle).resolve()
        if not path.is_relative_to(self._root):
            raise BlobStoreError(f"Handle outside store root: {handle}")
        return path
