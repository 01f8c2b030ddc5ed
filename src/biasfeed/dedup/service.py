"""Deduplication run: load the corpus, scan it, purge the losers."""

import logging
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from biasfeed.data import StoredNewsItem
from biasfeed.dedup.detector import DuplicateDetector
from biasfeed.dedup.loader import DEFAULT_GLOBAL_PREFIX, load_corpus
from biasfeed.dedup.purge import Purger, PurgeRecord
from biasfeed.errors import CorpusLoadError, DedupInProgressError
from biasfeed.run_logger import RunLogger
from biasfeed.storage.base import BlobStore

logger = logging.getLogger(__name__)

_namespace_locks: dict[str, threading.Lock] = {}
_registry_lock = threading.Lock()


@contextmanager
def _single_flight(namespace: str) -> Iterator[None]:
    """Hold the namespace for one run; a second caller is rejected, not queued."""
    with _registry_lock:
        lock = _namespace_locks.setdefault(namespace, threading.Lock())
    if not lock.acquire(blocking=False):
        raise DedupInProgressError(f"Deduplication already running for {namespace}")
    try:
        yield
    finally:
        lock.release()


@dataclass
class DedupReport:
    """Outcome of one deduplication run."""

    loaded_count: int = 0
    comparisons: int = 0
    matches: int = 0
    purges: list[PurgeRecord] = field(default_factory=list)
    surviving: list[StoredNewsItem] = field(default_factory=list)
    timed_out: bool = False
    dry_run: bool = False

    @property
    def deleted_count(self) -> int:
        """Primary objects actually deleted."""
        return sum(1 for p in self.purges if p.deleted)

    @property
    def would_delete_count(self) -> int:
        """Primary objects a dry run would have deleted."""
        return sum(1 for p in self.purges if p.dry_run and not p.failed)

    @property
    def failures(self) -> list[PurgeRecord]:
        return [p for p in self.purges if p.failed]

    @property
    def surviving_count(self) -> int:
        return len(self.surviving)

    @property
    def message(self) -> str:
        if self.dry_run:
            return "Dry run complete."
        if self.timed_out:
            return "Deduplication stopped at deadline."
        return "Deduplication complete."

    def summary(self) -> dict[str, Any]:
        return {
            "loaded_count": self.loaded_count,
            "comparisons": self.comparisons,
            "matches": self.matches,
            "deleted_count": self.deleted_count,
            "would_delete_count": self.would_delete_count,
            "failed_count": len(self.failures),
            "surviving_count": self.surviving_count,
            "timed_out": self.timed_out,
            "dry_run": self.dry_run,
        }

    def to_response(self) -> dict[str, Any]:
        """JSON body returned by the invocation surfaces."""
        body: dict[str, Any] = {
            "message": self.message,
            "deletedCount": self.deleted_count,
            "failedCount": len(self.failures),
            "timedOut": self.timed_out,
        }
        if self.dry_run:
            body["dryRun"] = True
            body["wouldDeleteCount"] = self.would_delete_count
        return body


class Deduplicator:
    """Remove near-duplicate news items from the global namespace.

    Flow:
    1. Load every stored item with its handle
    2. Scan all pairs; on each match purge the older item immediately
    3. Report counts and per-item purge results

    Only one run per global namespace may be in flight at a time.

    Args:
        store: Blob store holding the corpus.
        detector: Pairwise duplicate detector.
        purger: Deletes losing items and their persona copies.
        global_prefix: Namespace of canonical news items.
        max_duration_seconds: Optional overall deadline for a run.
        run_logger: Optional RunLogger for JSON run records.
    """

    def __init__(
        self,
        store: BlobStore,
        detector: DuplicateDetector,
        purger: Purger,
        *,
        global_prefix: str = DEFAULT_GLOBAL_PREFIX,
        max_duration_seconds: float | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._store = store
        self._detector = detector
        self._purger = purger
        self._global_prefix = global_prefix
        self._max_duration = max_duration_seconds
        self._run_logger = run_logger

    async def run(self) -> DedupReport:
        """Execute one full deduplication pass.

        Returns:
            DedupReport for the run.

        Raises:
            DedupInProgressError: If another run holds the namespace.
            CorpusLoadError: If the corpus could not be loaded at all.
        """
        with _single_flight(self._global_prefix):
            return await self._run()

    async def _run(self) -> DedupReport:
        started = time.monotonic()
        deadline = started + self._max_duration if self._max_duration else None
        report = DedupReport(dry_run=self._purger.dry_run)

        if self._run_logger:
            self._run_logger.start_run(
                self._global_prefix,
                {
                    "threshold": self._detector.threshold,
                    "dry_run": self._purger.dry_run,
                    "max_duration_seconds": self._max_duration,
                },
            )

        t0 = time.monotonic()
        try:
            items = await load_corpus(self._store, self._global_prefix)
        except CorpusLoadError as e:
            if self._run_logger:
                self._run_logger.finish_run(error=str(e))
            raise
        report.loaded_count = len(items)
        if self._run_logger:
            self._run_logger.log_stage(
                "load",
                "load_corpus",
                {"item_count": len(items)},
                time.monotonic() - t0,
            )

        async def resolve(keeper: StoredNewsItem, loser: StoredNewsItem) -> bool:
            record = await self._purger.purge(loser)
            report.purges.append(record)
            if self._run_logger:
                self._run_logger.log_purge(record)
            if not record.failed:
                logger.debug(f"Kept {keeper.handle} over {loser.handle}")
                return True
            if not loser.handle:
                # Nothing to delete; keep the pair's items in play
                return False
            # Primary delete failed: withdraw the item so it is not processed twice
            return True

        t0 = time.monotonic()
        scan = await self._detector.scan(items, resolve, deadline=deadline)
        report.comparisons = scan.comparisons
        report.matches = scan.matches
        report.surviving = scan.survivors
        report.timed_out = scan.timed_out
        if self._run_logger:
            self._run_logger.log_stage(
                "scan",
                type(self._detector).__name__,
                {
                    "comparisons": scan.comparisons,
                    "matches": scan.matches,
                    "timed_out": scan.timed_out,
                },
                time.monotonic() - t0,
            )
            self._run_logger.finish_run(report.summary())

        logger.info(
            f"{report.message} Deleted {report.deleted_count}, "
            f"failed {len(report.failures)}, {report.loaded_count} items loaded "
            f"in {time.monotonic() - started:.2f}s"
        )
        return report
