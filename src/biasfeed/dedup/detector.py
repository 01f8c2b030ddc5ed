"""Pairwise near-duplicate detection over stored news headings.

Every pair (i, j) with i < j is visited in ascending nested order. On a
match the older item is handed to a resolver, which purges it and reports
whether it left the working set. Removed items are tracked by index over an
immutable snapshot, so no element ever shifts position during the scan:

- a pair touching a removed index is never compared;
- once the outer item is removed, its inner loop stops.
"""

import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from biasfeed.data import StoredNewsItem
from biasfeed.similarity import similarity, similarity_upper_bound

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.8

Resolver = Callable[[StoredNewsItem, StoredNewsItem], Awaitable[bool]]
"""Called as ``resolve(keeper, loser)``; returns True if ``loser`` leaves the working set."""


@dataclass
class ScanResult:
    """Outcome of one pairwise scan."""

    survivors: list[StoredNewsItem] = field(default_factory=list)
    comparisons: int = 0
    matches: int = 0
    timed_out: bool = False


class DuplicateDetector:
    """Flag pairs of news items whose headings are near-identical.

    Args:
        threshold: Similarity a pair must strictly exceed to be a duplicate.
        length_prefilter: Skip the edit distance when the heading lengths
            alone rule out a match. Never changes the outcome.
        similarity_fn: Heading similarity function.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        *,
        length_prefilter: bool = True,
        similarity_fn: Callable[[str, str], float] = similarity,
    ) -> None:
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {threshold}")
        self._threshold = threshold
        self._length_prefilter = length_prefilter
        self._similarity = similarity_fn

    @property
    def threshold(self) -> float:
        return self._threshold

    def score(self, a: StoredNewsItem, b: StoredNewsItem) -> float:
        return self._similarity(a.heading, b.heading)

    def is_duplicate(self, a: StoredNewsItem, b: StoredNewsItem) -> bool:
        """True if the headings' similarity is strictly above the threshold."""
        return self._match_score(a, b) is not None

    def _match_score(self, a: StoredNewsItem, b: StoredNewsItem) -> float | None:
        if (
            self._length_prefilter
            and similarity_upper_bound(a.heading, b.heading) <= self._threshold
        ):
            return None
        score = self.score(a, b)
        return score if score > self._threshold else None

    def choose_loser(self, a: StoredNewsItem, b: StoredNewsItem) -> StoredNewsItem:
        """Pick the item to delete from a duplicate pair.

        The strictly older item loses. On equal timestamps ``b`` (the item
        met later in scan order) loses, so the earlier one is kept.
        """
        return a if _first_loses(a, b) else b

    async def scan(
        self,
        items: Sequence[StoredNewsItem],
        resolve: Resolver,
        *,
        deadline: float | None = None,
    ) -> ScanResult:
        """Scan all pairs, resolving each duplicate as soon as it is found.

        Args:
            items: Loaded corpus; not mutated.
            resolve: Awaited with ``(keeper, loser)`` for every match.
            deadline: Optional ``time.monotonic()`` value after which the scan
                stops before the next comparison.

        Returns:
            ScanResult with the items still in the working set.
        """
        result = ScanResult()
        removed: set[int] = set()
        n = len(items)

        for i in range(n):
            if result.timed_out:
                break
            if i in removed:
                continue
            for j in range(i + 1, n):
                if i in removed:
                    break
                if j in removed:
                    continue
                if deadline is not None and time.monotonic() >= deadline:
                    logger.warning(f"Deduplication deadline reached at pair ({i}, {j}) of {n}")
                    result.timed_out = True
                    break

                a, b = items[i], items[j]
                result.comparisons += 1
                score = self._match_score(a, b)
                if score is None:
                    continue

                result.matches += 1
                logger.info(f"Similarity between {a.source_url} and {b.source_url}: {score:.3f}")
                loser = self.choose_loser(a, b)
                if loser is b:
                    keeper, loser_index = a, j
                else:
                    keeper, loser_index = b, i

                if await resolve(keeper, loser):
                    removed.add(loser_index)

        result.survivors = [item for k, item in enumerate(items) if k not in removed]
        return result


def _first_loses(a: StoredNewsItem, b: StoredNewsItem) -> bool:
    return a.last_updated < b.last_updated
