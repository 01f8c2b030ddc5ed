"""End-to-end tests for deduplication runs over a blob store."""

import asyncio
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from biasfeed.data import BlobObject
from biasfeed.dedup import Deduplicator, DuplicateDetector, Purger, encode_uri_component
from biasfeed.errors import BlobStoreError, CorpusLoadError, DedupInProgressError
from biasfeed.run_logger import RunLogger
from biasfeed.storage.local import LocalBlobStore
from biasfeed.storage.memory import MemoryBlobStore

Seed = Callable[..., str]


def _deduplicator(
    store: MemoryBlobStore,
    *,
    threshold: float = 0.8,
    dry_run: bool = False,
    run_logger: RunLogger | None = None,
) -> Deduplicator:
    return Deduplicator(
        store,
        DuplicateDetector(threshold=threshold),
        Purger(store, dry_run=dry_run),
        run_logger=run_logger,
    )


async def test_tesla_scenario_deletes_older_copy(store: MemoryBlobStore, seed: Seed) -> None:
    older = seed("Tesla Unveils Model Y", "2026-03-01T08:00:00Z")
    newer = seed("Tesla Unveils the Model Y", "2026-03-01T09:00:00Z")
    fed = seed("Fed Raises Interest Rates", "2026-03-01T07:00:00Z")

    report = await _deduplicator(store).run()

    assert report.deleted_count == 1
    assert report.loaded_count == 3
    assert report.purges[0].handle == older
    remaining = {b.handle for b in await store.list("news/global/")}
    assert remaining == {newer, fed}
    assert report.to_response() == {
        "message": "Deduplication complete.",
        "deletedCount": 1,
        "failedCount": 0,
        "timedOut": False,
    }


async def test_older_item_deleted_when_listed_last(store: MemoryBlobStore, seed: Seed) -> None:
    newer = seed("Tesla Unveils the Model Y", "2026-03-01T09:00:00Z")
    older = seed("Tesla Unveils Model Y", "2026-03-01T08:00:00Z")

    report = await _deduplicator(store).run()

    assert [p.handle for p in report.purges] == [older]
    assert [b.handle for b in await store.list("news/global/")] == [newer]


async def test_identical_timestamps_keep_first_listed(store: MemoryBlobStore, seed: Seed) -> None:
    first = seed("Tesla Unveils Model Y", "2026-03-01T08:00:00Z")
    second = seed("Tesla Unveils Model Y", "2026-03-01T08:00:00Z")

    report = await _deduplicator(store).run()

    assert report.deleted_count == 1
    assert report.purges[0].handle == second
    assert [b.handle for b in await store.list("news/global/")] == [first]


async def test_empty_corpus(store: MemoryBlobStore) -> None:
    report = await _deduplicator(store).run()
    assert report.deleted_count == 0
    assert report.loaded_count == 0
    assert report.to_response()["deletedCount"] == 0


async def test_all_dissimilar(store: MemoryBlobStore, seed: Seed) -> None:
    seed("Tesla Unveils Model Y")
    seed("Fed Raises Interest Rates")
    seed("Storm Batters Coastline")

    report = await _deduplicator(store).run()

    assert report.deleted_count == 0
    assert report.comparisons == 3
    assert report.surviving_count == 3


async def test_chain_leaves_only_most_recent(store: MemoryBlobStore, seed: Seed) -> None:
    seed("Tesla Unveils Model Y!", "2026-03-01T09:00:00Z")
    newest = seed("Tesla Unveils Model Y!!", "2026-03-01T10:00:00Z")
    seed("Tesla Unveils Model Y", "2026-03-01T08:00:00Z")

    report = await _deduplicator(store).run()

    assert report.deleted_count == 2
    assert [b.handle for b in await store.list("news/global/")] == [newest]
    assert [s.handle for s in report.surviving] == [newest]


async def test_second_run_is_idempotent(store: MemoryBlobStore, seed: Seed) -> None:
    seed("Tesla Unveils Model Y", "2026-03-01T08:00:00Z")
    seed("Tesla Unveils the Model Y", "2026-03-01T09:00:00Z")
    seed("Fed Raises Interest Rates", "2026-03-01T10:00:00Z")
    seed("Fed Raises Interest Rates Again", "2026-03-01T11:00:00Z")

    first = await _deduplicator(store).run()
    second = await _deduplicator(store).run()

    assert first.deleted_count == 2
    assert second.deleted_count == 0
    assert second.loaded_count == 2


async def test_corrupt_object_does_not_stop_run(store: MemoryBlobStore, seed: Seed) -> None:
    seed("Tesla Unveils Model Y", "2026-03-01T08:00:00Z")
    store.put("news/global/corrupt.json", b"\x00\x01 not json")
    newer = seed("Tesla Unveils the Model Y", "2026-03-01T09:00:00Z")

    report = await _deduplicator(store).run()

    assert report.loaded_count == 2
    assert report.deleted_count == 1
    remaining = {b.pathname for b in await store.list("news/global/")}
    assert "news/global/corrupt.json" in remaining
    assert newer in {b.handle for b in await store.list("news/global/")}


async def test_persona_copies_removed_with_loser(
    store: MemoryBlobStore, seed: Seed
) -> None:
    old_url = "https://example.com/tesla-old"
    new_url = "https://example.com/tesla-new"
    seed("Tesla Unveils Model Y", "2026-03-01T08:00:00Z", url=old_url)
    seed("Tesla Unveils the Model Y", "2026-03-01T09:00:00Z", url=new_url)
    store.put(f"news/personas/tech/{encode_uri_component(old_url)}.json", {})
    store.put(f"news/personas/tech/{encode_uri_component(new_url)}.json", {})

    report = await _deduplicator(store).run()

    assert report.deleted_count == 1
    assert len(report.purges[0].persona_handles) == 1
    personas = [b.pathname for b in await store.list("news/personas/")]
    assert personas == [f"news/personas/tech/{encode_uri_component(new_url)}.json"]


async def test_primary_delete_failure_is_reported_once(
    store: MemoryBlobStore, seed: Seed
) -> None:
    oldest = seed("Tesla Unveils Model Y", "2026-03-01T08:00:00Z")
    seed("Tesla Unveils Model Y!", "2026-03-01T09:00:00Z")
    newest = seed("Tesla Unveils Model Y!!", "2026-03-01T10:00:00Z")
    attempts: list[str] = []
    original_delete = store.delete

    async def delete(handle: str) -> None:
        attempts.append(handle)
        if handle == oldest:
            raise BlobStoreError("403 Forbidden")
        await original_delete(handle)

    store.delete = delete  # type: ignore[method-assign]

    report = await _deduplicator(store).run()

    assert attempts.count(oldest) == 1
    assert report.deleted_count == 1
    assert [f.handle for f in report.failures] == [oldest]
    assert report.to_response()["failedCount"] == 1
    remaining = {b.handle for b in await store.list("news/global/")}
    assert remaining == {oldest, newest}


async def test_dry_run_reports_without_deleting(store: MemoryBlobStore, seed: Seed) -> None:
    older = seed("Tesla Unveils Model Y", "2026-03-01T08:00:00Z")
    seed("Tesla Unveils the Model Y", "2026-03-01T09:00:00Z")

    report = await _deduplicator(store, dry_run=True).run()

    assert report.dry_run
    assert report.deleted_count == 0
    assert report.would_delete_count == 1
    assert report.purges[0].handle == older
    assert len(await store.list("news/global/")) == 2
    body = report.to_response()
    assert body["message"] == "Dry run complete."
    assert body["dryRun"] is True
    assert body["wouldDeleteCount"] == 1


async def test_threshold_is_strict(store: MemoryBlobStore, seed: Seed) -> None:
    seed("abcd", "2026-03-01T08:00:00Z")
    seed("abcx", "2026-03-01T09:00:00Z")

    at_threshold = await _deduplicator(store, threshold=0.75).run()
    below_threshold = await _deduplicator(store, threshold=0.74).run()

    assert at_threshold.deleted_count == 0
    assert below_threshold.deleted_count == 1


async def test_total_load_failure_raises() -> None:
    class UnreachableStore(MemoryBlobStore):
        async def list(self, prefix: str) -> list[BlobObject]:
            raise BlobStoreError("connection refused")

    with pytest.raises(CorpusLoadError):
        await _deduplicator(UnreachableStore()).run()


async def test_concurrent_run_is_rejected(store: MemoryBlobStore, seed: Seed) -> None:
    seed("Tesla Unveils Model Y")
    listing_started = asyncio.Event()
    release = asyncio.Event()
    original_list = store.list

    async def slow_list(prefix: str) -> list[BlobObject]:
        listing_started.set()
        await release.wait()
        return await original_list(prefix)

    store.list = slow_list  # type: ignore[method-assign]

    first = asyncio.create_task(_deduplicator(store).run())
    await listing_started.wait()

    with pytest.raises(DedupInProgressError):
        await _deduplicator(store).run()

    release.set()
    report = await first
    assert report.loaded_count == 1

    # The namespace is free again once the first run finishes
    assert (await _deduplicator(store).run()).loaded_count == 1


async def test_lock_released_after_failure() -> None:
    class UnreachableStore(MemoryBlobStore):
        async def list(self, prefix: str) -> list[BlobObject]:
            raise BlobStoreError("connection refused")

    with pytest.raises(CorpusLoadError):
        await _deduplicator(UnreachableStore()).run()
    report = await _deduplicator(MemoryBlobStore()).run()
    assert report.loaded_count == 0


async def test_deadline_stops_scan(store: MemoryBlobStore, seed: Seed) -> None:
    seed("Tesla Unveils Model Y", "2026-03-01T08:00:00Z")
    seed("Tesla Unveils the Model Y", "2026-03-01T09:00:00Z")
    deduplicator = Deduplicator(
        store,
        DuplicateDetector(),
        Purger(store),
        max_duration_seconds=1e-9,
    )

    report = await deduplicator.run()

    assert report.timed_out
    assert report.deleted_count == 0
    assert report.message == "Deduplication stopped at deadline."
    assert report.to_response()["timedOut"] is True


async def test_run_log_written(
    store: MemoryBlobStore, seed: Seed, tmp_path: Path
) -> None:
    seed("Tesla Unveils Model Y", "2026-03-01T08:00:00Z")
    seed("Tesla Unveils the Model Y", "2026-03-01T09:00:00Z")
    run_logger = RunLogger(log_dir=tmp_path)

    await _deduplicator(store, run_logger=run_logger).run()

    assert run_logger.last_log_path is not None
    data: dict[str, Any] = json.loads(run_logger.last_log_path.read_text())
    assert data["namespace"] == "news/global/"
    assert data["settings"]["threshold"] == 0.8
    assert [s["name"] for s in data["stages"]] == ["load", "scan"]
    assert [p["outcome"] for p in data["purges"]] == ["deleted"]
    assert data["counts"]["deleted_count"] == 1
    assert data["counts"]["loaded_count"] == 2


async def test_undecodable_file_does_not_stop_run(
    tmp_path: Path, news_payload: Callable[..., dict[str, Any]]
) -> None:
    folder = tmp_path / "news" / "global"
    folder.mkdir(parents=True)
    (folder / "0-binary.json").write_bytes(b"\x80\x81{")
    (folder / "1-old.json").write_text(
        json.dumps(
            news_payload("Tesla Unveils Model Y", "https://example.com/old", "2026-03-01T08:00:00Z")
        )
    )
    (folder / "2-new.json").write_text(
        json.dumps(
            news_payload(
                "Tesla Unveils the Model Y", "https://example.com/new", "2026-03-01T09:00:00Z"
            )
        )
    )
    store = LocalBlobStore(tmp_path)

    report = await Deduplicator(store, DuplicateDetector(), Purger(store)).run()

    assert report.loaded_count == 2
    assert report.deleted_count == 1
    assert sorted(p.name for p in folder.iterdir()) == ["0-binary.json", "2-new.json"]
