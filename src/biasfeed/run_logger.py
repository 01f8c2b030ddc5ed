"""Per-run JSON records of deduplication passes."""

from __future__ import annotations

import dataclasses
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from biasfeed.dedup.purge import PurgeRecord

PurgeOutcome = Literal["deleted", "would_delete", "failed"]


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()


class StageTiming(BaseModel):
    """One timed step of a run (corpus load, pairwise scan)."""

    name: str
    component: str
    details: dict[str, Any] = Field(default_factory=dict)
    finished_at: str = Field(default_factory=_now)
    seconds: float = 0.0


class PurgeEntry(BaseModel):
    """What happened to one losing item."""

    handle: str
    heading: str
    source_url: str
    outcome: PurgeOutcome
    persona_copies: list[str] = Field(default_factory=list)
    persona_failures: int = 0
    error: str | None = None

    @classmethod
    def from_record(cls, record: PurgeRecord) -> PurgeEntry:
        if record.failed:
            outcome: PurgeOutcome = "failed"
        elif record.dry_run:
            outcome = "would_delete"
        else:
            outcome = "deleted"
        return cls(
            handle=record.handle,
            heading=record.heading,
            source_url=record.source_url,
            outcome=outcome,
            persona_copies=list(record.persona_handles),
            persona_failures=record.persona_failures,
            error=record.error,
        )


class DedupRunRecord(BaseModel):
    """Everything written for a single deduplication run."""

    run_id: str
    namespace: str
    settings: dict[str, Any]
    started_at: str
    completed_at: str | None = None
    stages: list[StageTiming] = Field(default_factory=list)
    purges: list[PurgeEntry] = Field(default_factory=list)
    counts: dict[str, Any] | None = None
    error: str | None = None


def _jsonable(value: Any) -> Any:
    """Convert dataclasses, models, datetimes and paths into plain JSON values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _jsonable(dataclasses.asdict(value))
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, list | tuple | set):
        return [_jsonable(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    return value


class RunLogger:
    """Collects one run's stages and purges and writes them as a JSON file.

    A disabled logger accepts every call and writes nothing.

    Args:
        log_dir: Where run files go. Created on first write.
        enabled: Turn recording on or off.
    """

    def __init__(self, log_dir: Path, *, enabled: bool = True) -> None:
        self._log_dir = log_dir
        self._enabled = enabled
        self._current: DedupRunRecord | None = None
        self._last_log_path: Path | None = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def last_log_path(self) -> Path | None:
        """File written by the most recent finished run."""
        return self._last_log_path

    def start_run(self, namespace: str, settings: dict[str, Any]) -> None:
        """Begin recording a run over ``namespace`` with the given settings."""
        if not self._enabled:
            return
        self._current = DedupRunRecord(
            run_id=uuid.uuid4().hex,
            namespace=namespace,
            settings=_jsonable(settings),
            started_at=_now(),
        )

    def log_stage(
        self,
        name: str,
        component: str,
        details: dict[str, Any],
        seconds: float,
    ) -> None:
        if not self._enabled or self._current is None:
            return
        self._current.stages.append(
            StageTiming(
                name=name,
                component=component,
                details=_jsonable(details),
                seconds=round(seconds, 4),
            )
        )

    def log_purge(self, record: PurgeRecord) -> None:
        if not self._enabled or self._current is None:
            return
        self._current.purges.append(PurgeEntry.from_record(record))

    def finish_run(
        self,
        counts: dict[str, Any] | None = None,
        *,
        error: str | None = None,
    ) -> Path | None:
        """Close the current run and write it out.

        Args:
            counts: Final counters of the run.
            error: Reason the run was abandoned, if it was.

        Returns:
            The written file, or None when disabled or no run was started.
        """
        if not self._enabled or self._current is None:
            return None

        record = self._current
        record.completed_at = _now()
        record.counts = _jsonable(counts)
        record.error = error

        self._log_dir.mkdir(parents=True, exist_ok=True)
        # dedupe_2026-03-01T12-00-00_1a2b3c4d.json
        stamp = record.started_at.split(".")[0].split("+")[0].replace(":", "-")
        path = self._log_dir / f"dedupe_{stamp}_{record.run_id[:8]}.json"
        path.write_text(record.model_dump_json(indent=2))

        self._last_log_path = path
        self._current = None
        return path
