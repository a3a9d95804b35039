"""
Health history: snapshots appended to a JSON Lines file.

The file is append-only during normal operation; only prune_history
rewrites it, atomically and under the same advisory lock writers take.
"""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import structlog

from docdrift.health.domain.models import DocumentationHealth
from docdrift.history.application.sparkline import render_sparkline
from docdrift.history.domain.models import (
    ExtendedTrend,
    PruneResult,
    RatchetResult,
    Snapshot,
    Trend,
    TrendDirection,
    WeeklySummary,
)
from docdrift.shared.domain.exceptions import HistoryCorruptedError
from docdrift.shared.infrastructure.atomic_io import atomic_write_text, file_lock

logger = structlog.get_logger(__name__)


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def compute_snapshot(
    health: DocumentationHealth,
    *,
    drift_count: Optional[int] = None,
    package: Optional[str] = None,
    version: Optional[str] = None,
    commit: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Snapshot:
    return Snapshot(
        timestamp=now or datetime.now(timezone.utc),
        score=health.score,
        total_exports=health.completeness.total,
        documented=health.completeness.documented,
        drift_count=health.accuracy.issues if drift_count is None else drift_count,
        coverage_score=health.completeness.coverage_score,
        package=package,
        version=version,
        commit=commit,
    )


def compute_aggregate_snapshot(
    aggregate: Any,
    *,
    package: Optional[str] = None,
    commit: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Snapshot:
    """Snapshot of a batch aggregate (anything with the BatchAggregate fields)."""
    return Snapshot(
        timestamp=now or datetime.now(timezone.utc),
        score=aggregate.health,
        total_exports=aggregate.total_exports,
        documented=aggregate.documented,
        drift_count=aggregate.drift_count,
        coverage_score=aggregate.coverage_score,
        package=package,
        commit=commit,
    )


class HistoryTracker:
    """Reads and writes one history file."""

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def save_snapshot(self, snapshot: Snapshot) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(snapshot.to_json(), ensure_ascii=False)
        with file_lock(self._path):
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        logger.debug("history_snapshot_saved", path=str(self._path), score=snapshot.score, package=snapshot.package)

    def load_snapshots(self, package: Optional[str] = None) -> List[Snapshot]:
        """
        All snapshots, oldest first.

        Args:
            package: Only snapshots recorded for this package

        Raises:
            HistoryCorruptedError: If a line is not a valid snapshot
        """
        if not self._path.exists():
            return []

        snapshots = []
        with open(self._path, encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    snapshot = Snapshot.from_json(json.loads(line))
                except (ValueError, TypeError, KeyError, AttributeError) as e:
                    raise HistoryCorruptedError(
                        f"Invalid snapshot on line {line_num} of {self._path}: {e}",
                        context={"path": str(self._path), "line": line_num},
                    ) from e
                if package is None or snapshot.package == package:
                    snapshots.append(snapshot)

        snapshots.sort(key=lambda s: _utc(s.timestamp))
        return snapshots

    def prune_history(
        self,
        max_entries: Optional[int] = None,
        max_age_days: Optional[int] = None,
        *,
        now: Optional[datetime] = None,
    ) -> PruneResult:
        """Drop snapshots older than *max_age_days*, then all but the newest *max_entries*."""
        with file_lock(self._path):
            snapshots = self.load_snapshots()
            kept = snapshots
            reasons = []
            if max_age_days is not None:
                cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=max_age_days)
                kept = [s for s in kept if _utc(s.timestamp) >= cutoff]
                if len(kept) < len(snapshots):
                    reasons.append(f"older than {max_age_days} days")
            if max_entries is not None and len(kept) > max_entries:
                kept = kept[len(kept) - max_entries :]
                reasons.append(f"more than {max_entries} entries")

            removed = len(snapshots) - len(kept)
            if removed:
                content = "".join(json.dumps(s.to_json(), ensure_ascii=False) + "\n" for s in kept)
                atomic_write_text(self._path, content)
                logger.info("history_pruned", path=str(self._path), kept=len(kept), removed=removed)
        return PruneResult(kept=len(kept), removed=removed, reasons=reasons)


def get_trend(snapshots: Sequence[Snapshot], window: int = 2) -> Optional[Trend]:
    """
    Compare the newest snapshot with the one *window* - 1 positions earlier.

    Returns None without snapshots; a single snapshot is a stable trend with
    no previous score.
    """
    if not snapshots:
        return None
    current = snapshots[-1].score
    if len(snapshots) < 2:
        return Trend(current=current)
    previous = snapshots[-min(max(window, 2), len(snapshots))].score
    delta = current - previous
    return Trend(current=current, delta=delta, direction=TrendDirection.from_delta(delta), previous=previous)


def get_extended_trend(snapshots: Sequence[Snapshot], window: int = 10) -> Optional[ExtendedTrend]:
    """Range, mean, velocity (points per snapshot) and sparkline of the last *window* snapshots."""
    recent = list(snapshots)[-window:] if window > 0 else list(snapshots)
    if not recent:
        return None
    scores = [s.score for s in recent]
    velocity = (scores[-1] - scores[0]) / (len(scores) - 1) if len(scores) > 1 else 0.0
    return ExtendedTrend(
        trend=get_trend(recent, window=len(recent)),
        samples=len(scores),
        min=min(scores),
        max=max(scores),
        average=round(sum(scores) / len(scores), 1),
        velocity=round(velocity, 2),
        sparkline=render_sparkline(scores),
    )


def generate_weekly_summaries(snapshots: Sequence[Snapshot]) -> List[WeeklySummary]:
    """Snapshots bucketed by ISO week (Monday start), oldest week first."""
    weeks: Dict[Any, List[int]] = {}
    for snapshot in snapshots:
        day = _utc(snapshot.timestamp).date()
        weeks.setdefault(day - timedelta(days=day.weekday()), []).append(snapshot.score)

    summaries: List[WeeklySummary] = []
    for week_start in sorted(weeks):
        scores = weeks[week_start]
        average = round(sum(scores) / len(scores), 1)
        summaries.append(
            WeeklySummary(
                week_start=week_start,
                count=len(scores),
                average=average,
                min=min(scores),
                max=max(scores),
                delta=round(average - summaries[-1].average, 1) if summaries else None,
            )
        )
    return summaries


def compute_ratchet_min(config_min: int, snapshots: Sequence[Snapshot]) -> RatchetResult:
    """Effective minimum score: the configured minimum, raised to the best score ever recorded."""
    best: Optional[Snapshot] = None
    for snapshot in snapshots:
        if best is None or snapshot.score > best.score:
            best = snapshot
    if best is None or best.score <= 0:
        return RatchetResult(effective_min=config_min)
    return RatchetResult(
        effective_min=max(config_min, best.score),
        watermark=best.score,
        watermark_date=best.timestamp,
    )


def format_delta(delta: Optional[float]) -> str:
    """``+3``, ``-2.5``, ``±0``."""
    if delta is None:
        return ""
    value = round(float(delta), 1)
    if value.is_integer():
        value = int(value)
    if value > 0:
        return f"+{value}"
    if value < 0:
        return f"{value}"
    return "±0"
