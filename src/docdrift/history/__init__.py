"""History module - health snapshots and trends."""

from docdrift.history.application.sparkline import render_sparkline
from docdrift.history.application.tracker import (
    HistoryTracker,
    compute_ratchet_min,
    compute_snapshot,
    get_extended_trend,
    get_trend,
)
from docdrift.history.domain.models import Snapshot, Trend, TrendDirection

__all__ = [
    "HistoryTracker",
    "Snapshot",
    "Trend",
    "TrendDirection",
    "compute_ratchet_min",
    "compute_snapshot",
    "get_extended_trend",
    "get_trend",
    "render_sparkline",
]
