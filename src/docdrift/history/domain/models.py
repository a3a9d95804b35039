"""Health history models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from docdrift.shared.domain.base_model import BaseDomainModel


@dataclass
class Snapshot(BaseDomainModel):
    """One point of health history. Appended, never rewritten."""

    timestamp: datetime
    score: int
    total_exports: int
    documented: int
    drift_count: int
    coverage_score: Optional[int] = None
    package: Optional[str] = None
    version: Optional[str] = None
    commit: Optional[str] = None


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DEGRADING = "degrading"

    @classmethod
    def from_delta(cls, delta: float) -> "TrendDirection":
        if delta > 0:
            return cls.IMPROVING
        if delta < 0:
            return cls.DEGRADING
        return cls.STABLE


@dataclass
class Trend(BaseDomainModel):
    current: int
    delta: int = 0
    direction: TrendDirection = TrendDirection.STABLE
    previous: Optional[int] = None


@dataclass
class ExtendedTrend(BaseDomainModel):
    """Trend over a window of snapshots."""

    trend: Trend
    samples: int
    min: int
    max: int
    average: float
    velocity: float
    sparkline: str = ""


@dataclass
class WeeklySummary(BaseDomainModel):
    week_start: date
    count: int
    average: float
    min: int
    max: int
    delta: Optional[float] = None


@dataclass
class RatchetResult(BaseDomainModel):
    effective_min: int
    watermark: Optional[int] = None
    watermark_date: Optional[datetime] = None


@dataclass
class PruneResult(BaseDomainModel):
    kept: int
    removed: int
    reasons: List[str] = field(default_factory=list)
