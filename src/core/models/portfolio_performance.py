"""
Portfolio performance tracking.

This module turns portfolio valuations into a bounded performance series under
one of two retention policies:

- ROLLING: every sample is appended to a fixed-size window
- DAILY: one sample per UTC calendar day, the latest sample of a day replacing
  earlier ones, keeping only days within `capacity` days of the newest sample
"""

import threading
from collections import deque
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

from loguru import logger

from src.core.constants import MAX_PERFORMANCE_DAYS, MAX_PERFORMANCE_HISTORY
from src.core.enums import PerformanceRetention
from src.core.types.financial import calculate_performance_percent, round_percentage


@dataclass(frozen=True)
class PerformanceSample:
    """Portfolio performance relative to the initial balance."""

    timestamp: datetime
    performance_pct: Decimal
    total_value: Decimal

    @property
    def day(self) -> date:
        """UTC calendar day of the sample."""
        if self.timestamp.tzinfo is None:
            return self.timestamp.date()
        return self.timestamp.astimezone(UTC).date()

    def to_dict(self) -> dict:
        """Convert sample to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "date": self.day.isoformat(),
            "performance_pct": float(round_percentage(self.performance_pct)),
            "total_value": float(self.total_value),
        }


class PerformanceTracker:
    """Bounded performance history."""

    def __init__(
        self,
        retention: PerformanceRetention = PerformanceRetention.ROLLING,
        capacity: int | None = None,
    ) -> None:
        """Initialize with a retention policy.

        Args:
            retention: Active retention policy
            capacity: Samples (ROLLING) or days (DAILY) to keep; defaults per policy
        """
        self.retention = PerformanceRetention(retention)
        if capacity is None:
            capacity = MAX_PERFORMANCE_DAYS if self.retention.is_daily else MAX_PERFORMANCE_HISTORY
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._samples: deque[PerformanceSample] = deque(maxlen=capacity)
        self._lock = threading.RLock()

    def record_sample(
        self, total_value: Decimal, initial_balance: Decimal, now: datetime
    ) -> PerformanceSample:
        """Compute performance for a valuation and store it.

        Args:
            total_value: Current portfolio value
            initial_balance: Starting balance of the portfolio
            now: Sample time

        Returns:
            The stored sample
        """
        sample = PerformanceSample(
            timestamp=now,
            performance_pct=calculate_performance_percent(total_value, initial_balance),
            total_value=total_value,
        )

        with self._lock:
            if self.retention.is_daily:
                self._upsert_daily(sample)
            else:
                self._samples.append(sample)

        logger.debug(
            f"Performance sample: {round_percentage(sample.performance_pct)}% "
            f"(value={total_value}, policy={self.retention.value})"
        )
        return sample

    def _upsert_daily(self, sample: PerformanceSample) -> None:
        """Replace the sample of the same day in place, or append a new day."""
        for index, existing in enumerate(self._samples):
            if existing.day == sample.day:
                self._samples[index] = sample
                break
        else:
            self._samples.append(sample)
        self._drop_expired_days()

    def _drop_expired_days(self) -> None:
        """Drop samples older than ``capacity`` days before the newest day."""
        newest = max(existing.day for existing in self._samples)
        cutoff = newest - timedelta(days=self.capacity)
        if any(existing.day <= cutoff for existing in self._samples):
            self._samples = deque(
                (existing for existing in self._samples if existing.day > cutoff),
                maxlen=self.capacity,
            )

    def samples(self) -> tuple[PerformanceSample, ...]:
        """Stored samples, oldest first."""
        with self._lock:
            return tuple(self._samples)

    def latest(self) -> PerformanceSample | None:
        """Most recently stored sample."""
        with self._lock:
            return self._samples[-1] if self._samples else None
