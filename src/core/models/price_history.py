"""
Per-asset price history.
"""

import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.core.constants import MAX_PRICE_HISTORY


@dataclass(frozen=True)
class PricePoint:
    """A price observed for an asset at a point in time."""

    timestamp: datetime
    price: Decimal

    def to_dict(self) -> dict:
        """Convert price point to dictionary."""
        return {"timestamp": self.timestamp.isoformat(), "price": float(self.price)}


class PriceHistoryTracker:
    """Bounded per-asset price series.

    Prices are stored as given; positivity is checked by the caller.
    """

    def __init__(self, capacity: int = MAX_PRICE_HISTORY) -> None:
        """Initialize an empty tracker.

        Args:
            capacity: Maximum points kept per asset, oldest evicted first
        """
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._series: dict[str, deque[PricePoint]] = {}
        self._lock = threading.RLock()

    def record(self, asset: str, price: Decimal, now: datetime) -> PricePoint:
        """Append a price point for an asset."""
        point = PricePoint(timestamp=now, price=price)
        with self._lock:
            series = self._series.get(asset)
            if series is None:
                series = self._series[asset] = deque(maxlen=self.capacity)
            series.append(point)
        return point

    def history(self, asset: str) -> tuple[PricePoint, ...]:
        """Get the recorded series for an asset, oldest first."""
        with self._lock:
            return tuple(self._series.get(asset, ()))

    def latest_prices(self) -> dict[str, Decimal]:
        """Get the most recent price of every tracked asset."""
        with self._lock:
            return {asset: series[-1].price for asset, series in self._series.items() if series}

    def assets(self) -> list[str]:
        """Tracked assets in first-seen order."""
        with self._lock:
            return list(self._series)

    def snapshot(self) -> dict[str, tuple[PricePoint, ...]]:
        """Copy every series."""
        with self._lock:
            return {asset: tuple(series) for asset, series in self._series.items()}
