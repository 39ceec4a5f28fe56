"""
Trading engine interface.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from src.core.models.orders import OpenOrder
from src.core.models.results import CloseResult, EngineState, OpenResult, TickResult


class ITradingEngine(ABC):
    """Abstract interface the transport layer consumes."""

    @abstractmethod
    def get_state(self) -> EngineState:
        """Read-only view of portfolio, trades, prices and performance."""
        pass

    @abstractmethod
    def open_position(self, order: OpenOrder, now: datetime | None = None) -> OpenResult:
        """Open a position, or skip it when funds are insufficient."""
        pass

    @abstractmethod
    def close_position(
        self, position_id: str, close_price: Any, now: datetime | None = None
    ) -> CloseResult:
        """Close a position at a price."""
        pass

    @abstractmethod
    def apply_price_tick(
        self, prices: Mapping[str, Any], now: datetime | None = None
    ) -> TickResult:
        """Record prices, run the strategy, auto-close and record performance."""
        pass
