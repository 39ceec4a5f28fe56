"""
Market data interfaces.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

import pandas as pd


class IPriceSource(ABC):
    """Abstract interface for live price sources."""

    @abstractmethod
    def fetch_prices(self) -> dict[str, Decimal]:
        """Fetch the latest positive price of every tracked asset."""
        pass


class IMetricsCalculator(ABC):
    """Abstract interface for performance metrics calculation."""

    @abstractmethod
    def calculate_returns(self, performance_history: pd.DataFrame) -> dict[str, float]:
        """Calculate return metrics."""
        pass

    @abstractmethod
    def calculate_trade_metrics(self, trades: pd.DataFrame) -> dict[str, float]:
        """Calculate trade statistics."""
        pass
