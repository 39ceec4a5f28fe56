"""
Strategy interface definition.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal

from src.core.models.orders import OpenOrder


class IStrategy(ABC):
    """Abstract interface for strategies driven by price ticks.

    A strategy only proposes orders; the engine decides whether they open.
    """

    @abstractmethod
    def on_tick(
        self,
        prices: Mapping[str, Decimal],
        cash: Decimal,
        open_positions: int,
        now: datetime,
    ) -> OpenOrder | None:
        """Called for each accepted price tick.

        Args:
            prices: Validated prices of the tick
            cash: Current free cash
            open_positions: Number of currently open positions
            now: Tick time

        Returns:
            An order to open, or None
        """
        pass
