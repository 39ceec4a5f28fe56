"""
Randomized position generator.

Drives the autonomous-trading mode: on a tick it may propose one position with
random direction, leverage, targets and asset.
"""

import random
from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal

from loguru import logger

from src.core.config import StrategySettings
from src.core.constants import STRATEGY_MIN_TARGET_PCT
from src.core.enums import PositionType
from src.core.exceptions.trading import ConfigurationError
from src.core.interfaces.strategy import IStrategy
from src.core.models.orders import OpenOrder
from src.core.types.financial import ZERO, round_amount, to_decimal


class RandomStrategy(IStrategy):
    """Random strategy bounded by configured ranges.

    Policy only: it never touches the ledger, so it can be replaced or
    disabled without affecting position accounting.
    """

    def __init__(self, settings: StrategySettings, rng: random.Random | None = None) -> None:
        """Initialize from strategy settings.

        Args:
            settings: Ranges, cap and trigger probability
            rng: Random generator; seeded from settings.seed when omitted

        Raises:
            ConfigurationError: If a range is inverted or a target range starts below
                the 2-decimal draw precision
        """
        for name in ("leverage", "target_profit", "target_loss"):
            low = getattr(settings, f"min_{name}")
            high = getattr(settings, f"max_{name}")
            if low > high:
                raise ConfigurationError(f"min_{name} ({low}) exceeds max_{name} ({high})")

        for name in ("min_target_profit", "min_target_loss"):
            low = getattr(settings, name)
            if low < STRATEGY_MIN_TARGET_PCT:
                raise ConfigurationError(
                    f"{name} must be at least {STRATEGY_MIN_TARGET_PCT}, got {low}"
                )

        self.settings = settings
        self.rng = rng if rng is not None else random.Random(settings.seed)

    def on_tick(
        self,
        prices: Mapping[str, Decimal],
        cash: Decimal,
        open_positions: int,
        now: datetime,
    ) -> OpenOrder | None:
        """Maybe propose a random position for one of the tick's assets."""
        if not prices or cash <= ZERO:
            return None
        if open_positions >= self.settings.max_open_positions:
            return None
        if self.rng.random() >= self.settings.trigger_probability:
            return None

        settings = self.settings
        asset = self.rng.choice(sorted(prices))
        order = OpenOrder(
            asset=asset,
            position_type=self.rng.choice(list(PositionType)),
            leverage=self.rng.randint(settings.min_leverage, settings.max_leverage),
            entry_price=prices[asset],
            target_profit_pct=self._draw(settings.min_target_profit, settings.max_target_profit),
            target_loss_pct=-self._draw(settings.min_target_loss, settings.max_target_loss),
            margin=round_amount(cash * to_decimal(settings.margin_fraction)),
        )

        logger.debug(
            f"Strategy proposes {order.position_type.value} {asset} x{order.leverage} "
            f"margin={order.margin} at {now.isoformat()}"
        )
        return order

    def _draw(self, low: float, high: float) -> Decimal:
        """Draw a percentage from [low, high], rounded to 2 places."""
        return to_decimal(round(self.rng.uniform(low, high), 2))
