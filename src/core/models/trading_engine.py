"""
Main trading engine - orchestrates all simulator components.

This module provides the engine interface consumed by the transport layer by
composing the focused components: ledger state, position lifecycle, price
history, performance tracking and an optional strategy.
"""

from collections.abc import Callable, Mapping
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any

from loguru import logger

from src.core.config import SimulatorSettings
from src.core.enums import CloseReason
from src.core.exceptions.trading import MalformedInputError
from src.core.interfaces.engine import ITradingEngine
from src.core.interfaces.strategy import IStrategy
from src.core.strategies.random_strategy import RandomStrategy
from src.core.types.financial import to_decimal
from src.core.utils.decorators import log_operation
from src.core.utils.validation import split_valid_prices

from .orders import OpenOrder
from .portfolio_ledger import PortfolioLedger
from .portfolio_metrics import PortfolioMetrics, performance_to_frame, trades_to_frame
from .portfolio_performance import PerformanceTracker
from .position_lifecycle import PositionLifecycleManager
from .price_history import PriceHistoryTracker
from .results import CloseResult, EngineState, OpenResult, TickResult


def utc_now() -> datetime:
    """Default engine clock."""
    return datetime.now(UTC)


class TradingEngine(ITradingEngine):
    """Leveraged trading simulator engine.

    Orchestrates engine operations by composing focused components:
    - PortfolioLedger: Cash, realized PnL and open positions
    - PositionLifecycleManager: Open/close, PnL and auto-close
    - PriceHistoryTracker: Per-asset price series
    - PerformanceTracker: Portfolio performance series
    - IStrategy: Optional order generator run on every tick

    Every operation runs under the ledger lock, so the engine can be shared
    between threads.
    """

    def __init__(
        self,
        ledger: PortfolioLedger,
        lifecycle: PositionLifecycleManager | None = None,
        price_history: PriceHistoryTracker | None = None,
        performance: PerformanceTracker | None = None,
        strategy: IStrategy | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the engine with its components."""
        self.ledger = ledger
        self.lifecycle = lifecycle if lifecycle is not None else PositionLifecycleManager(ledger)
        if self.lifecycle.ledger is not ledger:
            raise ValueError("Lifecycle manager must trade against the engine's ledger")
        self.price_history = price_history if price_history is not None else PriceHistoryTracker()
        self.performance = performance if performance is not None else PerformanceTracker()
        self.strategy = strategy
        self.clock = clock
        self._metrics = PortfolioMetrics()

    @classmethod
    def from_settings(
        cls,
        settings: SimulatorSettings,
        clock: Callable[[], datetime] = utc_now,
    ) -> "TradingEngine":
        """Build an engine from simulator settings."""
        ledger = PortfolioLedger(
            initial_balance=to_decimal(settings.initial_balance),
            min_margin=to_decimal(settings.min_margin),
        )
        lifecycle = PositionLifecycleManager(
            ledger,
            time_limit=timedelta(hours=settings.position_time_limit_hours),
            max_leverage=settings.max_leverage,
            trade_capacity=settings.max_trades_history,
        )
        performance_capacity = (
            settings.max_performance_days
            if settings.performance_retention.is_daily
            else settings.max_performance_history
        )
        strategy = RandomStrategy(settings.strategy) if settings.strategy.enabled else None

        logger.info(
            f"Engine configured: balance={settings.initial_balance}, "
            f"retention={settings.performance_retention.value}, "
            f"strategy={'on' if strategy else 'off'}"
        )
        return cls(
            ledger=ledger,
            lifecycle=lifecycle,
            price_history=PriceHistoryTracker(settings.max_price_history),
            performance=PerformanceTracker(settings.performance_retention, performance_capacity),
            strategy=strategy,
            clock=clock,
        )

    def get_state(self) -> EngineState:
        """Read-only view of portfolio, trades, prices and performance."""
        with self.ledger.lock:
            return self._build_state()

    def get_metrics(self) -> dict[str, dict[str, float]]:
        """Trade and return statistics over the retained histories."""
        with self.ledger.lock:
            trades = self.lifecycle.trade_history()
            samples = self.performance.samples()
        return {
            "trades": self._metrics.calculate_trade_metrics(trades_to_frame(trades)),
            "returns": self._metrics.calculate_returns(performance_to_frame(samples)),
        }

    @log_operation
    def open_position(self, order: OpenOrder, now: datetime | None = None) -> OpenResult:
        """Open a position from an order.

        The result carries the engine state as of the open.

        Raises:
            MalformedInputError: If the order is incomplete or out of range
        """
        now = now or self.clock()
        with self.ledger.lock:
            result = self._open(order, now)
            return replace(result, state=self._build_state())

    @log_operation
    def close_position(
        self, position_id: str, close_price: Any, now: datetime | None = None
    ) -> CloseResult:
        """Close a position on request.

        The result carries the engine state as of the close.

        Raises:
            InvalidPriceError: If close_price is not positive
        """
        now = now or self.clock()
        with self.ledger.lock:
            result = self.lifecycle.close(position_id, close_price, CloseReason.MANUAL, now)
            return replace(result, state=self._build_state())

    @log_operation
    def apply_price_tick(
        self, prices: Mapping[str, Any], now: datetime | None = None
    ) -> TickResult:
        """Apply one price tick.

        In order: record price history, run the strategy, run the auto-close
        pass, record a performance sample. Invalid prices are rejected per
        asset and reported in the result.
        """
        now = now or self.clock()
        accepted, rejected = split_valid_prices(prices)
        for error in rejected:
            logger.warning(f"Rejected price update: {error}")

        with self.ledger.lock:
            for asset, price in accepted.items():
                self.price_history.record(asset, price, now)

            opened = self._run_strategy(accepted, now)
            closed = self.lifecycle.evaluate_positions(accepted, now)

            marks = self.price_history.latest_prices()
            total_value = self.ledger.total_value(marks)
            self.performance.record_sample(total_value, self.ledger.initial_balance, now)

            state = self._build_state()

        logger.debug(
            f"Tick applied: {len(accepted)} prices, {len(rejected)} rejected, "
            f"{len(closed)} closed, value={total_value}"
        )
        return TickResult(
            state=state,
            opened=opened,
            closed=tuple(closed),
            rejected=tuple(rejected),
        )

    def _open(self, order: OpenOrder, now: datetime) -> OpenResult:
        """Resolve order margin and open through the lifecycle manager."""
        return self.lifecycle.open(
            asset=order.asset,
            position_type=order.position_type,
            leverage=order.leverage,
            entry_price=order.entry_price,
            margin_amount=order.resolve_margin(),
            target_profit_pct=order.target_profit_pct,
            target_loss_pct=order.target_loss_pct,
            now=now,
        )

    def _run_strategy(self, prices: Mapping[str, Any], now: datetime) -> OpenResult | None:
        """Let the strategy propose and open at most one position."""
        if self.strategy is None:
            return None

        order = self.strategy.on_tick(
            prices,
            cash=self.ledger.cash,
            open_positions=len(self.ledger.positions),
            now=now,
        )
        if order is None:
            return None

        try:
            return self._open(order, now)
        except MalformedInputError as e:
            logger.warning(f"Strategy order rejected: {e}")
            return None

    def _build_state(self) -> EngineState:
        """Assemble engine state; caller holds the ledger lock."""
        return EngineState(
            portfolio=self.ledger.snapshot(self.price_history.latest_prices()),
            trades=self.lifecycle.trade_history(),
            price_history=self.price_history.snapshot(),
            performance_history=self.performance.samples(),
        )
