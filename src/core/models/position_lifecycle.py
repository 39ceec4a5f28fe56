"""
Position lifecycle operations.

This module opens and closes positions against the ledger, computes leveraged
PnL and decides when a position must auto-close.
"""

from collections import deque
from collections.abc import Mapping
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from loguru import logger

from src.core.constants import MAX_TRADES_HISTORY, MIN_LEVERAGE, POSITION_TIME_LIMIT_HOURS
from src.core.enums import CloseReason
from src.core.exceptions.trading import InsufficientFundsError, InvalidLeverageError
from src.core.types.financial import round_percentage
from src.core.utils.validation import (
    validate_asset,
    validate_leverage,
    validate_position_type,
    validate_positive,
    validate_price,
    validate_targets,
)

from .portfolio_ledger import PortfolioLedger
from .position import Position
from .results import CloseResult, OpenResult
from .trade import Trade


class PositionLifecycleManager:
    """Opens, evaluates and closes positions.

    Keeps the bounded trade history, most recent first.
    """

    def __init__(
        self,
        ledger: PortfolioLedger,
        time_limit: timedelta = timedelta(hours=POSITION_TIME_LIMIT_HOURS),
        max_leverage: int | None = None,
        trade_capacity: int = MAX_TRADES_HISTORY,
    ) -> None:
        """Initialize with the ledger to trade against.

        Args:
            ledger: Portfolio ledger owning cash and positions
            time_limit: Age at which a position is closed with TIME_LIMIT
            max_leverage: Optional leverage cap, None for no cap
            trade_capacity: Closed trades to keep
        """
        self.ledger = ledger
        self.time_limit = time_limit
        self.max_leverage = max_leverage
        self.trades: deque[Trade] = deque(maxlen=trade_capacity)

    def open(
        self,
        asset: str,
        position_type: Any,
        leverage: int,
        entry_price: Any,
        margin_amount: Any,
        target_profit_pct: Any,
        target_loss_pct: Any,
        now: datetime,
    ) -> OpenResult:
        """Open a leveraged position.

        Args:
            asset: Asset symbol
            position_type: LONG or SHORT
            leverage: Integer leverage of at least 1
            entry_price: Positive entry price
            margin_amount: Cash to reserve
            target_profit_pct: Positive take-profit percentage
            target_loss_pct: Negative stop-loss percentage
            now: Open time

        Returns:
            OPENED with the new position, or SKIPPED when the ledger cannot
            fund it (state unchanged)

        Raises:
            MalformedInputError: If any input is missing or out of range
        """
        asset = validate_asset(asset)
        position_type = validate_position_type(position_type)
        leverage = validate_leverage(leverage, MIN_LEVERAGE)
        if self.max_leverage is not None and leverage > self.max_leverage:
            raise InvalidLeverageError(leverage, self.max_leverage)
        entry_price = validate_positive(entry_price, "entry_price")
        margin_amount = validate_positive(margin_amount, "margin_amount")
        target_profit_pct, target_loss_pct = validate_targets(target_profit_pct, target_loss_pct)

        with self.ledger.lock:
            try:
                reservation = self.ledger.reserve_margin(margin_amount)
            except InsufficientFundsError as e:
                logger.warning(f"Open skipped for {asset} {position_type.value}: {e}")
                return OpenResult.skipped(e)

            position = Position.open(
                reservation=reservation,
                asset=asset,
                position_type=position_type,
                leverage=leverage,
                entry_price=entry_price,
                target_profit_pct=target_profit_pct,
                target_loss_pct=target_loss_pct,
                opened_at=now,
            )
            self.ledger.add_position(position)

        logger.info(
            f"Opened {position.position_type.value} {position.asset} x{position.leverage} "
            f"@ {position.entry_price}: margin={position.margin}, "
            f"notional={position.notional_size}, id={position.id}"
        )
        return OpenResult.success(position)

    def compute_pnl_percent(self, position: Position, mark_price: Decimal) -> Decimal:
        """Leveraged PnL percentage of a position at a mark price."""
        return position.pnl_percent(mark_price)

    def compute_pnl_amount(self, position: Position, pnl_percent: Decimal) -> Decimal:
        """PnL in cash for a position at a PnL percentage."""
        return position.pnl_amount(pnl_percent)

    def evaluate_auto_close(
        self, position: Position, mark_price: Decimal, now: datetime
    ) -> CloseReason | None:
        """Decide whether a position must close at a mark price.

        Priority: TIME_LIMIT, then TAKE_PROFIT, then STOP_LOSS.

        Returns:
            The close reason, or None if the position stays open
        """
        if position.age(now) >= self.time_limit:
            return CloseReason.TIME_LIMIT

        pnl_percent = self.compute_pnl_percent(position, mark_price)
        if pnl_percent >= position.target_profit_pct:
            return CloseReason.TAKE_PROFIT
        if pnl_percent <= position.target_loss_pct:
            return CloseReason.STOP_LOSS
        return None

    def close(
        self,
        position_id: str,
        close_price: Any,
        reason: CloseReason,
        now: datetime,
    ) -> CloseResult:
        """Close an open position.

        Lookup and removal happen under the ledger lock, so a position is
        settled at most once however many callers race to close it.

        Returns:
            The recorded trade, or a not-found result if the id is not open

        Raises:
            InvalidPriceError: If close_price is not positive
        """
        close_price = validate_price(f"position {position_id}", close_price)

        with self.ledger.lock:
            position = self.ledger.remove_position(position_id)
            if position is None:
                logger.debug(f"Close ignored, position not open: {position_id}")
                return CloseResult.not_found(position_id)

            pnl_percent = self.compute_pnl_percent(position, close_price)
            pnl_amount = self.compute_pnl_amount(position, pnl_percent)
            self.ledger.release_margin(position.margin, pnl_amount)

            trade = Trade.from_position(
                position,
                close_price=close_price,
                closed_at=now,
                pnl_percent=pnl_percent,
                pnl_amount=pnl_amount,
                close_reason=reason,
            )
            self.trades.appendleft(trade)

        logger.info(
            f"Closed {trade.position_type.value} {trade.asset} @ {close_price} "
            f"({reason.value}): pnl={round_percentage(pnl_percent)}% / {pnl_amount}, "
            f"id={position_id}"
        )
        return CloseResult.success(trade)

    def evaluate_positions(self, prices: Mapping[str, Decimal], now: datetime) -> list[Trade]:
        """Run one auto-close pass over every open position.

        Positions whose asset has no price in ``prices`` are left open.

        Returns:
            Trades closed during the pass, in open order
        """
        closed: list[Trade] = []

        with self.ledger.lock:
            for position in self.ledger.open_positions():
                mark_price = prices.get(position.asset)
                if mark_price is None:
                    continue

                reason = self.evaluate_auto_close(position, mark_price, now)
                if reason is None:
                    continue

                result = self.close(position.id, mark_price, reason, now)
                if result.trade is not None:
                    closed.append(result.trade)

        return closed

    def trade_history(self) -> tuple[Trade, ...]:
        """Closed trades, most recent first."""
        with self.ledger.lock:
            return tuple(self.trades)
