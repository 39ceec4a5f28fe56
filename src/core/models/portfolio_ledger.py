"""
Portfolio ledger state management.

This module holds the cash balance, realized PnL and open positions of the
simulated account, following the Single Responsibility Principle for state
management.
"""

import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger

from src.core.constants import MIN_MARGIN_AMOUNT
from src.core.exceptions.trading import InsufficientFundsError, MalformedInputError
from src.core.types.financial import ZERO, round_amount, to_decimal

from .position import MarginReservation, Position


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Point-in-time copy of the ledger, valued at a set of prices."""

    cash: Decimal
    initial_balance: Decimal
    realized_pnl: Decimal
    used_margin: Decimal
    unrealized_pnl: Decimal
    positions: tuple[Position, ...]

    @property
    def total_value(self) -> Decimal:
        """Cash plus reserved margin plus unrealized PnL."""
        return self.cash + self.used_margin + self.unrealized_pnl

    def to_dict(self) -> dict:
        """Convert snapshot to dictionary."""
        return {
            "cash": float(self.cash),
            "initial_balance": float(self.initial_balance),
            "realized_pnl": float(self.realized_pnl),
            "used_margin": float(self.used_margin),
            "unrealized_pnl": float(self.unrealized_pnl),
            "total_value": float(self.total_value),
            "positions": [position.to_dict() for position in self.positions],
        }


@dataclass
class PortfolioLedger:
    """Core ledger state.

    Owns every open Position, keyed by id in open order.

    Thread Safety:
        ``lock`` is the single mutual-exclusion lock of the whole engine.
        Every mutating operation acquires it; callers that need several
        operations to be atomic together (a tick pass, check-and-remove)
        hold it around the sequence. It is re-entrant.
    """

    initial_balance: Decimal
    min_margin: Decimal = field(default_factory=lambda: to_decimal(MIN_MARGIN_AMOUNT))
    cash: Decimal | None = None
    realized_pnl: Decimal = ZERO
    positions: dict[str, Position] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    def __post_init__(self) -> None:
        """Normalize numeric inputs and default cash to the initial balance."""
        self.initial_balance = to_decimal(self.initial_balance)
        if self.initial_balance <= ZERO:
            raise MalformedInputError(
                f"Initial balance must be positive, got {self.initial_balance}"
            )
        self.min_margin = to_decimal(self.min_margin)
        self.cash = self.initial_balance if self.cash is None else to_decimal(self.cash)
        self.realized_pnl = to_decimal(self.realized_pnl)

    def used_margin(self) -> Decimal:
        """Calculate total margin reserved by open positions."""
        return sum((position.margin for position in self.positions.values()), ZERO)

    def reserve_margin(self, amount: Decimal) -> MarginReservation:
        """Debit margin from cash for a new position.

        Args:
            amount: Cash to reserve

        Returns:
            A reservation to construct the Position with

        Raises:
            InsufficientFundsError: If amount exceeds cash or is dust
        """
        amount = round_amount(to_decimal(amount))
        with self.lock:
            if amount > self.cash or amount <= self.min_margin:
                raise InsufficientFundsError(
                    required=amount,
                    available=self.cash,
                    operation="reserving margin",
                )
            self.cash -= amount
            return MarginReservation(amount=amount)

    def release_margin(self, amount: Decimal, pnl: Decimal) -> None:
        """Return margin plus PnL to cash and book the PnL as realized.

        Never fails. A loss larger than the margin can push cash negative;
        that is allowed and only reported.
        """
        with self.lock:
            self.cash += amount + pnl
            self.realized_pnl += pnl
            if self.cash < ZERO:
                logger.warning(
                    f"Cash balance negative after release: cash={self.cash}, pnl={pnl}"
                )

    def mark_to_market(self, current_prices: Mapping[str, Decimal]) -> Decimal:
        """Calculate total unrealized PnL of open positions.

        Positions whose asset has no price are skipped.
        """
        total_pnl = ZERO
        for position in tuple(self.positions.values()):
            price = current_prices.get(position.asset)
            if price is not None:
                total_pnl += position.unrealized_pnl(price)
        return total_pnl

    def total_value(self, current_prices: Mapping[str, Decimal]) -> Decimal:
        """Calculate portfolio value: cash + reserved margin + unrealized PnL.

        Realized PnL is already part of cash.
        """
        with self.lock:
            return self.cash + self.used_margin() + self.mark_to_market(current_prices)

    def add_position(self, position: Position) -> None:
        """Append a newly opened position."""
        with self.lock:
            if position.id in self.positions:
                raise MalformedInputError(f"Duplicate position id: {position.id}")
            self.positions[position.id] = position

    def remove_position(self, position_id: str) -> Position | None:
        """Remove and return a position, or None if it is not open."""
        with self.lock:
            return self.positions.pop(position_id, None)

    def get_position(self, position_id: str) -> Position | None:
        """Look up an open position by id."""
        return self.positions.get(position_id)

    def open_positions(self) -> tuple[Position, ...]:
        """Open positions in open order."""
        with self.lock:
            return tuple(self.positions.values())

    def snapshot(self, current_prices: Mapping[str, Decimal]) -> PortfolioSnapshot:
        """Take a consistent copy of the ledger valued at current prices."""
        with self.lock:
            return PortfolioSnapshot(
                cash=self.cash,
                initial_balance=self.initial_balance,
                realized_pnl=self.realized_pnl,
                used_margin=self.used_margin(),
                unrealized_pnl=self.mark_to_market(current_prices),
                positions=tuple(self.positions.values()),
            )
