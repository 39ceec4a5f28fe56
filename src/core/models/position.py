"""
Position domain model.

Positions are immutable once opened; closing one removes it from the ledger
and produces a Trade.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from src.core.enums import PositionType
from src.core.exceptions.trading import MalformedInputError
from src.core.types.financial import (
    ZERO,
    calculate_notional_size,
    calculate_pnl_amount,
    calculate_pnl_percent,
    calculate_quantity,
)


def new_position_id() -> str:
    """Generate a 128-bit random position identifier."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class MarginReservation:
    """Proof that margin was debited from the ledger for a new position."""

    amount: Decimal


@dataclass(frozen=True)
class Position:
    """Represents an open leveraged position.

    Attributes:
        id: Unique position identifier
        asset: Asset symbol the position tracks
        position_type: LONG or SHORT
        leverage: Integer leverage multiplier
        entry_price: Price at open
        margin: Cash reserved from the ledger
        notional_size: margin x leverage
        quantity: notional_size / entry_price
        target_profit_pct: Take-profit threshold (positive percent)
        target_loss_pct: Stop-loss threshold (negative percent)
        opened_at: Open timestamp
    """

    id: str
    asset: str
    position_type: PositionType
    leverage: int
    entry_price: Decimal
    margin: Decimal
    notional_size: Decimal
    quantity: Decimal
    target_profit_pct: Decimal
    target_loss_pct: Decimal
    opened_at: datetime

    def __post_init__(self) -> None:
        """Validate position data after initialization."""
        if self.entry_price <= ZERO:
            raise MalformedInputError(f"Entry price must be positive, got {self.entry_price}")
        if self.leverage < 1:
            raise MalformedInputError(f"Leverage must be at least 1, got {self.leverage}")
        if self.margin <= ZERO:
            raise MalformedInputError(f"Margin must be positive, got {self.margin}")

    def pnl_percent(self, mark_price: Decimal) -> Decimal:
        """Calculate leveraged PnL percentage at a mark price."""
        return calculate_pnl_percent(
            entry_price=self.entry_price,
            mark_price=mark_price,
            leverage=self.leverage,
            position_type=self.position_type.value,
        )

    def pnl_amount(self, pnl_percent: Decimal) -> Decimal:
        """Convert a PnL percentage into cash on the notional size."""
        return calculate_pnl_amount(self.notional_size, pnl_percent)

    def unrealized_pnl(self, mark_price: Decimal) -> Decimal:
        """Calculate unrealized PnL in cash at a mark price."""
        return self.pnl_amount(self.pnl_percent(mark_price))

    def age(self, now: datetime) -> timedelta:
        """Time elapsed since the position was opened."""
        return now - self.opened_at

    @classmethod
    def open(
        cls,
        reservation: MarginReservation,
        asset: str,
        position_type: PositionType,
        leverage: int,
        entry_price: Decimal,
        target_profit_pct: Decimal,
        target_loss_pct: Decimal,
        opened_at: datetime,
    ) -> "Position":
        """Factory method to build a position from a margin reservation.

        Derives notional size and quantity from the reserved margin.
        """
        notional_size = calculate_notional_size(reservation.amount, leverage)
        return cls(
            id=new_position_id(),
            asset=asset,
            position_type=position_type,
            leverage=leverage,
            entry_price=entry_price,
            margin=reservation.amount,
            notional_size=notional_size,
            quantity=calculate_quantity(notional_size, entry_price),
            target_profit_pct=target_profit_pct,
            target_loss_pct=target_loss_pct,
            opened_at=opened_at,
        )

    def to_dict(self) -> dict:
        """Convert position to dictionary."""
        return {
            "id": self.id,
            "asset": self.asset,
            "position_type": self.position_type.value,
            "leverage": self.leverage,
            "entry_price": float(self.entry_price),
            "margin": float(self.margin),
            "notional_size": float(self.notional_size),
            "quantity": float(self.quantity),
            "target_profit_pct": float(self.target_profit_pct),
            "target_loss_pct": float(self.target_loss_pct),
            "opened_at": self.opened_at.isoformat(),
        }
