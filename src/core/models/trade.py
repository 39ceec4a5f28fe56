"""
Trade domain model.

A Trade is the immutable record of a closed position.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.core.enums import CloseReason, PositionType
from src.core.exceptions.trading import ValidationError
from src.core.types.financial import round_percentage

from .position import Position


@dataclass(frozen=True)
class Trade:
    """Represents a closed position."""

    position_id: str
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
    close_price: Decimal
    closed_at: datetime
    pnl_percent: Decimal
    pnl_amount: Decimal
    close_reason: CloseReason

    def __post_init__(self) -> None:
        """Validate trade data after initialization."""
        if self.close_price <= 0:
            raise ValidationError(f"Close price must be positive, got {self.close_price}")

    @property
    def is_profitable(self) -> bool:
        """Check if the trade realized a gain."""
        return self.pnl_amount > 0

    @classmethod
    def from_position(
        cls,
        position: Position,
        close_price: Decimal,
        closed_at: datetime,
        pnl_percent: Decimal,
        pnl_amount: Decimal,
        close_reason: CloseReason,
    ) -> "Trade":
        """Factory method to record the close of a position."""
        return cls(
            position_id=position.id,
            asset=position.asset,
            position_type=position.position_type,
            leverage=position.leverage,
            entry_price=position.entry_price,
            margin=position.margin,
            notional_size=position.notional_size,
            quantity=position.quantity,
            target_profit_pct=position.target_profit_pct,
            target_loss_pct=position.target_loss_pct,
            opened_at=position.opened_at,
            close_price=close_price,
            closed_at=closed_at,
            pnl_percent=pnl_percent,
            pnl_amount=pnl_amount,
            close_reason=close_reason,
        )

    def to_dict(self) -> dict:
        """Convert trade to dictionary."""
        return {
            "position_id": self.position_id,
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
            "close_price": float(self.close_price),
            "closed_at": self.closed_at.isoformat(),
            "pnl_percent": float(round_percentage(self.pnl_percent)),
            "pnl_amount": float(self.pnl_amount),
            "close_reason": self.close_reason.value,
        }
