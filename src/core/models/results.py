"""
Typed operation results.

Engine operations report expected failures (insufficient funds, unknown
position, rejected prices) through these results instead of raising, so
callers can branch on them.
"""

from dataclasses import dataclass, field
from enum import StrEnum

from src.core.exceptions.trading import (
    InsufficientFundsError,
    InvalidPriceError,
    PositionNotFoundError,
)

from .portfolio_ledger import PortfolioSnapshot
from .portfolio_performance import PerformanceSample
from .position import Position
from .price_history import PricePoint
from .trade import Trade


class OpenStatus(StrEnum):
    """Outcome of an open request."""

    OPENED = "opened"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class EngineState:
    """Read-only view of the whole engine."""

    portfolio: PortfolioSnapshot
    trades: tuple[Trade, ...]
    price_history: dict[str, tuple[PricePoint, ...]]
    performance_history: tuple[PerformanceSample, ...]

    def to_dict(self) -> dict:
        """Convert state to dictionary."""
        return {
            "portfolio": self.portfolio.to_dict(),
            "trades": [trade.to_dict() for trade in self.trades],
            "price_history": {
                asset: [point.to_dict() for point in points]
                for asset, points in self.price_history.items()
            },
            "performance_history": [sample.to_dict() for sample in self.performance_history],
        }


@dataclass(frozen=True)
class OpenResult:
    """Result of an open request.

    ``state`` is the engine state taken under the same lock as the open; it is
    set by the engine facade and left None by the lifecycle manager.
    """

    status: OpenStatus
    position: Position | None = None
    error: InsufficientFundsError | None = None
    state: EngineState | None = None

    @property
    def opened(self) -> bool:
        """Check if a position was opened."""
        return self.status == OpenStatus.OPENED

    @classmethod
    def success(cls, position: Position) -> "OpenResult":
        return cls(status=OpenStatus.OPENED, position=position)

    @classmethod
    def skipped(cls, error: InsufficientFundsError) -> "OpenResult":
        return cls(status=OpenStatus.SKIPPED, error=error)


@dataclass(frozen=True)
class CloseResult:
    """Result of a close request; ``state`` as for OpenResult."""

    trade: Trade | None = None
    error: PositionNotFoundError | None = None
    state: EngineState | None = None

    @property
    def found(self) -> bool:
        """Check if the position existed and was closed."""
        return self.trade is not None

    @classmethod
    def success(cls, trade: Trade) -> "CloseResult":
        return cls(trade=trade)

    @classmethod
    def not_found(cls, position_id: str) -> "CloseResult":
        return cls(error=PositionNotFoundError(position_id))


@dataclass(frozen=True)
class TickResult:
    """Result of applying one price tick."""

    state: EngineState
    opened: OpenResult | None = None
    closed: tuple[Trade, ...] = ()
    rejected: tuple[InvalidPriceError, ...] = field(default_factory=tuple)
