"""
Pydantic schemas for API request/response models.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from src.core.enums import CloseReason, PositionType


class OpenPositionRequest(BaseModel):
    """Request model for opening a position.

    Margin is given either directly or as an asset quantity.
    """

    asset: str = Field(..., min_length=1, description="Asset symbol, e.g. BTCUSDT")
    position_type: PositionType = Field(..., description="LONG or SHORT")
    leverage: int = Field(..., ge=1, description="Leverage multiplier")
    price: Decimal = Field(..., gt=0, description="Entry price")
    margin: Decimal | None = Field(default=None, gt=0, description="Cash to reserve")
    quantity: Decimal | None = Field(default=None, gt=0, description="Asset units to hold")
    target_profit: Decimal = Field(..., gt=0, description="Take-profit percent")
    target_loss: Decimal = Field(..., lt=0, description="Stop-loss percent (negative)")

    @model_validator(mode="after")
    def validate_margin_inputs(self) -> "OpenPositionRequest":
        """Require exactly one of margin or quantity."""
        if (self.margin is None) == (self.quantity is None):
            raise ValueError("Exactly one of margin or quantity must be provided")
        return self


class ClosePositionRequest(BaseModel):
    """Request model for closing a position."""

    position_id: str = Field(..., min_length=1)
    close_price: Decimal = Field(..., gt=0)


class PriceUpdateRequest(BaseModel):
    """Request model for a price tick.

    Prices are not range-checked here: non-positive quotes are rejected per
    asset by the engine and reported back.
    """

    prices: dict[str, Decimal] = Field(..., description="Asset to price mapping")


class PositionResponse(BaseModel):
    """Open position."""

    id: str
    asset: str
    position_type: PositionType
    leverage: int
    entry_price: float
    margin: float
    notional_size: float
    quantity: float
    target_profit_pct: float
    target_loss_pct: float
    opened_at: str


class TradeResponse(BaseModel):
    """Closed position."""

    position_id: str
    asset: str
    position_type: PositionType
    leverage: int
    entry_price: float
    margin: float
    notional_size: float
    quantity: float
    target_profit_pct: float
    target_loss_pct: float
    opened_at: str
    close_price: float
    closed_at: str
    pnl_percent: float
    pnl_amount: float
    close_reason: CloseReason


class PortfolioResponse(BaseModel):
    """Portfolio snapshot."""

    cash: float
    initial_balance: float
    realized_pnl: float
    used_margin: float
    unrealized_pnl: float
    total_value: float
    positions: list[PositionResponse]


class PricePointResponse(BaseModel):
    """Recorded price."""

    timestamp: str
    price: float


class PerformanceSampleResponse(BaseModel):
    """Recorded performance sample."""

    timestamp: str
    date: str
    performance_pct: float
    total_value: float


class StateResponse(BaseModel):
    """Full engine state."""

    portfolio: PortfolioResponse
    trades: list[TradeResponse]
    price_history: dict[str, list[PricePointResponse]]
    performance_history: list[PerformanceSampleResponse]


class OpenPositionResponse(BaseModel):
    """Response model for an open request."""

    status: str
    position: PositionResponse | None = None
    reason: str | None = None
    state: StateResponse


class ClosePositionResponse(BaseModel):
    """Response model for a successful close."""

    trade: TradeResponse
    state: StateResponse


class RejectedPrice(BaseModel):
    """Price rejected from a tick."""

    asset: str
    price: str
    message: str


class PriceUpdateResponse(BaseModel):
    """Response model for a price tick."""

    opened: PositionResponse | None = None
    closed: list[TradeResponse]
    rejected: list[RejectedPrice]
    state: StateResponse


class MetricsResponse(BaseModel):
    """Trade and return statistics."""

    trades: dict[str, float]
    returns: dict[str, float]


class ErrorResponse(BaseModel):
    """Response model for errors."""

    error: str
    message: str
    details: dict | None = None
