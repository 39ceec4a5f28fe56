"""
Trading API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import get_engine
from src.api.schemas.api_models import (
    ClosePositionRequest,
    ClosePositionResponse,
    MetricsResponse,
    OpenPositionRequest,
    OpenPositionResponse,
    PositionResponse,
    PriceUpdateRequest,
    PriceUpdateResponse,
    RejectedPrice,
    StateResponse,
    TradeResponse,
)
from src.core.models.orders import OpenOrder
from src.core.models.results import EngineState
from src.core.models.trading_engine import TradingEngine

router = APIRouter()


def _state_response(state: EngineState) -> StateResponse:
    return StateResponse.model_validate(state.to_dict())


@router.get("/state", response_model=StateResponse)
async def get_state(engine: TradingEngine = Depends(get_engine)) -> StateResponse:
    """Get portfolio, trade, price and performance history."""
    return _state_response(engine.get_state())


@router.get("/metrics", response_model=MetricsResponse)
async def get_metrics(engine: TradingEngine = Depends(get_engine)) -> MetricsResponse:
    """Get trade and return statistics."""
    return MetricsResponse.model_validate(engine.get_metrics())


@router.post("/position/open", response_model=OpenPositionResponse)
async def open_position(
    request: OpenPositionRequest, engine: TradingEngine = Depends(get_engine)
) -> OpenPositionResponse:
    """Open a simulated position; skipped when cash cannot cover the margin."""
    order = OpenOrder(
        asset=request.asset,
        position_type=request.position_type,
        leverage=request.leverage,
        entry_price=request.price,
        target_profit_pct=request.target_profit,
        target_loss_pct=request.target_loss,
        margin=request.margin,
        quantity=request.quantity,
    )
    result = engine.open_position(order)

    return OpenPositionResponse(
        status=result.status.value,
        position=(
            PositionResponse.model_validate(result.position.to_dict())
            if result.position is not None
            else None
        ),
        reason=str(result.error) if result.error is not None else None,
        state=_state_response(result.state),
    )


@router.post("/position/close", response_model=ClosePositionResponse)
async def close_position(
    request: ClosePositionRequest, engine: TradingEngine = Depends(get_engine)
) -> ClosePositionResponse:
    """Close a position at the given price."""
    result = engine.close_position(request.position_id, request.close_price)
    if result.trade is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(result.error))

    return ClosePositionResponse(
        trade=TradeResponse.model_validate(result.trade.to_dict()),
        state=_state_response(result.state),
    )


@router.post("/prices/update", response_model=PriceUpdateResponse)
async def update_prices(
    request: PriceUpdateRequest, engine: TradingEngine = Depends(get_engine)
) -> PriceUpdateResponse:
    """Apply a price tick: history, strategy, auto-close and performance."""
    result = engine.apply_price_tick(request.prices)

    opened = None
    if result.opened is not None and result.opened.position is not None:
        opened = PositionResponse.model_validate(result.opened.position.to_dict())

    return PriceUpdateResponse(
        opened=opened,
        closed=[TradeResponse.model_validate(trade.to_dict()) for trade in result.closed],
        rejected=[
            RejectedPrice(asset=error.asset, price=str(error.price), message=str(error))
            for error in result.rejected
        ],
        state=_state_response(result.state),
    )
