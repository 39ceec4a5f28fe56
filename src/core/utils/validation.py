"""
Validation utilities for core domain models.

Provides consistent validation across the application.
"""

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from src.core.enums import PositionType
from src.core.exceptions.trading import InvalidPriceError, MalformedInputError
from src.core.types.financial import ZERO, to_decimal


def validate_asset(asset: Any, param_name: str = "asset") -> str:
    """Validate and normalize an asset symbol.

    Args:
        asset: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The upper-cased, stripped symbol

    Raises:
        MalformedInputError: If asset is not a non-empty string
    """
    if not isinstance(asset, str) or not asset.strip():
        raise MalformedInputError(f"{param_name} must be a non-empty string, got {asset!r}")
    return asset.strip().upper()


def validate_decimal(value: Any, param_name: str) -> Decimal:
    """Convert a value to Decimal, rejecting missing and non-numeric input."""
    if value is None:
        raise MalformedInputError(f"{param_name} is required")
    try:
        result = to_decimal(value)
    except (TypeError, ValueError, InvalidOperation) as e:
        raise MalformedInputError(f"{param_name} must be numeric, got {value!r}") from e
    if not result.is_finite():
        raise MalformedInputError(f"{param_name} must be finite, got {value!r}")
    return result


def validate_positive(value: Any, param_name: str) -> Decimal:
    """Validate that a numeric value is positive.

    Args:
        value: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The validated value as Decimal

    Raises:
        MalformedInputError: If value is missing or not positive
    """
    result = validate_decimal(value, param_name)
    if result <= ZERO:
        raise MalformedInputError(f"{param_name} must be positive, got {value}")
    return result


def validate_leverage(value: Any, min_leverage: int = 1) -> int:
    """Validate that leverage is an integer of at least min_leverage."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedInputError(f"leverage must be an integer, got {value!r}")
    if value < min_leverage:
        raise MalformedInputError(f"leverage must be at least {min_leverage}, got {value}")
    return value


def validate_position_type(value: Any) -> PositionType:
    """Validate a position direction given as enum or string."""
    if isinstance(value, PositionType):
        return value
    if isinstance(value, str):
        try:
            return PositionType(value.upper())
        except ValueError:
            pass
    raise MalformedInputError(
        f"position_type must be one of {', '.join(t.value for t in PositionType)}, got {value!r}"
    )


def validate_targets(target_profit_pct: Any, target_loss_pct: Any) -> tuple[Decimal, Decimal]:
    """Validate profit/loss targets.

    Returns:
        (target_profit_pct, target_loss_pct) with profit positive and loss negative

    Raises:
        MalformedInputError: If a target is missing or has the wrong sign
    """
    profit = validate_decimal(target_profit_pct, "target_profit_pct")
    loss = validate_decimal(target_loss_pct, "target_loss_pct")
    if profit <= ZERO:
        raise MalformedInputError(f"target_profit_pct must be positive, got {target_profit_pct}")
    if loss >= ZERO:
        raise MalformedInputError(f"target_loss_pct must be negative, got {target_loss_pct}")
    return profit, loss


def validate_price(asset: str, price: Any) -> Decimal:
    """Validate a single market price.

    Raises:
        InvalidPriceError: If the price is non-numeric, zero or negative
    """
    try:
        result = to_decimal(price)
    except (TypeError, ValueError, InvalidOperation) as e:
        raise InvalidPriceError(asset, price) from e
    if not result.is_finite() or result <= ZERO:
        raise InvalidPriceError(asset, price)
    return result


def split_valid_prices(
    prices: Mapping[str, Any],
) -> tuple[dict[str, Decimal], list[InvalidPriceError]]:
    """Separate usable prices from invalid ones.

    Each asset is judged on its own so one bad quote does not block the rest.

    Returns:
        (accepted prices keyed by normalized asset, rejection errors)
    """
    accepted: dict[str, Decimal] = {}
    rejected: list[InvalidPriceError] = []

    for raw_asset, raw_price in prices.items():
        try:
            asset = validate_asset(raw_asset)
        except MalformedInputError:
            rejected.append(InvalidPriceError(str(raw_asset), raw_price))
            continue
        try:
            accepted[asset] = validate_price(asset, raw_price)
        except InvalidPriceError as e:
            rejected.append(e)

    return accepted, rejected
