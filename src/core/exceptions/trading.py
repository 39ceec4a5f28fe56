"""
Custom exception hierarchy for the trading simulator.

This module defines domain-specific exceptions for better error handling.
None of them is fatal to the engine: callers branch on them or on the typed
results that carry them.
"""

from decimal import Decimal


class TradingSimulatorError(Exception):
    """Base exception for all simulator errors."""

    pass


class ValidationError(TradingSimulatorError):
    """Raised when input validation fails."""

    pass


class MalformedInputError(ValidationError):
    """Raised when a required open/close field is missing or out of range."""

    pass


class InvalidLeverageError(MalformedInputError):
    """Raised when leverage exceeds the configured cap."""

    def __init__(self, leverage: int, max_leverage: int):
        self.leverage = leverage
        self.max_leverage = max_leverage
        super().__init__(f"Invalid leverage {leverage} (max: {max_leverage})")


class InvalidPriceError(ValidationError):
    """Raised when a price is zero or negative."""

    def __init__(self, asset: str, price: Decimal | float):
        self.asset = asset
        self.price = price
        super().__init__(f"Invalid price for {asset}: {price} (must be positive)")


class DataError(TradingSimulatorError):
    """Raised when market data access or processing fails."""

    pass


class ConfigurationError(TradingSimulatorError):
    """Raised when configuration is invalid."""

    pass


class PortfolioError(TradingSimulatorError):
    """Raised when portfolio operations fail."""

    pass


class InsufficientFundsError(PortfolioError):
    """Raised when there are insufficient funds for an operation."""

    def __init__(
        self,
        required: Decimal | float,
        available: Decimal | float,
        operation: str = "operation",
    ):
        self.required = required
        self.available = available
        self.operation = operation
        super().__init__(
            f"Insufficient funds for {operation}: "
            f"required={float(required):.2f}, available={float(available):.2f}"
        )


class PositionNotFoundError(PortfolioError):
    """Raised when trying to operate on a non-existent position."""

    def __init__(self, position_id: str):
        self.position_id = position_id
        super().__init__(f"Position not found: {position_id}")
