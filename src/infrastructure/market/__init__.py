"""
Market data infrastructure.

This module provides live price sources for the simulator.
"""

from .binance_price_feed import BinancePriceFeed

__all__ = ["BinancePriceFeed"]
