"""
Core type definitions and utilities.
"""

# Re-export financial utilities for easy access
from .financial import (
    FINANCIAL_DECIMALS,
    HUNDRED,
    ONE,
    PERCENTAGE_DECIMALS,
    ZERO,
    calculate_margin_for_quantity,
    calculate_notional_size,
    calculate_performance_percent,
    calculate_pnl_amount,
    calculate_pnl_percent,
    calculate_quantity,
    round_amount,
    round_percentage,
    to_decimal,
)

__all__ = [
    # Utility functions
    "to_decimal",
    "round_amount",
    "round_percentage",
    "calculate_notional_size",
    "calculate_quantity",
    "calculate_margin_for_quantity",
    "calculate_pnl_percent",
    "calculate_pnl_amount",
    "calculate_performance_percent",
    # Constants
    "FINANCIAL_DECIMALS",
    "PERCENTAGE_DECIMALS",
    "ZERO",
    "ONE",
    "HUNDRED",
]
