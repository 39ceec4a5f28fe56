"""
Core enumerations for the trading simulator.

This module provides centralized enumerations for domain concepts
like position direction, close reasons, and performance retention.
"""

from .position_types import CloseReason, PositionType
from .retention import PerformanceRetention

__all__ = ["PositionType", "CloseReason", "PerformanceRetention"]
