"""
Position and close reason enumerations.

This module defines the allowed position directions and the reasons a position
can be closed for.
"""

from enum import StrEnum


class PositionType(StrEnum):
    """
    Allowed position types.

    Defines whether a position profits from rising (long) or falling (short) prices.
    """

    LONG = "LONG"
    SHORT = "SHORT"

    @property
    def is_long(self) -> bool:
        """Check if position type is long."""
        return self == self.LONG

    @property
    def is_short(self) -> bool:
        """Check if position type is short."""
        return self == self.SHORT

    def opposite(self) -> "PositionType":
        """Get the opposite position type."""
        return self.SHORT if self.is_long else self.LONG  # type: ignore[return-value]


class CloseReason(StrEnum):
    """
    Reasons a position was closed.

    Auto-close reasons are listed in priority order: a position that is due
    for several of them at once is recorded with the first one.
    """

    TIME_LIMIT = "TIME_LIMIT"
    TAKE_PROFIT = "TAKE_PROFIT"
    STOP_LOSS = "STOP_LOSS"
    MANUAL = "MANUAL"

    @property
    def is_automatic(self) -> bool:
        """Check if the close was initiated by the engine."""
        return self != self.MANUAL
