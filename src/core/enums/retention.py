"""
Performance history retention policies.
"""

from enum import StrEnum


class PerformanceRetention(StrEnum):
    """
    How performance samples are retained.

    Exactly one policy is active for an engine.
    """

    ROLLING = "rolling"  # One sample per tick, fixed-size window
    DAILY = "daily"  # One sample per UTC calendar day, upserted in place

    @property
    def is_daily(self) -> bool:
        """Check if samples are bucketed by day."""
        return self == self.DAILY
