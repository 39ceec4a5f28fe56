"""
Open order request model.

An OpenOrder is what a caller (API client or strategy) asks the engine to open.
Margin can be given directly or derived from an asset quantity.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from src.core.exceptions.trading import MalformedInputError
from src.core.types.financial import calculate_margin_for_quantity
from src.core.utils.validation import validate_leverage, validate_positive


@dataclass(frozen=True)
class OpenOrder:
    """Request to open a leveraged position.

    Exactly one of ``margin`` (cash to reserve) or ``quantity`` (asset units,
    margin = quantity x entry_price / leverage) must be set.
    """

    asset: str
    position_type: Any
    leverage: int
    entry_price: Any
    target_profit_pct: Any
    target_loss_pct: Any
    margin: Any = None
    quantity: Any = None

    def resolve_margin(self) -> Decimal:
        """Return the cash amount this order asks to reserve.

        Raises:
            MalformedInputError: If margin inputs are missing, ambiguous or invalid
        """
        if (self.margin is None) == (self.quantity is None):
            raise MalformedInputError("Exactly one of margin or quantity must be provided")

        if self.margin is not None:
            return validate_positive(self.margin, "margin")

        quantity = validate_positive(self.quantity, "quantity")
        entry_price = validate_positive(self.entry_price, "entry_price")
        leverage = validate_leverage(self.leverage)
        return calculate_margin_for_quantity(quantity, entry_price, leverage)
