"""
Financial data types for the leveraged trading simulator.

All money, price and percentage values are Decimal. Simulated balances are
compared for exact equality in the ledger reconciliation, which float
arithmetic cannot guarantee.

Precision rules:
- Amounts (cash, margin, P&L) are quantized to FINANCIAL_DECIMALS places
- Percentages are kept unrounded for threshold checks and rounded only for display
- Prices are kept as received
"""

from decimal import ROUND_HALF_EVEN, Decimal

# Financial calculation precision (number of decimal places)
FINANCIAL_DECIMALS = 8  # 8 decimal places (crypto standard)
PERCENTAGE_DECIMALS = 4  # 4 decimal places for percentages

# Common financial values as Decimal constants
ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

_AMOUNT_QUANTUM = Decimal(1).scaleb(-FINANCIAL_DECIMALS)
_PERCENTAGE_QUANTUM = Decimal(1).scaleb(-PERCENTAGE_DECIMALS)


def to_decimal(value: str | int | float | Decimal) -> Decimal:
    """Convert various numeric types to Decimal.

    Floats go through their shortest repr so that 0.1 becomes Decimal("0.1")
    rather than its binary expansion.

    Examples:
        >>> to_decimal(50000)
        Decimal('50000')
        >>> to_decimal(0.1)
        Decimal('0.1')
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a numeric amount")
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_amount(amount: Decimal) -> Decimal:
    """Round amount to appropriate precision for trading."""
    return amount.quantize(_AMOUNT_QUANTUM, rounding=ROUND_HALF_EVEN)


def round_percentage(percentage: Decimal) -> Decimal:
    """Round percentage to display precision."""
    return percentage.quantize(_PERCENTAGE_QUANTUM, rounding=ROUND_HALF_EVEN)


def calculate_notional_size(margin: Decimal, leverage: int) -> Decimal:
    """Calculate notional exposure backed by a margin amount.

    Args:
        margin: Cash reserved for the position
        leverage: Leverage multiplier

    Returns:
        Notional size (margin x leverage)
    """
    if leverage <= 0:
        raise ValueError(f"Leverage must be positive, got {leverage}")

    return round_amount(margin * leverage)


def calculate_quantity(notional_size: Decimal, entry_price: Decimal) -> Decimal:
    """Calculate asset units covered by a notional size at the entry price."""
    if entry_price <= ZERO:
        raise ValueError(f"Entry price must be positive, got {entry_price}")

    return round_amount(notional_size / entry_price)


def calculate_margin_for_quantity(quantity: Decimal, price: Decimal, leverage: int) -> Decimal:
    """Calculate the margin needed to hold a quantity of an asset with leverage."""
    if leverage <= 0:
        raise ValueError(f"Leverage must be positive, got {leverage}")

    return round_amount(quantity * price / leverage)


def calculate_pnl_percent(
    entry_price: Decimal,
    mark_price: Decimal,
    leverage: int,
    position_type: str,
) -> Decimal:
    """Calculate leveraged PnL as a percentage of margin.

    Args:
        entry_price: Entry price of position
        mark_price: Current or closing price
        leverage: Leverage multiplier
        position_type: 'LONG' or 'SHORT'

    Returns:
        Signed PnL percentage
    """
    position_type_upper = position_type.upper()

    if position_type_upper == "LONG":
        move = mark_price - entry_price
    elif position_type_upper == "SHORT":
        move = entry_price - mark_price
    else:
        raise ValueError(f"Invalid position type: {position_type}")

    return move / entry_price * HUNDRED * leverage


def calculate_pnl_amount(notional_size: Decimal, pnl_percent: Decimal) -> Decimal:
    """Calculate PnL in cash from notional size and PnL percentage."""
    return round_amount(notional_size * pnl_percent / HUNDRED)


def calculate_performance_percent(total_value: Decimal, initial_balance: Decimal) -> Decimal:
    """Calculate portfolio performance relative to the initial balance."""
    if initial_balance <= ZERO:
        raise ValueError(f"Initial balance must be positive, got {initial_balance}")

    return (total_value - initial_balance) / initial_balance * HUNDRED
