"""DTO utilities for service layer.

Provides standardized formatting for cost and quantity values placed in
serialized cost breakdowns and text summaries, so Decimal values survive
JSON serialization with a consistent number of places.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from src.utils.config import get_config
from src.utils.constants import COST_PRECISION

Number = Union[Decimal, float, int, str, None]


def cost_to_string(value: Number, precision: int = COST_PRECISION) -> str:
    """
    Convert a cost value to a fixed-place string.

    Args:
        value: Cost value (Decimal, float, int, str, or None)
        precision: Decimal places to keep (default 2)

    Returns:
        String formatted as "12.34" for the default precision.
        Returns "0.00" if value is None.

    Examples:
        >>> cost_to_string(Decimal("12.345"))
        '12.35'
        >>> cost_to_string(1.3)
        '1.30'
        >>> cost_to_string(None)
        '0.00'
        >>> cost_to_string("0.0008", precision=4)
        '0.0008'
    """
    if value is None:
        value = 0

    # Round half up, the way prices are quoted
    exponent = Decimal(1).scaleb(-precision)
    rounded = Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)

    return str(rounded)


def quantity_to_string(value: Number) -> str:
    """
    Convert a quantity to its shortest plain string.

    Trailing zeros are dropped and exponent notation is never used.

    Examples:
        >>> quantity_to_string(Decimal("250.000"))
        '250'
        >>> quantity_to_string("0.50")
        '0.5'
        >>> quantity_to_string(Decimal("1E+3"))
        '1000'
    """
    if value is None:
        return "0"

    text = format(Decimal(str(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def format_cost(
    amount: Number, currency_symbol: Optional[str] = None, precision: int = COST_PRECISION
) -> str:
    """
    Format a cost value for display.

    Args:
        amount: Cost amount
        currency_symbol: Symbol prefix; the configured symbol when None
        precision: Decimal places

    Returns:
        Formatted currency string (e.g., "£12.50")
    """
    if currency_symbol is None:
        currency_symbol = get_config().currency_symbol

    text = cost_to_string(amount, precision)
    if text.startswith("-"):
        return f"-{currency_symbol}{text[1:]}"
    return f"{currency_symbol}{text}"
