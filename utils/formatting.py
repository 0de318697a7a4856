"""
Formatting utilities.
"""

from typing import Optional


def format_currency(amount: Optional[float], currency: str = "USD", cents: bool = True) -> str:
    """
    Format an amount as currency.

    Args:
        amount: The amount in whole units (dollars, not cents).
        currency: Currency code (default USD).
        cents: Show two decimal places.

    Returns:
        Formatted currency string, or "N/A" when amount is None.
    """
    if amount is None:
        return "N/A"
    symbols = {"USD": "$"}
    symbol = symbols.get(currency, currency + " ")
    sign = "-" if amount < 0 else ""
    body = f"{abs(amount):,.2f}" if cents else f"{abs(amount):,.0f}"
    return f"{sign}{symbol}{body}"


def format_percent(value: float, decimals: int = 1, signed: bool = False) -> str:
    """
    Format a number as a percentage.

    Args:
        value: The percentage value.
        decimals: Number of decimal places.
        signed: Prefix positive values with "+".

    Returns:
        Formatted percentage string.
    """
    sign = "+" if signed and value > 0 else ""
    return f"{sign}{value:.{decimals}f}%"


def format_miles(value: Optional[float]) -> str:
    """Format a distance or odometer reading in miles."""
    if value is None:
        return "N/A"
    if float(value).is_integer():
        return f"{int(value):,} mi"
    return f"{value:,.1f} mi"
