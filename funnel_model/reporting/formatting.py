"""Display formatting for dashboard figures; non-finite values render as the infinity sign."""

import math

INFINITY_SYMBOL = "∞"
DAYS_PER_MONTH = 30


def format_currency(value: float) -> str:
    if not math.isfinite(value):
        return INFINITY_SYMBOL
    return f"${value:,.0f}"


def format_percentage(value: float) -> str:
    """Format a value already on the 0-100 scale."""
    if not math.isfinite(value):
        return INFINITY_SYMBOL
    return f"{value:.1f}%"


def format_months(value: float) -> str:
    if not math.isfinite(value):
        return INFINITY_SYMBOL
    if value < 1:
        return f"{value * DAYS_PER_MONTH:.0f} days"
    return f"{value:.1f} months"
