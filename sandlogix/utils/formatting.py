# sandlogix/utils/formatting.py

import math

DEFAULT_CURRENCY = "GNF"


def format_currency(amount, currency: str = DEFAULT_CURRENCY) -> str:
    """
    Format an amount as whole currency units with ' ' as thousands separator.
    Example: 1234567.4 -> "1 234 567 GNF"
    """
    if amount is None:
        return f"0 {currency}"
    rounded = math.floor(float(amount) + 0.5)
    return f"{rounded:,d}".replace(",", " ") + f" {currency}"
