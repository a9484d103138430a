"""
Pricing: total price derived from the selected duration.

The total is never stored; callers recompute it from the current duration
and the venue rate whenever they need it.
"""

from __future__ import annotations

import math

from playgrounds.core.schemas import Duration


def compute_total_price(duration: Duration | None, price_per_hour: float | None) -> float:
    """
    Return `rate * minutes / 60`.

    The rate is the duration's own base price when the backend supplies one,
    otherwise the venue's hourly price. An unset duration is "not yet
    computable" and prices at 0.
    """
    if duration is None or not duration.minutes or duration.minutes <= 0:
        return 0.0

    rate = duration.base_price if duration.base_price is not None else price_per_hour
    if rate is None:
        return 0.0

    total = float(rate) * (duration.minutes / 60)
    return total if math.isfinite(total) else 0.0


def format_money(amount: float | None, currency: str) -> str:
    if amount is None or (isinstance(amount, float) and math.isnan(amount)):
        return "--"
    return f"{float(amount):.2f} {currency}"
