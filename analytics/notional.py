"""
Conversion of Ostium notional values to USD.

The subgraph exposes two notional fields with different implied precision:
`notional` (position size, 6 decimals) and `tradeNotional` (trade level,
12 decimals). Which one is populated depends on the trade's lifecycle stage.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional, Union

NOTIONAL_SCALE = Decimal(10) ** 6
TRADE_NOTIONAL_SCALE = Decimal(10) ** 12

_ZERO = Decimal(0)


def _parse_positive(raw: Optional[Union[str, int, float, Decimal]]) -> Optional[Decimal]:
    """The value as a Decimal when it is a finite number greater than zero, else None."""
    if raw is None:
        return None
    try:
        value = raw if isinstance(raw, Decimal) else Decimal(str(raw))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not value.is_finite() or value <= 0:
        return None
    return value


def parse_notional(notional: Optional[str], trade_notional: Optional[str] = None) -> Decimal:
    """
    USD volume of a trade as an exact Decimal.

    `notional` wins when it is positive (divided by 1e6); otherwise a positive
    `trade_notional` is used (divided by 1e12); otherwise the volume is 0.
    Never raises.
    """
    primary = _parse_positive(notional)
    if primary is not None:
        return primary / NOTIONAL_SCALE
    secondary = _parse_positive(trade_notional)
    if secondary is not None:
        return secondary / TRADE_NOTIONAL_SCALE
    return _ZERO


def normalize_notional(notional: Optional[str], trade_notional: Optional[str] = None) -> float:
    """Float rendering of parse_notional, for display."""
    return float(parse_notional(notional, trade_notional))
