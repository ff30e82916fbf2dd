"""Display formatting for integer currency amounts and percentages.

Stakes, liquidity and volume are ints. Shield amounts are Decimal; nothing
here ever converts money to float.
"""

from decimal import ROUND_HALF_UP, Decimal

_COMPACT_UNITS = (
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
)


def format_amount(value: int | Decimal) -> str:
    """6500 -> '$6,500.00', Decimal('-12.5') -> '-$12.50'."""
    quantized = Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if quantized < 0:
        return f"-${-quantized:,.2f}"
    return f"${quantized:,.2f}"


def _scale(magnitude: int, threshold: int) -> Decimal:
    return (Decimal(magnitude) / threshold).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def format_compact(value: int) -> str:
    """Short magnitude for volume badges: 999 -> '999', 1250 -> '1.3K', 3400000 -> '3.4M'."""
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    for i, (threshold, suffix) in enumerate(_COMPACT_UNITS):
        if magnitude >= threshold:
            scaled = _scale(magnitude, threshold)
            if scaled >= 1000 and i > 0:
                # rounding reached the next unit: 999_950 is '1M', not '1000K'
                threshold, suffix = _COMPACT_UNITS[i - 1]
                scaled = _scale(magnitude, threshold)
            text = f"{scaled:f}".removesuffix(".0")
            return f"{sign}{text}{suffix}"
    return f"{sign}{magnitude}"


def format_percentage(value: float | Decimal) -> str:
    """42.857 -> '42.9%'."""
    quantized = Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{quantized}%"
