"""Display formatting.

All display rounding is half-even at a fixed number of places:
    slices       -> whole slices, thousands separators   "48,500"
    equity %     -> 1 decimal                            "41.2%"
    currency     -> whole dollars                        "$5,000"
    compact      -> 1 decimal with K/M/B/T suffix        "$1.2M"
"""

from decimal import Decimal, ROUND_HALF_EVEN

from .slices import Number, to_decimal


def round_half_even(value: Number, places: int = 0) -> Decimal:
    """Round to a fixed number of decimal places, ties to even."""
    quantum = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(quantum, rounding=ROUND_HALF_EVEN)


def format_slices(slices: Number) -> str:
    return f"{round_half_even(slices):,}"


def format_equity_percentage(percentage: Number) -> str:
    return f"{round_half_even(percentage, 1):,}%"


def format_currency(amount: Number) -> str:
    rounded = round_half_even(amount)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,}"


def format_contribution_value(contribution_type: str, value: Number) -> str:
    """Hours for time contributions, dollars otherwise.

    Example:
        format_contribution_value("time", 1)     -> "1 hr"
        format_contribution_value("time", 40)    -> "40 hrs"
        format_contribution_value("cash", 5000)  -> "$5,000"
    """
    if contribution_type == "time":
        hours = to_decimal(value).normalize()
        if hours == hours.to_integral_value():
            hours = hours.quantize(Decimal(1))
        return f"{hours} hr{'' if hours == 1 else 's'}"
    return format_currency(value)


_COMPACT_UNITS = (
    (Decimal("1e12"), "T"),
    (Decimal("1e9"), "B"),
    (Decimal("1e6"), "M"),
    (Decimal("1e3"), "K"),
)


def format_compact_currency(amount: Number) -> str:
    """Short dollar amount for summaries, at most one decimal.

    Example:
        format_compact_currency(950)        -> "$950"
        format_compact_currency(1234)       -> "$1.2K"
        format_compact_currency(2500000)    -> "$2.5M"
        format_compact_currency(999999)     -> "$1M"
    """
    value = to_decimal(amount)
    magnitude = abs(value)
    if magnitude < 1000:
        return format_currency(value)

    for index, (unit, suffix) in enumerate(_COMPACT_UNITS):
        if magnitude >= unit:
            break
    scaled = round_half_even(magnitude / unit, 1)
    # 999,999 rounds to 1000K; show it as 1M
    if scaled >= 1000 and index > 0:
        unit, suffix = _COMPACT_UNITS[index - 1]
        scaled = round_half_even(magnitude / unit, 1)

    text = f"{scaled.normalize():f}"
    sign = "-" if value < 0 else ""
    return f"{sign}${text}{suffix}"
