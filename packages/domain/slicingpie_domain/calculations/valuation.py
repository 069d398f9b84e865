"""Company valuation calculations.

Automatic valuations use an SDE multiple adjusted for growth and retention:

    base      = average profit x BASE_MULTIPLE
    growth    = 1 + (annual growth rate x 0.5),    clamped to [0.5, 2.0]
    retention = 1 - (churn rate / 100 x 0.3),      clamped to [0.5, 1.0]
    value     = max(0, base x growth x retention)

Example:
    2024 profit $80,000, 2025 profit $120,000, churn 10%:
        base      = 100,000 x 3      = 300,000
        growth    = 1 + 0.5 x 0.5    = 1.25
        retention = 1 - 0.1 x 0.3    = 0.97
        value     = 363,750 (medium confidence)
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import Optional

from ..schemas import (
    BASE_MULTIPLE,
    BusinessMetrics,
    ConfidenceLevel,
    ValidationIssue,
    ValidationResult,
    ValuationBreakdown,
    ValuationConfig,
    ValuationResult,
)
from .slices import Number, to_decimal

CENT = Decimal("0.01")

MIN_GROWTH_MULTIPLIER = Decimal("0.5")
MAX_GROWTH_MULTIPLIER = Decimal("2.0")
MIN_RETENTION_MULTIPLIER = Decimal("0.5")
MAX_RETENTION_MULTIPLIER = Decimal("1.0")

# Oldest profit year accepted, counted back from the current year
MAX_PROFIT_AGE_YEARS = 10

_SUFFIX_MULTIPLIERS = {"K": Decimal("1000"), "M": Decimal("1000000"), "B": Decimal("1000000000")}
_SUFFIXED_AMOUNT = re.compile(r"^([\d.]+)\s*([KMB])$", re.IGNORECASE)


def _clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return max(low, min(high, value))


# =============================================================================
# Currency conversion
# =============================================================================

def cents_to_dollars(cents: int) -> Decimal:
    return Decimal(cents) / 100


def dollars_to_cents(dollars: Number) -> int:
    """Whole cents, rounded half-even."""
    return int((to_decimal(dollars) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_EVEN))


def parse_currency_input(text: Optional[str]) -> Optional[Decimal]:
    """Parse a typed amount into dollars (to the cent).

    Accepts "$1,234", "1234.56" and suffixed amounts like "$1.2M", "500k".

    Returns:
        Dollars, or None if the text is blank or not a number
    """
    if text is None or not text.strip():
        return None
    cleaned = re.sub(r"[$,]", "", text).strip()

    multiplier = Decimal("1")
    match = _SUFFIXED_AMOUNT.match(cleaned)
    if match:
        cleaned = match.group(1)
        multiplier = _SUFFIX_MULTIPLIERS[match.group(2).upper()]

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return (amount * multiplier).quantize(CENT, rounding=ROUND_HALF_EVEN)


# =============================================================================
# Valuation
# =============================================================================

def _current_year(metrics: BusinessMetrics) -> int:
    return metrics.current_year if metrics.current_year is not None else date.today().year


def calculate_growth_multiplier(metrics: BusinessMetrics) -> Decimal:
    """Growth adjustment from the earliest to the latest profit year.

    Returns 1.0 when there is a single year of data, when the years span
    nothing, or when the earliest profit is 0.
    """
    profits = sorted(
        [(_current_year(metrics), metrics.current_year_profit)]
        + [(p.year, p.profit) for p in metrics.profit_history]
    )
    if len(profits) < 2:
        return Decimal("1.0")

    earliest_year, earliest = profits[0]
    latest_year, latest = profits[-1]
    years = latest_year - earliest_year
    if years == 0 or earliest == 0:
        return Decimal("1.0")

    growth_rate = (latest - earliest) / abs(earliest) / years
    return _clamp(1 + growth_rate * Decimal("0.5"), MIN_GROWTH_MULTIPLIER, MAX_GROWTH_MULTIPLIER)


def calculate_retention_multiplier(churn_rate: Optional[Number]) -> Decimal:
    """Retention adjustment from annual churn; unknown churn counts as full retention."""
    if churn_rate is None:
        return Decimal("1.0")
    multiplier = 1 - to_decimal(churn_rate) / 100 * Decimal("0.3")
    return _clamp(multiplier, MIN_RETENTION_MULTIPLIER, MAX_RETENTION_MULTIPLIER)


def get_confidence_level(metrics: BusinessMetrics) -> ConfidenceLevel:
    """Confidence from data completeness.

    high   - 3+ years of profit and a churn rate
    medium - 2+ years of profit, or a churn rate
    low    - current year only
    """
    years_of_data = len(metrics.profit_history) + 1
    has_churn = metrics.churn_rate is not None
    if years_of_data >= 3 and has_churn:
        return "high"
    if years_of_data >= 2 or has_churn:
        return "medium"
    return "low"


def calculate_valuation(metrics: BusinessMetrics) -> ValuationResult:
    """Estimate a valuation from business metrics.

    Negative average profits give a valuation of 0.
    """
    profits = [metrics.current_year_profit] + [p.profit for p in metrics.profit_history]
    average_profit = sum(profits, Decimal("0")) / len(profits)

    growth = calculate_growth_multiplier(metrics)
    retention = calculate_retention_multiplier(metrics.churn_rate)
    adjusted = average_profit * BASE_MULTIPLE * growth * retention

    return ValuationResult(
        value=max(Decimal("0"), adjusted).quantize(CENT, rounding=ROUND_HALF_EVEN),
        confidence=get_confidence_level(metrics),
        breakdown=ValuationBreakdown(
            average_profit=average_profit.quantize(CENT, rounding=ROUND_HALF_EVEN),
            base_multiple=BASE_MULTIPLE,
            growth_multiplier=growth.quantize(CENT, rounding=ROUND_HALF_EVEN),
            retention_multiplier=retention.quantize(CENT, rounding=ROUND_HALF_EVEN),
        ),
    )


def get_current_valuation(config: ValuationConfig) -> Optional[Decimal]:
    """Valuation in effect for a config: the manual value, or the automatic estimate.

    Returns None when the active mode has no input yet.
    """
    if config.mode == "manual":
        return config.manual_value
    if config.business_metrics is not None:
        return calculate_valuation(config.business_metrics).value
    return None


def validate_business_metrics(metrics: BusinessMetrics) -> ValidationResult:
    """Check profit years against the current year.

    History years must not be in the future or more than ten years back.
    """
    current_year = _current_year(metrics)
    issues = []
    for entry in metrics.profit_history:
        if entry.year > current_year:
            issues.append(ValidationIssue(field="profit_history", message=f"{entry.year} is in the future"))
        elif entry.year < current_year - MAX_PROFIT_AGE_YEARS:
            issues.append(ValidationIssue(field="profit_history", message=f"{entry.year} is too far in the past"))
    return ValidationResult(issues=issues)
