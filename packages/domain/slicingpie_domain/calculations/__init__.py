"""Pure slice, equity, vesting and valuation calculations.

Nothing in this package holds state or performs I/O. Functions take the
records to compute over and return new values.

Usage:
    from slicingpie_domain.calculations import calculate_slices, calculate_all_equity

    slices = calculate_slices("time", 10, hourly_rate=50)   # Decimal("1000")
    equity = calculate_all_equity(contributors, contributions)
"""

from .slices import (
    calculate_slices,
    get_multiplier,
    preview_slices,
    to_decimal,
    validate_contribution_input,
)
from .equity import (
    calculate_all_equity,
    calculate_equity_percentage,
    calculate_equity_value,
    get_contributor_slices_map,
    get_most_recent_contribution,
    get_total_slices,
    sort_contributions_by_date,
)
from .vesting import (
    calculate_vesting_status,
    get_cliff_date,
    get_full_vest_date,
    get_vested_equity_data,
    get_vesting_summary,
    months_between,
)
from .valuation import (
    calculate_growth_multiplier,
    calculate_retention_multiplier,
    calculate_valuation,
    cents_to_dollars,
    dollars_to_cents,
    get_confidence_level,
    get_current_valuation,
    parse_currency_input,
    validate_business_metrics,
)
from .formatting import (
    format_compact_currency,
    format_contribution_value,
    format_currency,
    format_equity_percentage,
    format_slices,
    round_half_even,
)

__all__ = [
    # Slices
    "calculate_slices",
    "get_multiplier",
    "preview_slices",
    "to_decimal",
    "validate_contribution_input",
    # Equity
    "calculate_all_equity",
    "calculate_equity_percentage",
    "calculate_equity_value",
    "get_contributor_slices_map",
    "get_most_recent_contribution",
    "get_total_slices",
    "sort_contributions_by_date",
    # Vesting
    "calculate_vesting_status",
    "get_cliff_date",
    "get_full_vest_date",
    "get_vested_equity_data",
    "get_vesting_summary",
    "months_between",
    # Valuation
    "calculate_growth_multiplier",
    "calculate_retention_multiplier",
    "calculate_valuation",
    "cents_to_dollars",
    "dollars_to_cents",
    "get_confidence_level",
    "get_current_valuation",
    "parse_currency_input",
    "validate_business_metrics",
    # Formatting
    "format_compact_currency",
    "format_contribution_value",
    "format_currency",
    "format_equity_percentage",
    "format_slices",
    "round_half_even",
]
