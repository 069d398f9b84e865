"""Tests for slice calculation, input validation and display formatting.

Tests cover:
- Multiplier table per contribution type
- Time contributions priced at the contributor's hourly rate
- Missing hourly rate rejected, never defaulted
- Input validation reported as structured issues
- Half-even rounding for display
"""

import pytest
from decimal import Decimal

from slicingpie_domain.calculations import (
    calculate_slices,
    format_contribution_value,
    format_currency,
    format_equity_percentage,
    format_slices,
    get_multiplier,
    preview_slices,
    round_half_even,
    to_decimal,
    validate_contribution_input,
)


# =============================================================================
# calculate_slices
# =============================================================================

@pytest.mark.parametrize("contribution_type,multiplier", [
    ("cash", 4),
    ("non-cash", 2),
    ("idea", 1),
    ("relationship", 1),
])
def test_non_time_slices_are_value_times_multiplier(contribution_type, multiplier):
    """Every non-time type is value x multiplier(type)."""
    for value in (Decimal("1"), Decimal("0.5"), Decimal("1234.56")):
        assert calculate_slices(contribution_type, value) == value * multiplier


def test_time_slices():
    """10 hours at $50/hr -> 1,000 slices."""
    assert calculate_slices("time", 10, 50) == Decimal("1000")


def test_time_slices_fractional_hours():
    assert calculate_slices("time", Decimal("1.5"), Decimal("150")) == Decimal("450")


def test_hourly_rate_ignored_for_non_time():
    assert calculate_slices("cash", 1000, hourly_rate=999) == Decimal("4000")


def test_time_requires_hourly_rate():
    """A missing rate is never treated as 0."""
    with pytest.raises(ValueError, match="hourly_rate is required"):
        calculate_slices("time", 10)


def test_zero_hourly_rate_is_allowed():
    assert calculate_slices("time", 10, 0) == Decimal("0")


def test_unknown_type_rejected():
    with pytest.raises(ValueError, match="Unknown contribution type"):
        calculate_slices("sweat", 10)


def test_calculate_slices_is_repeatable():
    """Identical inputs give identical outputs (safe for live previews)."""
    results = {calculate_slices("time", "7.25", "80") for _ in range(5)}
    assert results == {Decimal("1160.00")}


def test_float_input_has_no_binary_artifacts():
    assert calculate_slices("cash", 0.1) == Decimal("0.4")


def test_get_multiplier():
    assert get_multiplier("cash") == Decimal("4")
    with pytest.raises(ValueError):
        get_multiplier("bogus")


def test_to_decimal_rejects_non_numbers():
    for bad in ("abc", None, True, object()):
        with pytest.raises(ValueError, match="Not a number"):
            to_decimal(bad)


# =============================================================================
# validate_contribution_input / preview_slices
# =============================================================================

class TestValidateContributionInput:
    """Validation failures are returned, not raised."""

    def test_valid_cash(self):
        assert validate_contribution_input("cash", 100).is_valid

    def test_valid_time(self):
        assert validate_contribution_input("time", 8, 100).is_valid

    @pytest.mark.parametrize("value", [0, -5, "0", Decimal("-0.01")])
    def test_non_positive_value(self, value):
        result = validate_contribution_input("cash", value)
        assert not result.is_valid
        assert result.issues[0].field == "value"
        assert "greater than zero" in result.issues[0].message

    @pytest.mark.parametrize("value", [float("inf"), float("nan"), "Infinity", "NaN"])
    def test_non_finite_value(self, value):
        result = validate_contribution_input("cash", value)
        assert not result.is_valid
        assert result.issues[0].field == "value"

    def test_non_numeric_value(self):
        result = validate_contribution_input("cash", "lots")
        assert result.messages() == ["value: must be a number"]

    def test_missing_hourly_rate_for_time(self):
        result = validate_contribution_input("time", 10, None)
        assert not result.is_valid
        assert [i.field for i in result.issues] == ["hourly_rate"]

    def test_negative_hourly_rate_for_time(self):
        result = validate_contribution_input("time", 10, -20)
        assert [i.field for i in result.issues] == ["hourly_rate"]

    def test_unknown_type(self):
        result = validate_contribution_input("sweat", 10)
        assert [i.field for i in result.issues] == ["type"]

    def test_reports_every_issue(self):
        result = validate_contribution_input("time", -1, None)
        assert {i.field for i in result.issues} == {"value", "hourly_rate"}


def test_preview_slices_valid():
    assert preview_slices("idea", 2000) == Decimal("2000")


def test_preview_slices_invalid_returns_none():
    assert preview_slices("time", 10) is None
    assert preview_slices("cash", 0) is None
    assert preview_slices("cash", "") is None


# =============================================================================
# Formatting
# =============================================================================

class TestFormatting:
    """Display rounding is half-even."""

    def test_round_half_even(self):
        assert round_half_even(Decimal("0.5")) == Decimal("0")
        assert round_half_even(Decimal("1.5")) == Decimal("2")
        assert round_half_even(Decimal("2.5")) == Decimal("2")
        assert round_half_even(Decimal("41.25"), 1) == Decimal("41.2")
        assert round_half_even(Decimal("41.35"), 1) == Decimal("41.4")

    def test_format_slices(self):
        assert format_slices(Decimal("48500")) == "48,500"
        assert format_slices(Decimal("1000.5")) == "1,000"
        assert format_slices(0) == "0"

    def test_format_equity_percentage(self):
        assert format_equity_percentage(Decimal("20000") / Decimal("48500") * 100) == "41.2%"
        assert format_equity_percentage(Decimal("8500") / Decimal("48500") * 100) == "17.5%"
        assert format_equity_percentage(100) == "100.0%"

    def test_format_currency(self):
        assert format_currency(5000) == "$5,000"
        assert format_currency(Decimal("1234.5")) == "$1,234"
        assert format_currency(-250) == "-$250"

    def test_format_contribution_value(self):
        assert format_contribution_value("time", 1) == "1 hr"
        assert format_contribution_value("time", 40) == "40 hrs"
        assert format_contribution_value("time", Decimal("2.50")) == "2.5 hrs"
        assert format_contribution_value("cash", 5000) == "$5,000"
