"""Tests for the onboarding sample pie."""

from decimal import Decimal

from slicingpie_domain.calculations import calculate_all_equity, format_equity_percentage, format_slices
from slicingpie_domain.sample_data import (
    SAMPLE_COMPANY,
    SAMPLE_CONTRIBUTOR_IDS,
    build_sample_data,
    is_sample_data,
)


def test_sample_totals(sample_data):
    equity = {e.name: e for e in calculate_all_equity(sample_data.contributors, sample_data.contributions)}

    assert equity["Alice Developer"].total_slices == Decimal("20000")
    assert equity["Bob Designer"].total_slices == Decimal("8500")
    assert equity["Carol Investor"].total_slices == Decimal("20000")
    assert format_slices(sum(e.total_slices for e in equity.values())) == "48,500"


def test_sample_display_percentages(sample_data):
    equity = {e.name: e for e in calculate_all_equity(sample_data.contributors, sample_data.contributions)}

    assert format_equity_percentage(equity["Alice Developer"].equity_percentage) == "41.2%"
    assert format_equity_percentage(equity["Bob Designer"].equity_percentage) == "17.5%"
    assert format_equity_percentage(equity["Carol Investor"].equity_percentage) == "41.2%"


def test_sample_vesting_schedules(sample_data):
    by_id = {c.id: c for c in sample_data.contributors}
    assert by_id["sample-alice"].vesting.cliff_months == 12
    assert by_id["sample-bob"].vesting.vesting_months == 36
    assert by_id["sample-carol"].vesting is None


def test_sample_is_fresh_each_time():
    first = build_sample_data()
    first.company.name = "Changed"
    assert build_sample_data().company.name == SAMPLE_COMPANY.name == "Acme Startup"


def test_is_sample_data():
    assert is_sample_data(["someone", SAMPLE_CONTRIBUTOR_IDS[0]])
    assert not is_sample_data(["someone"])
    assert not is_sample_data([])
