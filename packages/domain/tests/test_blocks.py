"""Tests for blocks architecture.

Tests cover:
- BlockContext get/set/has operations
- Topological sort and dependency resolution
- BlockExecutor validation and execution
- EquityBlock, ContributionsBlock, VestingBlock, ActivityBlock over the sample pie
"""

import pytest
from datetime import date
from decimal import Decimal

from slicingpie_domain.blocks import (
    ActivityBlock,
    Block,
    BlockContext,
    BlockExecutor,
    CircularDependencyError,
    ContributionsBlock,
    EquityBlock,
    VestingBlock,
    topological_sort,
)
from slicingpie_domain.lifecycle import SlicingPieLedger
from slicingpie_domain.schemas import SlicingPieData, VestingProjectionCFG

from fakes import SequentialIds, StepClock

AS_OF = date(2025, 6, 30)


# =============================================================================
# BlockContext Tests
# =============================================================================

def test_block_context_get_set():
    context = BlockContext()
    context.set("pie_data", "value")
    assert context.get("pie_data") == "value"
    assert context.has("pie_data")
    assert not context.has("other")
    assert context.keys() == ["pie_data"]


def test_block_context_get_missing_key():
    """Getting a missing key names the available keys."""
    context = BlockContext()
    context.set("present", 1)
    with pytest.raises(KeyError, match="Key 'missing' not found"):
        context.get("missing")


# =============================================================================
# Topological Sort Tests
# =============================================================================

class StubBlock(Block):
    """Writes '<name>_output' to each declared output."""

    def __init__(self, name, inputs, outputs):
        self.name = name
        self._inputs = inputs
        self._outputs = outputs

    def inputs(self):
        return self._inputs

    def outputs(self):
        return self._outputs

    def execute(self, context):
        for output in self._outputs:
            context.set(output, f"{self.name}_output")

    def __repr__(self):
        return f"StubBlock({self.name})"


def test_topological_sort_linear_chain():
    block_a = StubBlock("A", [], ["data_a"])
    block_b = StubBlock("B", ["data_a"], ["data_b"])
    block_c = StubBlock("C", ["data_b"], ["data_c"])

    assert topological_sort([block_c, block_a, block_b]) == [block_a, block_b, block_c]


def test_topological_sort_shared_dependency():
    block_a = StubBlock("A", [], ["data_a"])
    block_b = StubBlock("B", ["data_a"], ["data_b"])
    block_c = StubBlock("C", ["data_a"], ["data_c"])

    sorted_blocks = topological_sort([block_c, block_b, block_a])

    assert sorted_blocks[0] == block_a
    assert set(sorted_blocks[1:]) == {block_b, block_c}


def test_topological_sort_circular_dependency():
    block_a = StubBlock("A", ["data_c"], ["data_a"])
    block_b = StubBlock("B", ["data_a"], ["data_b"])
    block_c = StubBlock("C", ["data_b"], ["data_c"])

    with pytest.raises(CircularDependencyError, match="Circular dependency detected"):
        topological_sort([block_a, block_b, block_c])


def test_topological_sort_duplicate_output():
    with pytest.raises(ValueError, match="Multiple blocks produce"):
        topological_sort([StubBlock("A", [], ["data_a"]), StubBlock("B", [], ["data_a"])])


def test_topological_sort_external_inputs():
    """Inputs nobody produces come from the initial context."""
    block_a = StubBlock("A", ["pie_data"], ["data_a"])
    block_b = StubBlock("B", ["data_a"], ["data_b"])
    assert topological_sort([block_b, block_a]) == [block_a, block_b]


# =============================================================================
# BlockExecutor Tests
# =============================================================================

def test_block_executor_simple_chain():
    context = BlockContext()
    BlockExecutor([StubBlock("B", ["data_a"], ["data_b"]), StubBlock("A", [], ["data_a"])]).execute(context)
    assert context.get("data_a") == "A_output"
    assert context.get("data_b") == "B_output"


def test_block_executor_missing_input():
    executor = BlockExecutor([StubBlock("A", ["missing_input"], ["output"])])
    with pytest.raises(KeyError, match="requires input 'missing_input'"):
        executor.execute(BlockContext())


def test_block_executor_missing_output():
    class SilentBlock(Block):
        def inputs(self):
            return []

        def outputs(self):
            return ["output"]

        def execute(self, context):
            pass

    with pytest.raises(ValueError, match="declared output 'output' but didn't write"):
        BlockExecutor([SilentBlock()]).execute(BlockContext())


# =============================================================================
# Domain Blocks
# =============================================================================

def run_blocks(data, *blocks, as_of=AS_OF):
    context = BlockContext()
    context.set("pie_data", data)
    context.set("as_of_date", as_of)
    return BlockExecutor(list(blocks)).execute(context)


class TestEquityBlock:
    """Sample pie: Alice 20,000, Bob 8,500, Carol 20,000 (48,500 total)."""

    def test_equity_by_contributor(self, sample_data):
        equity_df = run_blocks(sample_data, EquityBlock()).get("equity_by_contributor")

        assert list(equity_df["contributor_name"]) == ["Alice Developer", "Bob Designer", "Carol Investor"]
        assert list(equity_df["total_slices"]) == [20000.0, 8500.0, 20000.0]
        assert list(equity_df["contributions_count"]) == [3, 2, 1]
        assert equity_df["equity_pct"].sum() == pytest.approx(100.0)
        assert equity_df.iloc[1]["equity_pct"] == pytest.approx(8500 / 48500 * 100)
        assert "equity_value" not in equity_df.columns

    def test_equity_value_with_valuation(self, sample_data):
        equity_df = run_blocks(sample_data, EquityBlock(valuation=Decimal("970000"))).get("equity_by_contributor")

        assert list(equity_df["equity_value"]) == [400000.0, 170000.0, 400000.0]

    def test_equity_summary(self, sample_data):
        summary = run_blocks(sample_data, EquityBlock()).get("equity_summary").iloc[0]

        assert summary["company_name"] == "Acme Startup"
        assert summary["total_slices"] == 48500.0
        assert summary["active_contributors"] == 3
        assert summary["active_contributions"] == 6
        assert summary["deleted_contributors"] == 0
        assert summary["most_recent_contribution_date"] == date(2024, 2, 1)

    def test_deleted_contributor_excluded(self, sample_data):
        ledger = SlicingPieLedger(clock=StepClock(), id_factory=SequentialIds())
        ledger.import_data(sample_data)
        ledger.remove_contributor("sample-bob")

        context = run_blocks(ledger.export_data(), EquityBlock())
        equity_df = context.get("equity_by_contributor")
        summary = context.get("equity_summary").iloc[0]

        assert list(equity_df["contributor_id"]) == ["sample-alice", "sample-carol"]
        assert list(equity_df["equity_pct"]) == [50.0, 50.0]
        assert summary["deleted_contributors"] == 1
        assert summary["deleted_contributions"] == 2

    def test_empty_pie(self):
        context = run_blocks(SlicingPieData(), EquityBlock())
        assert context.get("equity_by_contributor").empty
        summary = context.get("equity_summary").iloc[0]
        assert summary["total_slices"] == 0.0
        assert summary["most_recent_contribution_date"] is None


class TestContributionsBlock:
    """Breakdown grouped by contributor, oldest first."""

    def test_breakdown(self, sample_data):
        breakdown = run_blocks(sample_data, ContributionsBlock()).get("contributions_breakdown")

        assert list(breakdown["contribution_id"]) == [
            "contrib-6", "contrib-1", "contrib-2",   # Alice: idea 01-01, time 01-15, time 02-01
            "contrib-3", "contrib-4",                # Bob
            "contrib-5",                             # Carol
        ]
        assert breakdown["slices"].sum() == 48500.0

        first = breakdown.iloc[1]
        assert first["type_label"] == "Time (Unpaid)"
        assert first["value_display"] == "40 hrs"
        assert first["multiplier"] == 2.0
        assert first["slices"] == 12000.0

    def test_deleted_contributions_excluded(self, sample_data):
        ledger = SlicingPieLedger(clock=StepClock(), id_factory=SequentialIds())
        ledger.import_data(sample_data)
        ledger.remove_contribution("contrib-4")
        ledger.remove_contributor("sample-carol")

        breakdown = run_blocks(ledger.export_data(), ContributionsBlock()).get("contributions_breakdown")

        assert "contrib-4" not in set(breakdown["contribution_id"])
        assert "sample-carol" not in set(breakdown["contributor_id"])
        assert len(breakdown) == 4


class TestVestingBlock:
    """Vesting at 2025-06-30: Alice 17/48 vested, Bob 17/36, Carol no schedule."""

    def test_positions(self, sample_data):
        positions = run_blocks(sample_data, VestingBlock()).get("vesting_by_contributor")

        alice, bob, carol = positions.to_dict("records")
        assert alice["vesting_state"] == "vesting"
        assert alice["vested_slices"] == 7083.0
        assert alice["unvested_slices"] == 12917.0
        assert alice["percent_vested"] == 35.42
        assert alice["cliff_date"] == date(2025, 1, 1)
        assert bob["vested_slices"] == 4014.0
        assert bob["full_vest_date"] == date(2027, 1, 15)
        assert carol["vesting_state"] == "none"
        assert carol["vested_slices"] == 20000.0

    def test_summary(self, sample_data):
        summary = run_blocks(sample_data, VestingBlock()).get("vesting_summary").iloc[0]

        assert summary["total_vested_slices"] == 31097.0
        assert summary["total_unvested_slices"] == 17403.0
        assert summary["overall_percent_vested"] == 64.12
        assert summary["next_cliff_date"] is None
        assert summary["next_full_vest_date"] == date(2027, 1, 15)
        assert summary["contributors_vesting"] == 2
        assert summary["contributors_fully_vested"] == 1

    def test_projections(self, sample_data):
        block = VestingBlock(projections=[
            VestingProjectionCFG(as_of_date=date(2027, 1, 15), label="Bob fully vested"),
            VestingProjectionCFG(as_of_date=date(2030, 1, 1)),
        ])
        projections = run_blocks(sample_data, block).get("vesting_projections")

        assert list(projections["label"].unique()) == ["Current", "Bob fully vested", "2030-01-01"]
        final = projections[projections["label"] == "2030-01-01"]
        assert final["vested_slices"].sum() == 48500.0
        bob = projections[(projections["label"] == "Bob fully vested") & (projections["contributor_id"] == "sample-bob")]
        assert bob.iloc[0]["vested_slices"] == 8500.0

    def test_projected_vesting_is_monotonic(self, sample_data):
        block = VestingBlock(projections=[
            VestingProjectionCFG(as_of_date=date(2025 + years, 6, 30)) for years in range(1, 11)
        ])
        projections = run_blocks(sample_data, block).get("vesting_projections")

        for _, group in projections.groupby("contributor_id"):
            vested = list(group.sort_values("as_of_date")["vested_slices"])
            assert vested == sorted(vested)

    def test_as_of_none_means_today(self, sample_data):
        positions = run_blocks(sample_data, VestingBlock(), as_of=None).get("vesting_by_contributor")
        assert len(positions) == 3


class TestActivityBlock:
    """Recent activity newest first, limited."""

    def test_recent_activity(self, sample_data):
        ledger = SlicingPieLedger(clock=StepClock(), id_factory=SequentialIds())
        ledger.import_data(sample_data)
        ledger.remove_contribution("contrib-4")
        ledger.remove_contributor("sample-bob")
        ledger.restore_contributor("sample-bob")

        activity = run_blocks(ledger.export_data(), ActivityBlock(limit=2)).get("recent_activity")

        assert len(activity) == 2
        assert list(activity["action"]) == ["restored", "deleted"]
        assert list(activity["target_label"]) == ["Bob Designer", "Bob Designer"]
        assert activity.iloc[0]["slices_affected"] == 7500.0
        assert activity.iloc[0]["cascade_count"] == 1

    def test_negative_limit_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            ActivityBlock(limit=-1)

    def test_no_activity(self, sample_data):
        assert run_blocks(sample_data, ActivityBlock()).get("recent_activity").empty


def test_full_report_pipeline(sample_data):
    """All blocks run together in dependency order."""
    blocks = [ActivityBlock(), VestingBlock(), ContributionsBlock(), EquityBlock()]
    context = run_blocks(sample_data, *blocks)
    for key in (
        "equity_by_contributor",
        "equity_summary",
        "contributions_breakdown",
        "vesting_by_contributor",
        "vesting_summary",
        "vesting_projections",
        "recent_activity",
    ):
        assert context.has(key)
