"""Computation blocks for slicing pie reporting.

This package contains the computation layer that turns a pie snapshot into
DataFrames suitable for Excel rendering or other consumption.

Architecture:
    Schemas (data models) → Blocks (computation) → DataFrames (output)

Key concepts:
- Blocks are reusable computation units with explicit dependencies
- Each block declares its inputs and outputs
- Dependency graph enables topological execution
- All outputs are pandas DataFrames for downstream consumption

Available blocks:
- EquityBlock: Slices and equity percentage per contributor
- ContributionsBlock: Active contributions grouped by contributor
- VestingBlock: Vested/unvested slices now and at projection dates
- ActivityBlock: Most recent deletions and restorations

Usage:
    from slicingpie_domain.blocks import BlockContext, BlockExecutor, EquityBlock, VestingBlock

    context = BlockContext()
    context.set("pie_data", ledger.export_data())
    context.set("as_of_date", date(2025, 6, 30))

    BlockExecutor([EquityBlock(), VestingBlock()]).execute(context)
    equity_df = context.get("equity_by_contributor")
"""

from .base import Block, BlockExecutor, BlockContext, CircularDependencyError, topological_sort
from .equity import EquityBlock
from .contributions import ContributionsBlock
from .vesting import VestingBlock
from .activity import ActivityBlock

__all__ = [
    "Block",
    "BlockExecutor",
    "BlockContext",
    "CircularDependencyError",
    "topological_sort",
    "EquityBlock",
    "ContributionsBlock",
    "VestingBlock",
    "ActivityBlock",
]
