"""Equity computation block.

Converts a SlicingPieData snapshot into DataFrames for Excel rendering or
analysis.

Output DataFrames:
- equity_by_contributor: Per-contributor slices and equity percentages
- equity_summary: High-level metrics (total slices, counts, latest contribution)
"""

from typing import List, Optional
from decimal import Decimal
import pandas as pd

from .base import Block, BlockContext
from ..calculations import calculate_all_equity, calculate_equity_value, get_most_recent_contribution
from ..schemas import SlicingPieData


class EquityBlock(Block):
    """Converts SlicingPieData to equity DataFrames.

    Inputs (from context):
        - pie_data: SlicingPieData snapshot

    Outputs (to context):
        - equity_by_contributor: DataFrame with columns:
            * contributor_id
            * contributor_name
            * hourly_rate: Hourly rate (None if not set)
            * contributions_count: Active contributions
            * total_slices
            * equity_pct: Equity percentage (0-100)
            * equity_value: Dollar value at the valuation (only if valuation given)

        - equity_summary: DataFrame with single row:
            * company_name
            * total_slices
            * active_contributors / active_contributions
            * deleted_contributors / deleted_contributions
            * most_recent_contribution_date

    Rows keep the contributor order of the snapshot; sorting is left to
    whoever displays the data.
    """

    def __init__(self, data_key: str = "pie_data", valuation: Optional[Decimal] = None):
        """Initialize EquityBlock.

        Args:
            data_key: Context key for the SlicingPieData input
            valuation: Company valuation in dollars; adds an equity_value column
        """
        self.data_key = data_key
        self.valuation = valuation

    def inputs(self) -> List[str]:
        return [self.data_key]

    def outputs(self) -> List[str]:
        return ["equity_by_contributor", "equity_summary"]

    def execute(self, context: BlockContext) -> None:
        data: SlicingPieData = context.get(self.data_key)

        equity_df = self._compute_equity(data)
        context.set("equity_by_contributor", equity_df)
        context.set("equity_summary", self._compute_summary(data, equity_df))

    def _compute_equity(self, data: SlicingPieData) -> pd.DataFrame:
        columns = [
            "contributor_id",
            "contributor_name",
            "hourly_rate",
            "contributions_count",
            "total_slices",
            "equity_pct",
        ]
        if self.valuation is not None:
            columns.append("equity_value")

        equity = calculate_all_equity(data.contributors, data.contributions)
        total_slices = sum((c.total_slices for c in equity), Decimal("0"))

        rows = []
        for contributor in equity:
            count = sum(
                1 for c in data.contributions
                if c.contributor_id == contributor.id and not c.is_deleted
            )
            row = {
                "contributor_id": contributor.id,
                "contributor_name": contributor.name,
                "hourly_rate": float(contributor.hourly_rate) if contributor.hourly_rate is not None else None,
                "contributions_count": count,
                "total_slices": float(contributor.total_slices),
                "equity_pct": float(contributor.equity_percentage),
            }
            if self.valuation is not None:
                row["equity_value"] = float(
                    calculate_equity_value(contributor.total_slices, total_slices, self.valuation)
                )
            rows.append(row)

        return pd.DataFrame(rows, columns=columns)

    def _compute_summary(self, data: SlicingPieData, equity_df: pd.DataFrame) -> pd.DataFrame:
        latest = get_most_recent_contribution(data.contributions)
        return pd.DataFrame([{
            "company_name": data.company.name,
            "total_slices": float(equity_df["total_slices"].sum()) if not equity_df.empty else 0.0,
            "active_contributors": len(equity_df),
            "active_contributions": int(equity_df["contributions_count"].sum()) if not equity_df.empty else 0,
            "deleted_contributors": sum(1 for c in data.contributors if c.is_deleted),
            "deleted_contributions": sum(1 for c in data.contributions if c.is_deleted),
            "most_recent_contribution_date": latest.effective_date if latest else None,
        }])
