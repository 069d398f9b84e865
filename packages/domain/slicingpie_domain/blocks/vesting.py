"""Vesting block.

Computes vested and unvested slices per contributor at the as-of date,
plus one projection per configured future date.

Output DataFrames:
- vesting_by_contributor: Vesting position per contributor at the as-of date
- vesting_summary: Company-wide totals and next milestones
- vesting_projections: Long-format vested slices per (date, contributor)
"""

from datetime import date
from typing import List, Optional
import pandas as pd

from .base import Block, BlockContext
from ..calculations import (
    calculate_vesting_status,
    get_contributor_slices_map,
    get_vested_equity_data,
    get_vesting_summary,
)
from ..schemas import SlicingPieData, VestingProjectionCFG


class VestingBlock(Block):
    """Computes vesting positions for a pie snapshot.

    Inputs (from context):
        - pie_data: SlicingPieData snapshot
        - as_of_date: date (None = today)

    Outputs (to context):
        - vesting_by_contributor: DataFrame with columns:
            * contributor_id, contributor_name
            * vesting_state: none / pre_cliff / vesting / fully_vested
            * total_slices, vested_slices, unvested_slices
            * percent_vested
            * cliff_date, full_vest_date (None without a schedule)

        - vesting_summary: DataFrame with single row mirroring VestingSummary

        - vesting_projections: DataFrame with columns:
            * label: "Current" for the as-of date, then each projection label
            * as_of_date
            * contributor_id, contributor_name
            * vested_slices, unvested_slices, percent_vested
    """

    CURRENT_LABEL = "Current"

    def __init__(
        self,
        projections: Optional[List[VestingProjectionCFG]] = None,
        data_key: str = "pie_data",
        as_of_key: str = "as_of_date",
    ):
        """Initialize VestingBlock.

        Args:
            projections: Extra dates to project vesting to
            data_key: Context key for the SlicingPieData input
            as_of_key: Context key for the as-of date
        """
        self.projections = projections or []
        self.data_key = data_key
        self.as_of_key = as_of_key

    def inputs(self) -> List[str]:
        return [self.data_key, self.as_of_key]

    def outputs(self) -> List[str]:
        return ["vesting_by_contributor", "vesting_summary", "vesting_projections"]

    def execute(self, context: BlockContext) -> None:
        data: SlicingPieData = context.get(self.data_key)
        as_of: date = context.get(self.as_of_key) or date.today()

        slices_map = get_contributor_slices_map(data.contributors, data.contributions)

        context.set("vesting_by_contributor", self._compute_positions(data, slices_map, as_of))
        context.set("vesting_summary", self._compute_summary(data, slices_map, as_of))
        context.set("vesting_projections", self._compute_projections(data, slices_map, as_of))

    def _compute_positions(self, data: SlicingPieData, slices_map, as_of: date) -> pd.DataFrame:
        columns = [
            "contributor_id",
            "contributor_name",
            "vesting_state",
            "total_slices",
            "vested_slices",
            "unvested_slices",
            "percent_vested",
            "cliff_date",
            "full_vest_date",
        ]
        rows = []
        for contributor in data.contributors:
            if contributor.is_deleted:
                continue
            total = slices_map.get(contributor.id, 0)
            status = calculate_vesting_status(contributor, total, as_of)
            rows.append({
                "contributor_id": contributor.id,
                "contributor_name": contributor.name,
                "vesting_state": status.state,
                "total_slices": float(total),
                "vested_slices": float(status.vested_slices),
                "unvested_slices": float(status.unvested_slices),
                "percent_vested": float(status.percent_vested),
                "cliff_date": status.cliff_date,
                "full_vest_date": status.full_vest_date,
            })
        return pd.DataFrame(rows, columns=columns)

    def _compute_summary(self, data: SlicingPieData, slices_map, as_of: date) -> pd.DataFrame:
        summary = get_vesting_summary(data.contributors, slices_map, as_of)
        return pd.DataFrame([{
            "as_of_date": as_of,
            "total_slices": float(summary.total_slices),
            "total_vested_slices": float(summary.total_vested_slices),
            "total_unvested_slices": float(summary.total_unvested_slices),
            "overall_percent_vested": float(summary.overall_percent_vested),
            "next_cliff_date": summary.next_cliff_date,
            "next_full_vest_date": summary.next_full_vest_date,
            "contributors_pre_cliff": summary.contributors_pre_cliff,
            "contributors_vesting": summary.contributors_vesting,
            "contributors_fully_vested": summary.contributors_fully_vested,
        }])

    def _compute_projections(self, data: SlicingPieData, slices_map, as_of: date) -> pd.DataFrame:
        columns = [
            "label",
            "as_of_date",
            "contributor_id",
            "contributor_name",
            "vested_slices",
            "unvested_slices",
            "percent_vested",
        ]
        points = [(self.CURRENT_LABEL, as_of)] + [
            (p.display_label, p.as_of_date) for p in self.projections
        ]

        rows = []
        for label, point in points:
            for item in get_vested_equity_data(data.contributors, slices_map, point):
                rows.append({
                    "label": label,
                    "as_of_date": point,
                    "contributor_id": item.contributor_id,
                    "contributor_name": item.contributor_name,
                    "vested_slices": float(item.vested_slices),
                    "unvested_slices": float(item.unvested_slices),
                    "percent_vested": float(item.percent_vested),
                })
        return pd.DataFrame(rows, columns=columns)
