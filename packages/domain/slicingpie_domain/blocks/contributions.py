"""Contributions breakdown block.

Output DataFrames:
- contributions_breakdown: Active contributions grouped by contributor
"""

from typing import List
import pandas as pd

from .base import Block, BlockContext
from ..calculations import format_contribution_value, sort_contributions_by_date
from ..schemas import CONTRIBUTION_TYPE_LABELS, SlicingPieData


class ContributionsBlock(Block):
    """Lists active contributions, contributor by contributor.

    Inputs (from context):
        - pie_data: SlicingPieData snapshot

    Outputs (to context):
        - contributions_breakdown: DataFrame with columns:
            * contributor_id, contributor_name
            * contribution_id
            * date: Effective date
            * type, type_label
            * value: Raw value (hours or dollars)
            * value_display: "40 hrs" / "$5,000"
            * multiplier
            * slices
            * description

    Contributors appear in snapshot order; within a contributor,
    contributions are oldest first. Contributions of deleted contributors
    are never listed.
    """

    COLUMNS = [
        "contributor_id",
        "contributor_name",
        "contribution_id",
        "date",
        "type",
        "type_label",
        "value",
        "value_display",
        "multiplier",
        "slices",
        "description",
    ]

    def __init__(self, data_key: str = "pie_data"):
        self.data_key = data_key

    def inputs(self) -> List[str]:
        return [self.data_key]

    def outputs(self) -> List[str]:
        return ["contributions_breakdown"]

    def execute(self, context: BlockContext) -> None:
        data: SlicingPieData = context.get(self.data_key)

        rows = []
        for contributor in data.contributors:
            if contributor.is_deleted:
                continue
            owned = [
                c for c in data.contributions
                if c.contributor_id == contributor.id and not c.is_deleted
            ]
            for contribution in sort_contributions_by_date(owned, ascending=True):
                rows.append({
                    "contributor_id": contributor.id,
                    "contributor_name": contributor.name,
                    "contribution_id": contribution.id,
                    "date": contribution.effective_date,
                    "type": contribution.type,
                    "type_label": CONTRIBUTION_TYPE_LABELS[contribution.type],
                    "value": float(contribution.value),
                    "value_display": format_contribution_value(contribution.type, contribution.value),
                    "multiplier": float(contribution.multiplier),
                    "slices": float(contribution.slices),
                    "description": contribution.description or "",
                })

        context.set("contributions_breakdown", pd.DataFrame(rows, columns=self.COLUMNS))
