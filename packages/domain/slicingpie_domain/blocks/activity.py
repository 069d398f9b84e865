"""Recent activity block.

Output DataFrames:
- recent_activity: Most recent deletions and restorations, newest first
"""

from typing import List
import pandas as pd

from .base import Block, BlockContext
from ..lifecycle import ActivityLog
from ..schemas import SlicingPieData


class ActivityBlock(Block):
    """Lists the most recent activity events of a snapshot.

    Inputs (from context):
        - pie_data: SlicingPieData snapshot

    Outputs (to context):
        - recent_activity: DataFrame with columns:
            * timestamp
            * action: deleted / restored
            * target_kind: contributor / contribution
            * target_label
            * slices_affected
            * cascade_count (None for contribution events)
    """

    COLUMNS = [
        "timestamp",
        "action",
        "target_kind",
        "target_label",
        "slices_affected",
        "cascade_count",
    ]

    def __init__(self, limit: int = 10, data_key: str = "pie_data"):
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        self.limit = limit
        self.data_key = data_key

    def inputs(self) -> List[str]:
        return [self.data_key]

    def outputs(self) -> List[str]:
        return ["recent_activity"]

    def execute(self, context: BlockContext) -> None:
        data: SlicingPieData = context.get(self.data_key)
        log = ActivityLog(events=data.activity_events)

        rows = [
            {
                "timestamp": event.timestamp,
                "action": event.action,
                "target_kind": event.target_kind,
                "target_label": event.target_label,
                "slices_affected": float(event.slices_affected),
                "cascade_count": event.cascade_count,
            }
            for event in log.get_recent_events(self.limit)
        ]
        context.set("recent_activity", pd.DataFrame(rows, columns=self.COLUMNS))
