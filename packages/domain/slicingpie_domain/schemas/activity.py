"""Activity events: the audit trail of deletions and restorations.

Events are immutable facts. The target label is captured when the event is
recorded, so displaying the history never depends on the target record
still being resolvable.
"""

from typing import Literal, Optional
from datetime import datetime
from pydantic import ConfigDict, Field

from .base import DomainModel, EntityId, SliceCount


ActivityAction = Literal["deleted", "restored"]
ActivityTargetKind = Literal["contributor", "contribution"]


class ActivityEvent(DomainModel):
    """A single delete or restore action.

    Examples:
        Contributor deleted with two contributions:
            action="deleted", target_kind="contributor"
            target_label="Bob Designer"
            slices_affected=8500, cascade_count=2

        Single contribution restored:
            action="restored", target_kind="contribution"
            target_label="cash contribution (Carol Investor)"
            slices_affected=20000, cascade_count=None
    """

    model_config = ConfigDict(frozen=True)

    id: EntityId = Field(
        description="Unique event identifier"
    )

    action: ActivityAction = Field(
        description="What happened to the target"
    )

    target_kind: ActivityTargetKind = Field(
        description="Kind of record the action applied to"
    )

    target_id: EntityId = Field(
        description="ID of the record the action applied to"
    )

    target_label: str = Field(
        description="Display label of the target at the time of the event"
    )

    slices_affected: SliceCount = Field(
        description="Slices removed from or returned to the pie"
    )

    cascade_count: Optional[int] = Field(
        default=None,
        ge=0,
        description="Dependent contributions swept along (contributor events only)"
    )

    timestamp: datetime = Field(
        description="When the action happened"
    )
