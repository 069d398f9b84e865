"""Computed equity and vesting views.

These models are outputs of the calculation layer. They are never stored by
the lifecycle managers; recompute them from the active records instead.
"""

from typing import Literal, Optional
from datetime import date
from decimal import Decimal
from pydantic import Field

from .base import DomainModel, EntityId, SliceCount
from .contributors import Contributor


VestingState = Literal["none", "pre_cliff", "vesting", "fully_vested"]


class ContributorWithEquity(Contributor):
    """Contributor with computed slice total and equity percentage."""

    total_slices: SliceCount = Field(
        description="Sum of slices over the contributor's active contributions"
    )

    equity_percentage: Decimal = Field(
        ge=0,
        description="Share of total company slices (0-100, unrounded)"
    )


class VestingStatus(DomainModel):
    """Vesting position of one contributor at a given date.

    Notes:
        - cliff_date is None when the schedule has no cliff
        - months_until_* are 0 once the milestone has passed
        - state "none" means no vesting schedule (fully vested)
    """

    state: VestingState
    percent_vested: Decimal = Field(
        ge=0,
        le=100,
        description="Percent vested (0-100, rounded to 2 decimals)"
    )
    vested_slices: SliceCount
    unvested_slices: SliceCount
    cliff_date: Optional[date] = None
    full_vest_date: Optional[date] = None
    months_until_cliff: int = 0
    months_until_full_vest: int = 0


class VestedEquityDataItem(DomainModel):
    """Per-contributor vested/unvested breakdown (chart and report row)."""

    contributor_id: EntityId
    contributor_name: str
    vested_slices: SliceCount
    unvested_slices: SliceCount
    total_slices: SliceCount
    percent_vested: Decimal
    vesting_state: VestingState


class VestingSummary(DomainModel):
    """Company-wide vesting totals at a given date."""

    total_vested_slices: SliceCount
    total_unvested_slices: SliceCount
    total_slices: SliceCount
    overall_percent_vested: Decimal = Field(
        description="Vested share of all slices (100 when there are no slices)"
    )
    next_cliff_date: Optional[date] = None
    next_full_vest_date: Optional[date] = None
    contributors_pre_cliff: int = 0
    contributors_vesting: int = 0
    contributors_fully_vested: int = 0
