"""Contribution models and the slice multiplier table.

Contributions are converted into slices with a fixed multiplier per type:

    | Type         | Value unit       | Slices                      |
    |--------------|------------------|-----------------------------|
    | time         | hours            | hours x hourly_rate x 2     |
    | cash         | dollars          | dollars x 4                 |
    | non-cash     | fair market $    | dollars x 2                 |
    | idea         | negotiated $     | dollars x 1                 |
    | relationship | negotiated $     | dollars x 1                 |
"""

from typing import Dict, Literal, Optional
from datetime import date
from decimal import Decimal
from pydantic import Field, model_validator

from .base import EntityId, LifecycleRecord, MoneyAmount, Multiplier, SliceCount


ContributionType = Literal["time", "cash", "non-cash", "idea", "relationship"]

CONTRIBUTION_TYPES = ("time", "cash", "non-cash", "idea", "relationship")

MULTIPLIERS: Dict[str, Decimal] = {
    "time": Decimal("2"),
    "cash": Decimal("4"),
    "non-cash": Decimal("2"),
    "idea": Decimal("1"),
    "relationship": Decimal("1"),
}

CONTRIBUTION_TYPE_LABELS: Dict[str, str] = {
    "time": "Time (Unpaid)",
    "cash": "Cash Investment",
    "non-cash": "Non-Cash (Equipment)",
    "idea": "Idea / IP",
    "relationship": "Relationship / Sales",
}


class Contribution(LifecycleRecord):
    """A single contribution made by a contributor.

    multiplier and slices are computed when the contribution is committed and
    stored with it, so historical contributions keep their value even if the
    contributor's hourly rate changes later.

    deleted_with_parent is set to the contributor ID only when the
    contribution was swept up by that contributor's deletion.

    Examples:
        Time contribution:
            contributor_id="sample-alice"
            type="time", value=40 (hours)
            multiplier=2, slices=12000 (40 x $150 x 2)

        Cash contribution:
            contributor_id="sample-carol"
            type="cash", value=5000
            multiplier=4, slices=20000
    """

    contributor_id: EntityId = Field(
        description="Owning contributor (immutable after creation)"
    )

    type: ContributionType = Field(
        description="Contribution type (determines the multiplier)"
    )

    value: Decimal = Field(
        gt=0,
        description="Raw value: hours for time, dollars for everything else"
    )

    dollar_equivalent: Optional[MoneyAmount] = Field(
        default=None,
        description="Negotiated dollar equivalent (informational, idea/relationship)"
    )

    description: Optional[str] = Field(
        default=None,
        description="Free-text description"
    )

    effective_date: date = Field(
        alias="date",
        description="Date the contribution was made"
    )

    multiplier: Multiplier = Field(
        description="Multiplier applied for this contribution's type"
    )

    slices: SliceCount = Field(
        description="Slices earned by this contribution"
    )

    @model_validator(mode='after')
    def validate_multiplier(self):
        """Validate that the stored multiplier matches the type."""
        expected = MULTIPLIERS[self.type]
        if self.multiplier != expected:
            raise ValueError(
                f"multiplier for {self.type} contributions must be {expected}, got {self.multiplier}"
            )
        return self
