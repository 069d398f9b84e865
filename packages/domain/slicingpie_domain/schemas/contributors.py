"""Contributor models.

A Contributor is a person who puts time, money, ideas or relationships into
the company and earns slices in return. Contributors are top-level records:
they can be soft-deleted and restored, but are never cascade-deleted.
"""

from typing import Optional
from datetime import date
from pydantic import Field, model_validator

from .base import DomainModel, LifecycleRecord, MoneyAmount


# =============================================================================
# Vesting Configuration
# =============================================================================

class VestingConfig(DomainModel):
    """Vesting schedule for a contributor's slices.

    Slices vest linearly from the start date over vesting_months, but nothing
    is recognized as vested until cliff_months have elapsed. The cliff gates
    visibility only; it does not restart the clock.

    Examples:
        Standard 4-year schedule with 1-year cliff:
            start_date=2023-01-01, cliff_months=12, vesting_months=48
            2023-06-01 -> 0% vested (pre-cliff)
            2024-01-01 -> 25% vested (cliff reached, 12/48)
            2027-01-01 -> 100% vested

        No cliff, 2-year monthly vesting:
            start_date=2024-01-01, cliff_months=0, vesting_months=24
    """

    start_date: date = Field(
        description="Date vesting starts counting from"
    )

    cliff_months: int = Field(
        default=12,
        ge=0,
        description="Months before any vesting is recognized (0-24 typical)"
    )

    vesting_months: int = Field(
        default=48,
        ge=1,
        description="Total vesting period in months (12-60 typical)"
    )

    @model_validator(mode='after')
    def validate_cliff_within_duration(self):
        """Validate that the cliff does not extend past full vesting."""
        if self.cliff_months > self.vesting_months:
            raise ValueError(
                f"cliff_months ({self.cliff_months}) cannot exceed "
                f"vesting_months ({self.vesting_months})"
            )
        return self


# =============================================================================
# Contributor
# =============================================================================

class Contributor(LifecycleRecord):
    """A person contributing to the startup.

    Examples:
        Founder working unpaid:
            name="Alice Developer"
            hourly_rate=150 (fair market rate, used for time contributions)
            vesting=VestingConfig(start_date=2024-01-01)

        Cash-only investor:
            name="Carol Investor"
            hourly_rate=0
            vesting=None (fully vested)
    """

    name: str = Field(
        min_length=1,
        description="Display name"
    )

    email: Optional[str] = Field(
        default=None,
        description="Contact email"
    )

    hourly_rate: Optional[MoneyAmount] = Field(
        default=None,
        description="Fair market hourly rate in dollars. Required before logging time contributions"
    )

    vesting: Optional[VestingConfig] = Field(
        default=None,
        description="Vesting schedule (None = fully vested)"
    )

    @model_validator(mode='after')
    def validate_top_level(self):
        """Contributors are top-level and never carry cascade provenance."""
        if self.deleted_with_parent is not None:
            raise ValueError("Contributors cannot be cascade-deleted (deleted_with_parent must be empty)")
        return self
