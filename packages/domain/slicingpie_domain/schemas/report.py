"""Report configuration - top-level entry point for Excel generation.

The ReportCFG is the root configuration object that ties together:
- The pie snapshot to report on
- The as-of date for current vesting and any projection dates
- Which sheets to include

This is what gets passed to the Excel renderer to generate the workbook.
"""

from typing import List, Optional
from datetime import date
from pydantic import Field, model_validator

from .base import DomainModel, MoneyAmount


# =============================================================================
# Vesting Projection Configuration
# =============================================================================

class VestingProjectionCFG(DomainModel):
    """A future (or past) date to project vesting to.

    Example:
        Show vesting one and two years out:
        - VestingProjectionCFG(as_of_date=date(2026, 1, 1), label="+1 year")
        - VestingProjectionCFG(as_of_date=date(2027, 1, 1), label="+2 years")
    """

    as_of_date: date = Field(
        description="Date to compute vested/unvested slices as of"
    )

    label: Optional[str] = Field(
        default=None,
        description="Column label. None = ISO date"
    )

    @property
    def display_label(self) -> str:
        return self.label or self.as_of_date.isoformat()


# =============================================================================
# Report Configuration
# =============================================================================

class ReportCFG(DomainModel):
    """Top-level configuration for the slicing pie Excel report.

    Typical workflows:

    Current state only:
        config = ReportCFG(as_of_date=date(2025, 6, 30))

    With vesting projections:
        config = ReportCFG(
            as_of_date=date(2025, 6, 30),
            vesting_projections=[
                VestingProjectionCFG(as_of_date=date(2026, 6, 30), label="+1 year"),
                VestingProjectionCFG(as_of_date=date(2027, 6, 30), label="+2 years"),
            ],
        )

    Generated sheets (depending on config):
        1. Equity - Slices and equity % per contributor (always)
        2. Contributions - Active contributions grouped by contributor
        3. Vesting - Vested/unvested slices as of each date
        4. Activity - Most recent deletions and restorations
    """

    as_of_date: Optional[date] = Field(
        default=None,
        description="Date for current vesting figures. None = today"
    )

    vesting_projections: List[VestingProjectionCFG] = Field(
        default_factory=list,
        description="Additional dates to project vesting to"
    )

    valuation: Optional[MoneyAmount] = Field(
        default=None,
        description="Company valuation in dollars; adds an equity value column when set"
    )

    include_contributions_sheet: bool = Field(
        default=True,
        description="Include contributions breakdown sheet"
    )

    include_vesting_sheet: bool = Field(
        default=True,
        description="Include vesting sheet"
    )

    include_activity_sheet: bool = Field(
        default=True,
        description="Include recent activity sheet"
    )

    recent_activity_limit: int = Field(
        default=10,
        ge=1,
        description="Number of activity events shown on the activity sheet"
    )

    @model_validator(mode='after')
    def validate_unique_projection_dates(self):
        """Validate that each projection date appears once."""
        dates = [p.as_of_date for p in self.vesting_projections]
        if len(dates) != len(set(dates)):
            raise ValueError("vesting_projections must have distinct dates")
        return self

