"""Company valuation models.

A valuation is either entered by hand or estimated from business metrics
with a seller's-discretionary-earnings multiple:

    value = average profit x BASE_MULTIPLE x growth x retention

All amounts are dollars (Decimal). Profits may be negative; valuations
never are.
"""

from typing import List, Literal, Optional
from datetime import datetime
from decimal import Decimal
from pydantic import Field, field_validator, model_validator

from .base import DomainModel, EntityId, MoneyAmount


ValuationMode = Literal["manual", "auto"]
ConfidenceLevel = Literal["high", "medium", "low"]

# SDE multiple for small businesses
BASE_MULTIPLE = Decimal("3.0")

MAX_HISTORY_ENTRIES = 20

MAX_PROFIT_HISTORY_YEARS = 5

CONFIDENCE_LABELS = {
    "high": "High Confidence",
    "medium": "Medium Confidence",
    "low": "Low Confidence",
}

CONFIDENCE_DESCRIPTIONS = {
    "high": "3+ years of profit data with churn rate provides a reliable estimate",
    "medium": "Limited historical data - estimate may be less accurate",
    "low": "Only current year data - consider adding historical data for better accuracy",
}


# =============================================================================
# Business Metrics
# =============================================================================

class ProfitYear(DomainModel):
    """Profit for one past year."""

    year: int = Field(description="Calendar year, e.g. 2024")
    profit: Decimal = Field(description="Profit in dollars (may be negative)")


class BusinessMetrics(DomainModel):
    """Inputs for an automatic valuation.

    Examples:
        Current year only (low confidence):
            current_year_profit=120000

        Two years with churn (medium confidence):
            current_year_profit=120000
            profit_history=[ProfitYear(year=2024, profit=80000)]
            churn_rate=10
    """

    current_year_profit: Decimal = Field(
        default=Decimal("0"),
        description="Profit so far this year in dollars (may be negative)"
    )

    profit_history: List[ProfitYear] = Field(
        default_factory=list,
        max_length=MAX_PROFIT_HISTORY_YEARS,
        description="Previous years' profits"
    )

    churn_rate: Optional[Decimal] = Field(
        default=None,
        ge=0,
        le=100,
        description="Annual customer churn in percent (0-100). None = unknown"
    )

    current_year: Optional[int] = Field(
        default=None,
        description="Year current_year_profit belongs to. None = this year"
    )

    @field_validator('profit_history')
    @classmethod
    def validate_unique_years(cls, v: List[ProfitYear]) -> List[ProfitYear]:
        """Validate that each history year appears once."""
        years = [p.year for p in v]
        if len(years) != len(set(years)):
            raise ValueError("profit_history must have distinct years")
        return v


# =============================================================================
# Configuration and Results
# =============================================================================

class ValuationConfig(DomainModel):
    """Stored valuation settings."""

    enabled: bool = False
    disclaimer_acknowledged: bool = False
    mode: ValuationMode = "manual"

    manual_value: Optional[MoneyAmount] = Field(
        default=None,
        description="Hand-entered valuation in dollars"
    )

    business_metrics: Optional[BusinessMetrics] = None

    last_updated: Optional[datetime] = None

    @field_validator('manual_value')
    @classmethod
    def validate_positive_manual_value(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v <= 0:
            raise ValueError("Valuation must be a positive amount")
        return v


class ValuationBreakdown(DomainModel):
    """How an automatic valuation was reached."""

    average_profit: Decimal = Field(description="Mean of all profit years, to the cent")
    base_multiple: Decimal
    growth_multiplier: Decimal = Field(description="0.5-2.0, to 2 decimals")
    retention_multiplier: Decimal = Field(description="0.5-1.0, to 2 decimals")


class ValuationResult(DomainModel):
    """Automatic valuation with confidence and breakdown."""

    value: MoneyAmount = Field(description="Valuation in dollars, to the cent")
    confidence: ConfidenceLevel
    breakdown: ValuationBreakdown


class ValuationHistoryEntry(DomainModel):
    """A saved valuation and the inputs that produced it."""

    id: EntityId
    timestamp: datetime
    mode: ValuationMode
    value: MoneyAmount
    manual_value: Optional[MoneyAmount] = None
    business_metrics: Optional[BusinessMetrics] = None

    @model_validator(mode='after')
    def validate_inputs_for_mode(self):
        """Validate that the entry keeps the input its mode needs."""
        if self.mode == "manual" and self.manual_value is None:
            raise ValueError("manual entries require manual_value")
        if self.mode == "auto" and self.business_metrics is None:
            raise ValueError("auto entries require business_metrics")
        return self
