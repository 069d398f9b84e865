"""Slicing pie domain schemas.

This package contains all Pydantic models for the slicing pie domain layer:
- Base types and conventions
- Contributors and vesting configuration
- Contributions and the multiplier table
- Activity events (audit trail)
- Computed equity and vesting views
- Company and whole-pie snapshots
- Structured operation results
- Company valuation inputs, results and history
- Report configuration

Usage:
    from slicingpie_domain.schemas import (
        Contributor, Contribution, VestingConfig,
        ActivityEvent, SlicingPieData, ReportCFG
    )
"""

# Base types
from .base import (
    DomainModel,
    LifecycleRecord,
    SliceCount,
    MoneyAmount,
    Multiplier,
    EntityId,
    generate_id,
    utc_now,
)

# Contributors
from .contributors import (
    Contributor,
    VestingConfig,
)

# Contributions
from .contributions import (
    Contribution,
    ContributionType,
    CONTRIBUTION_TYPES,
    CONTRIBUTION_TYPE_LABELS,
    MULTIPLIERS,
)

# Activity
from .activity import (
    ActivityEvent,
    ActivityAction,
    ActivityTargetKind,
)

# Computed views
from .equity import (
    ContributorWithEquity,
    VestingState,
    VestingStatus,
    VestedEquityDataItem,
    VestingSummary,
)

# Pie snapshot
from .pie import (
    Company,
    SlicingPieData,
)

# Results
from .results import (
    ValidationIssue,
    ValidationResult,
    ContributionResult,
    ImportResult,
    ChangeSet,
)

# Valuation
from .valuation import (
    BASE_MULTIPLE,
    BusinessMetrics,
    CONFIDENCE_DESCRIPTIONS,
    CONFIDENCE_LABELS,
    ConfidenceLevel,
    MAX_HISTORY_ENTRIES,
    ProfitYear,
    ValuationBreakdown,
    ValuationConfig,
    ValuationHistoryEntry,
    ValuationMode,
    ValuationResult,
)

# Report
from .report import (
    ReportCFG,
    VestingProjectionCFG,
)

__all__ = [
    # Base types
    "DomainModel",
    "LifecycleRecord",
    "SliceCount",
    "MoneyAmount",
    "Multiplier",
    "EntityId",
    "generate_id",
    "utc_now",
    # Contributors
    "Contributor",
    "VestingConfig",
    # Contributions
    "Contribution",
    "ContributionType",
    "CONTRIBUTION_TYPES",
    "CONTRIBUTION_TYPE_LABELS",
    "MULTIPLIERS",
    # Activity
    "ActivityEvent",
    "ActivityAction",
    "ActivityTargetKind",
    # Computed views
    "ContributorWithEquity",
    "VestingState",
    "VestingStatus",
    "VestedEquityDataItem",
    "VestingSummary",
    # Pie snapshot
    "Company",
    "SlicingPieData",
    # Results
    "ValidationIssue",
    "ValidationResult",
    "ContributionResult",
    "ImportResult",
    "ChangeSet",
    # Valuation
    "BASE_MULTIPLE",
    "BusinessMetrics",
    "CONFIDENCE_DESCRIPTIONS",
    "CONFIDENCE_LABELS",
    "ConfidenceLevel",
    "MAX_HISTORY_ENTRIES",
    "ProfitYear",
    "ValuationBreakdown",
    "ValuationConfig",
    "ValuationHistoryEntry",
    "ValuationMode",
    "ValuationResult",
    # Report
    "ReportCFG",
    "VestingProjectionCFG",
]
