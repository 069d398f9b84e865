"""Sample pie for onboarding and demos.

Summary (48,500 slices in total):

    Alice Developer  time 40h + 20h @ $150 x 2 = 18,000  + idea 2,000  -> 20,000 (41.2%)
    Bob Designer     time 30h @ $125 x 2       =  7,500  + non-cash $500 x 2 = 1,000 -> 8,500 (17.5%)
    Carol Investor   cash $5,000 x 4           = 20,000                       -> 20,000 (41.2%)

Slices are computed with calculate_slices() rather than hardcoded, so the
sample always agrees with the multiplier table.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List

from .calculations import calculate_slices, get_multiplier
from .schemas import Company, Contribution, Contributor, SlicingPieData, VestingConfig

SAMPLE_COMPANY = Company(
    name="Acme Startup",
    description="A sample company for demonstration purposes",
)

SAMPLE_CONTRIBUTOR_IDS = ("sample-alice", "sample-bob", "sample-carol")


def _ts(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def build_sample_contributors() -> List[Contributor]:
    return [
        Contributor(
            id="sample-alice",
            name="Alice Developer",
            email="alice@example.com",
            hourly_rate=Decimal("150"),
            vesting=VestingConfig(start_date=date(2024, 1, 1), cliff_months=12, vesting_months=48),
            created_at=_ts(2024, 1, 1),
            updated_at=_ts(2024, 1, 1),
        ),
        Contributor(
            id="sample-bob",
            name="Bob Designer",
            email="bob@example.com",
            hourly_rate=Decimal("125"),
            vesting=VestingConfig(start_date=date(2024, 1, 15), cliff_months=6, vesting_months=36),
            created_at=_ts(2024, 1, 15),
            updated_at=_ts(2024, 1, 15),
        ),
        Contributor(
            id="sample-carol",
            name="Carol Investor",
            email="carol@example.com",
            hourly_rate=Decimal("0"),
            created_at=_ts(2024, 2, 1),
            updated_at=_ts(2024, 2, 1),
        ),
    ]


def build_sample_contributions(contributors: List[Contributor]) -> List[Contribution]:
    rates = {c.id: c.hourly_rate for c in contributors}
    rows = [
        ("contrib-1", "sample-alice", "time", "40", "Initial product development and architecture", date(2024, 1, 15)),
        ("contrib-2", "sample-alice", "time", "20", "MVP feature implementation", date(2024, 2, 1)),
        ("contrib-3", "sample-bob", "time", "30", "UI/UX design and branding", date(2024, 1, 20)),
        ("contrib-4", "sample-bob", "non-cash", "500", "Personal laptop contributed to project", date(2024, 1, 25)),
        ("contrib-5", "sample-carol", "cash", "5000", "Seed investment for initial operations", date(2024, 2, 1)),
        ("contrib-6", "sample-alice", "idea", "2000", "Original product concept and business model", date(2024, 1, 1)),
    ]
    return [
        Contribution(
            id=contribution_id,
            contributor_id=contributor_id,
            type=contribution_type,
            value=Decimal(value),
            description=description,
            effective_date=effective_date,
            multiplier=get_multiplier(contribution_type),
            slices=calculate_slices(contribution_type, Decimal(value), rates[contributor_id]),
            created_at=_ts(effective_date.year, effective_date.month, effective_date.day),
            updated_at=_ts(effective_date.year, effective_date.month, effective_date.day),
        )
        for contribution_id, contributor_id, contribution_type, value, description, effective_date in rows
    ]


def build_sample_data() -> SlicingPieData:
    contributors = build_sample_contributors()
    return SlicingPieData(
        company=SAMPLE_COMPANY.model_copy(),
        contributors=contributors,
        contributions=build_sample_contributions(contributors),
    )


def is_sample_data(contributor_ids) -> bool:
    """True if any of the given contributor IDs belongs to the sample."""
    return any(cid in SAMPLE_CONTRIBUTOR_IDS for cid in contributor_ids)
