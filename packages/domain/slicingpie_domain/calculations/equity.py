"""Equity aggregation over active contributions.

Every function here ignores soft-deleted records, so callers can pass the
full collections held by the lifecycle managers.
"""

from decimal import Decimal, ROUND_HALF_EVEN
from typing import Dict, Iterable, List, Optional

from ..schemas import Contribution, Contributor, ContributorWithEquity


def _active(records):
    return [r for r in records if not r.is_deleted]


def calculate_equity_percentage(contributor_slices: Decimal, total_slices: Decimal) -> Decimal:
    """Equity percentage (0-100) for a slice count; 0 when the pie is empty."""
    if total_slices == 0:
        return Decimal("0")
    return contributor_slices / total_slices * 100


def get_total_slices(contributions: Iterable[Contribution]) -> Decimal:
    """Sum of slices over active contributions."""
    return sum((c.slices for c in _active(contributions)), Decimal("0"))


def get_contributor_slices_map(
    contributors: Iterable[Contributor],
    contributions: Iterable[Contribution],
) -> Dict[str, Decimal]:
    """Map active contributor ID -> total slices of its active contributions.

    Contributors with no contributions map to 0. Insertion order follows the
    contributor order.
    """
    slices_map: Dict[str, Decimal] = {c.id: Decimal("0") for c in _active(contributors)}
    for contribution in _active(contributions):
        if contribution.contributor_id in slices_map:
            slices_map[contribution.contributor_id] += contribution.slices
    return slices_map


def calculate_all_equity(
    contributors: Iterable[Contributor],
    contributions: Iterable[Contribution],
) -> List[ContributorWithEquity]:
    """Calculate slices and equity percentage for every active contributor.

    Args:
        contributors: Contributors (soft-deleted ones are skipped)
        contributions: Contributions (soft-deleted ones are skipped)

    Returns:
        One ContributorWithEquity per active contributor, in input order.
        Percentages are unrounded and sum to 100 whenever any slices exist.

    Example:
        Alice: 10 hours at $50/hr -> 1000 slices -> 20%
        Bob:   $1000 cash         -> 4000 slices -> 80%
    """
    active_contributors = _active(contributors)
    slices_map = get_contributor_slices_map(active_contributors, contributions)
    total_company_slices = sum(slices_map.values(), Decimal("0"))

    return [
        ContributorWithEquity(
            **contributor.model_dump(include=set(Contributor.model_fields)),
            total_slices=slices_map[contributor.id],
            equity_percentage=calculate_equity_percentage(
                slices_map[contributor.id], total_company_slices
            ),
        )
        for contributor in active_contributors
    ]


def get_most_recent_contribution(
    contributions: Iterable[Contribution],
) -> Optional[Contribution]:
    """Latest active contribution by effective date.

    Ties on effective date go to the most recently created record.
    Returns None when there are no active contributions.
    """
    active = _active(contributions)
    if not active:
        return None
    return max(active, key=lambda c: (c.effective_date, c.created_at))


def sort_contributions_by_date(
    contributions: Iterable[Contribution],
    ascending: bool = False,
) -> List[Contribution]:
    """Sort contributions by effective date (newest first by default)."""
    return sorted(contributions, key=lambda c: c.effective_date, reverse=not ascending)


def calculate_equity_value(
    contributor_slices: Decimal,
    total_slices: Decimal,
    valuation: Decimal,
) -> Decimal:
    """Dollar value of a stake at a company valuation, rounded to cents.

    Returns 0 when the pie is empty.
    """
    if total_slices == 0:
        return Decimal("0.00")
    value = contributor_slices / total_slices * valuation
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_EVEN)
