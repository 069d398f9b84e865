"""Vesting calculations.

Linear (straight-line) vesting measured from the start date, gated by a
cliff:

    elapsed < cliff          -> 0% vested
    elapsed >= duration      -> 100% vested
    otherwise                -> elapsed / duration

Elapsed time is counted in whole calendar months: a month counts once the
same day-of-month is reached, so a Jan 31 start has 0 months elapsed on
Feb 28 and 1 on Mar 1. Cliff and full vest dates are clamped to month end
by relativedelta. Any as-of date works, past or future, which is how
projections are produced.

Rounding: vested slices are rounded half-even to whole slices; percentages
are rounded half-even to 2 decimals.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Iterable, List, Mapping, Optional

from dateutil.relativedelta import relativedelta

from ..schemas import (
    Contributor,
    VestingConfig,
    VestingStatus,
    VestedEquityDataItem,
    VestingSummary,
)
from .slices import Number, to_decimal

WHOLE_SLICE = Decimal("1")
PERCENT_PLACES = Decimal("0.01")


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end (negative if end is earlier).

    Example:
        months_between(date(2023, 1, 1), date(2024, 1, 1))  -> 12
        months_between(date(2023, 1, 15), date(2023, 2, 14)) -> 0
        months_between(date(2023, 1, 31), date(2023, 2, 28)) -> 0
    """
    months = (end.year - start.year) * 12 + end.month - start.month
    if end.day < start.day:
        months -= 1
    return months


def get_cliff_date(vesting: VestingConfig) -> Optional[date]:
    """Date the cliff is reached, or None for schedules without a cliff."""
    if vesting.cliff_months == 0:
        return None
    return vesting.start_date + relativedelta(months=vesting.cliff_months)


def get_full_vest_date(vesting: VestingConfig) -> date:
    """Date the schedule is fully vested."""
    return vesting.start_date + relativedelta(months=vesting.vesting_months)


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    return (part / whole * 100).quantize(PERCENT_PLACES, rounding=ROUND_HALF_EVEN)


def calculate_vesting_status(
    contributor: Contributor,
    total_slices: Number,
    as_of_date: Optional[date] = None,
) -> VestingStatus:
    """Vesting position of a contributor at a date.

    Args:
        contributor: Contributor whose vesting schedule applies
        total_slices: Slices the contributor has earned
        as_of_date: Date to evaluate (default: today)

    Returns:
        VestingStatus. Contributors without a schedule are fully vested
        with state "none".
    """
    total = to_decimal(total_slices)
    as_of = as_of_date or date.today()
    vesting = contributor.vesting

    if vesting is None:
        return VestingStatus(
            state="none",
            percent_vested=Decimal("100"),
            vested_slices=total,
            unvested_slices=Decimal("0"),
        )

    cliff_date = get_cliff_date(vesting)
    full_vest_date = get_full_vest_date(vesting)
    elapsed = months_between(vesting.start_date, as_of)

    # Before the start date or inside the cliff
    if as_of < vesting.start_date or elapsed < vesting.cliff_months:
        return VestingStatus(
            state="pre_cliff",
            percent_vested=Decimal("0"),
            vested_slices=Decimal("0"),
            unvested_slices=total,
            cliff_date=cliff_date,
            full_vest_date=full_vest_date,
            months_until_cliff=vesting.cliff_months - elapsed,
            months_until_full_vest=vesting.vesting_months - elapsed,
        )

    if elapsed >= vesting.vesting_months:
        return VestingStatus(
            state="fully_vested",
            percent_vested=Decimal("100"),
            vested_slices=total,
            unvested_slices=Decimal("0"),
            cliff_date=cliff_date,
            full_vest_date=full_vest_date,
        )

    fraction = Decimal(elapsed) / Decimal(vesting.vesting_months)
    # Rounding up a fractional total must not vest more than was earned
    vested = min((total * fraction).quantize(WHOLE_SLICE, rounding=ROUND_HALF_EVEN), total)

    return VestingStatus(
        state="vesting",
        percent_vested=(fraction * 100).quantize(PERCENT_PLACES, rounding=ROUND_HALF_EVEN),
        vested_slices=vested,
        unvested_slices=total - vested,
        cliff_date=cliff_date,
        full_vest_date=full_vest_date,
        months_until_cliff=0,
        months_until_full_vest=vesting.vesting_months - elapsed,
    )


def get_vested_equity_data(
    contributors: Iterable[Contributor],
    contributor_slices: Mapping[str, Number],
    as_of_date: Optional[date] = None,
) -> List[VestedEquityDataItem]:
    """Vested/unvested breakdown for every active contributor.

    Args:
        contributors: Contributors (soft-deleted ones are skipped)
        contributor_slices: Contributor ID -> total slices (missing = 0)
        as_of_date: Date to evaluate (default: today); may be in the future

    Returns:
        One item per active contributor, in input order
    """
    items = []
    for contributor in contributors:
        if contributor.is_deleted:
            continue
        total = to_decimal(contributor_slices.get(contributor.id, 0))
        status = calculate_vesting_status(contributor, total, as_of_date)
        items.append(VestedEquityDataItem(
            contributor_id=contributor.id,
            contributor_name=contributor.name,
            vested_slices=status.vested_slices,
            unvested_slices=status.unvested_slices,
            total_slices=total,
            percent_vested=status.percent_vested,
            vesting_state=status.state,
        ))
    return items


def get_vesting_summary(
    contributors: Iterable[Contributor],
    contributor_slices: Mapping[str, Number],
    as_of_date: Optional[date] = None,
) -> VestingSummary:
    """Company-wide vesting totals and upcoming milestones.

    Contributors without a schedule count as fully vested. The next cliff
    date only considers contributors still before their cliff.
    """
    as_of = as_of_date or date.today()

    total_vested = Decimal("0")
    total_unvested = Decimal("0")
    next_cliff: Optional[date] = None
    next_full_vest: Optional[date] = None
    counts = {"pre_cliff": 0, "vesting": 0, "fully_vested": 0}

    for contributor in contributors:
        if contributor.is_deleted:
            continue
        total = to_decimal(contributor_slices.get(contributor.id, 0))
        status = calculate_vesting_status(contributor, total, as_of)

        total_vested += status.vested_slices
        total_unvested += status.unvested_slices

        if status.state == "pre_cliff":
            counts["pre_cliff"] += 1
            if status.cliff_date and status.cliff_date > as_of:
                if next_cliff is None or status.cliff_date < next_cliff:
                    next_cliff = status.cliff_date
        elif status.state == "vesting":
            counts["vesting"] += 1
        else:
            counts["fully_vested"] += 1

        if status.full_vest_date and status.full_vest_date > as_of:
            if next_full_vest is None or status.full_vest_date < next_full_vest:
                next_full_vest = status.full_vest_date

    total = total_vested + total_unvested

    return VestingSummary(
        total_vested_slices=total_vested,
        total_unvested_slices=total_unvested,
        total_slices=total,
        overall_percent_vested=_percent(total_vested, total) if total > 0 else Decimal("100"),
        next_cliff_date=next_cliff,
        next_full_vest_date=next_full_vest,
        contributors_pre_cliff=counts["pre_cliff"],
        contributors_vesting=counts["vesting"],
        contributors_fully_vested=counts["fully_vested"],
    )
