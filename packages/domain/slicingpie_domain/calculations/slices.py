"""Slice calculation.

Converts one contribution's raw value into slices:

    time:   hours x hourly_rate x 2
    other:  value x multiplier(type)

calculate_slices() is pure and total over valid numeric input. User-entered
values go through validate_contribution_input() first, which reports
problems as data instead of raising.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from ..schemas import CONTRIBUTION_TYPES, MULTIPLIERS, ValidationIssue, ValidationResult

Number = Union[int, float, str, Decimal]


def to_decimal(value: Number) -> Decimal:
    """Convert a user/JSON number to Decimal without float artifacts.

    Raises:
        ValueError: If value is not numeric
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        return value
    try:
        if isinstance(value, float):
            return Decimal(repr(value))
        return Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Not a number: {value!r}") from exc


def get_multiplier(contribution_type: str) -> Decimal:
    """Get the slice multiplier for a contribution type.

    Raises:
        ValueError: If the type is unknown
    """
    try:
        return MULTIPLIERS[contribution_type]
    except KeyError:
        raise ValueError(
            f"Unknown contribution type '{contribution_type}'. "
            f"Expected one of: {', '.join(CONTRIBUTION_TYPES)}"
        ) from None


def calculate_slices(
    contribution_type: str,
    value: Number,
    hourly_rate: Optional[Number] = None,
) -> Decimal:
    """Calculate slices for a contribution.

    Args:
        contribution_type: One of time, cash, non-cash, idea, relationship
        value: Hours for time contributions, dollars otherwise
        hourly_rate: Contributor's hourly rate (required for time, ignored otherwise)

    Returns:
        Exact slice count as Decimal

    Raises:
        ValueError: If the type is unknown, or a time contribution has no
            hourly rate. A missing rate is never defaulted.

    Example:
        calculate_slices("time", 10, 50)  -> Decimal("1000")
        calculate_slices("cash", 1000)    -> Decimal("4000")
    """
    multiplier = get_multiplier(contribution_type)
    amount = to_decimal(value)

    if contribution_type == "time":
        if hourly_rate is None:
            raise ValueError("hourly_rate is required for time contributions")
        return amount * to_decimal(hourly_rate) * multiplier

    return amount * multiplier


def validate_contribution_input(
    contribution_type: str,
    value: Number,
    hourly_rate: Optional[Number] = None,
) -> ValidationResult:
    """Check contribution input before calculating or committing it.

    Values proposed by any source (forms, imports, suggestion tools) pass
    through here before calculate_slices().

    Returns:
        ValidationResult; is_valid is True when there are no issues
    """
    issues = []

    if contribution_type not in MULTIPLIERS:
        issues.append(ValidationIssue(
            field="type",
            message=f"must be one of: {', '.join(CONTRIBUTION_TYPES)}",
        ))

    try:
        amount = to_decimal(value)
    except ValueError:
        issues.append(ValidationIssue(field="value", message="must be a number"))
    else:
        if not amount.is_finite():
            issues.append(ValidationIssue(field="value", message="must be a finite number"))
        elif amount <= 0:
            issues.append(ValidationIssue(field="value", message="must be greater than zero"))

    if contribution_type == "time":
        if hourly_rate is None:
            issues.append(ValidationIssue(
                field="hourly_rate",
                message="is required for time contributions",
            ))
        else:
            try:
                rate = to_decimal(hourly_rate)
            except ValueError:
                issues.append(ValidationIssue(field="hourly_rate", message="must be a number"))
            else:
                if not rate.is_finite() or rate < 0:
                    issues.append(ValidationIssue(
                        field="hourly_rate",
                        message="must be a finite, non-negative number",
                    ))

    return ValidationResult(issues=issues)


def preview_slices(
    contribution_type: str,
    value: Number,
    hourly_rate: Optional[Number] = None,
) -> Optional[Decimal]:
    """Slices a contribution would earn, or None if the input is invalid.

    Safe to call on every keystroke of a form.
    """
    if not validate_contribution_input(contribution_type, value, hourly_rate).is_valid:
        return None
    return calculate_slices(contribution_type, value, hourly_rate)
