"""Structured operation results.

Bad user input is reported back as data rather than raised: the caller
decides how to present each issue.
"""

from typing import List, Optional
from pydantic import Field

from .base import DomainModel
from .activity import ActivityEvent
from .contributions import Contribution
from .contributors import Contributor
from .pie import Company, SlicingPieData


class ValidationIssue(DomainModel):
    """One problem with a submitted value."""

    field: str = Field(description="Name of the offending input field")
    message: str = Field(description="Human-readable explanation")


class ValidationResult(DomainModel):
    """Outcome of validating contribution input."""

    issues: List[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def messages(self) -> List[str]:
        return [f"{issue.field}: {issue.message}" for issue in self.issues]


class ContributionResult(DomainModel):
    """Outcome of adding or updating a contribution.

    Exactly one of contribution / issues is populated.
    """

    contribution: Optional[Contribution] = None
    issues: List[ValidationIssue] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.contribution is not None and not self.issues


class ImportResult(DomainModel):
    """Outcome of reading a pie export."""

    data: Optional[SlicingPieData] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.data is not None


class ChangeSet(DomainModel):
    """Records touched by one committed mutation.

    A contributor cascade produces a single ChangeSet holding the
    contributor, every swept contribution and the activity event, so an
    incremental store can write it as one batch.
    """

    replace_all: bool = Field(
        default=False,
        description="True for bulk import/reset: the collections below replace everything stored"
    )
    company: Optional[Company] = None
    contributors: List[Contributor] = Field(default_factory=list)
    contributions: List[Contribution] = Field(default_factory=list)
    event: Optional[ActivityEvent] = None
