"""Slicing pie ledger: contributor/contribution lifecycle with cascades.

The ledger is the single mutable store for one pie. It coordinates two
EntityManagers and the ActivityLog:

    remove_contributor(id)
        soft-deletes the contributor and every active contribution it owns,
        tagging each contribution with deleted_with_parent = id

    restore_contributor(id)
        restores the contributor and only the contributions tagged with its id;
        contributions deleted on their own stay deleted

Each successful delete/restore records exactly one ActivityEvent. Failed
attempts record nothing and return False.

Every committed mutation is reported to the optional on_commit listener as
one ChangeSet, so an incremental store can persist a cascade as a single
batch. The cascade set is computed before anything is mutated.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError

from ..calculations import (
    calculate_all_equity,
    calculate_slices,
    get_contributor_slices_map,
    get_most_recent_contribution,
    get_multiplier,
    get_total_slices,
    get_vested_equity_data,
    get_vesting_summary,
    to_decimal,
    validate_contribution_input,
)
from ..schemas import (
    ActivityEvent,
    ChangeSet,
    Company,
    Contribution,
    ContributionResult,
    Contributor,
    ContributorWithEquity,
    SlicingPieData,
    ValidationIssue,
    VestedEquityDataItem,
    VestingConfig,
    VestingSummary,
    generate_id,
    utc_now,
)
from ..sample_data import build_sample_data
from .activity_log import ActivityLog
from .manager import EntityManager

logger = logging.getLogger(__name__)

# Fields derived from type/value; never accepted from callers
COMPUTED_CONTRIBUTION_FIELDS = frozenset({"multiplier", "slices"})


def _issues_from(exc: ValidationError) -> List[ValidationIssue]:
    return [
        ValidationIssue(
            field=".".join(str(part) for part in error["loc"]) or "contribution",
            message=error["msg"],
        )
        for error in exc.errors()
    ]


class SlicingPieLedger:
    """Contributors, contributions and their audit trail for one company.

    Args:
        company: Company details (default: Company())
        clock: Timestamp source shared by managers and the activity log
        id_factory: ID source shared by managers and the activity log
        on_commit: Called with a ChangeSet after every committed mutation

    Example:
        ledger = SlicingPieLedger()
        alice = ledger.add_contributor("Alice", hourly_rate=50)
        result = ledger.add_contribution(alice.id, "time", 10, date(2024, 1, 15))
        result.contribution.slices            # Decimal("1000")

        ledger.remove_contributor(alice.id)   # cascades to the contribution
        ledger.restore_contributor(alice.id)  # brings it back
    """

    def __init__(
        self,
        company: Optional[Company] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_id,
        on_commit: Optional[Callable[[ChangeSet], None]] = None,
    ):
        self.company = company or Company()
        self._clock = clock
        self.contributors: EntityManager[Contributor] = EntityManager(
            Contributor, clock=clock, id_factory=id_factory
        )
        self.contributions: EntityManager[Contribution] = EntityManager(
            Contribution, clock=clock, id_factory=id_factory
        )
        self.activity_log = ActivityLog(clock=clock, id_factory=id_factory)
        self.on_commit = on_commit

    # ------------------------------------------------------------------ #
    # Company
    # ------------------------------------------------------------------ #

    def update_company(self, **changes: Any) -> Company:
        self.company = Company.model_validate({**self.company.model_dump(), **changes})
        self._commit(company=self.company)
        return self.company

    # ------------------------------------------------------------------ #
    # Contributors
    # ------------------------------------------------------------------ #

    def add_contributor(
        self,
        name: str,
        hourly_rate: Optional[Decimal] = None,
        email: Optional[str] = None,
        vesting: Optional[VestingConfig] = None,
    ) -> Contributor:
        """Create a contributor.

        Raises:
            pydantic.ValidationError: If the fields are invalid (e.g. empty name)
        """
        contributor = self.contributors.add(
            name=name, hourly_rate=hourly_rate, email=email, vesting=vesting
        )
        self._commit(contributors=[contributor])
        return contributor

    def update_contributor(self, contributor_id: str, patch: Mapping[str, Any]) -> Optional[Contributor]:
        """Update an active contributor.

        Slices of existing time contributions are not recalculated when the
        hourly rate changes; they keep the rate that applied when logged.

        Returns:
            The updated contributor, or None if missing/deleted/invalid patch
        """
        contributor = self.contributors.update(contributor_id, patch)
        if contributor is not None:
            self._commit(contributors=[contributor])
        return contributor

    def remove_contributor(self, contributor_id: str) -> bool:
        """Soft-delete a contributor and cascade to its active contributions.

        Returns:
            True if the contributor was active and is now deleted
        """
        contributor = self.contributors.get_by_id(contributor_id)
        if contributor is None or contributor.is_deleted:
            logger.warning("Cannot remove contributor %s: not found or already deleted", contributor_id)
            return False

        # Plan the whole cascade before mutating anything
        swept = [
            c for c in self.contributions.get_active()
            if c.contributor_id == contributor_id
        ]
        slices_removed = sum((c.slices for c in swept), Decimal("0"))

        self.contributors.soft_delete(contributor_id)
        for contribution in swept:
            self.contributions.soft_delete(contribution.id, parent_id=contributor_id)

        event = self.activity_log.add_event(
            "deleted", "contributor", contributor_id, contributor.name,
            slices_removed, cascade_count=len(swept),
        )
        self._commit(
            contributors=[self.contributors.get_by_id(contributor_id)],
            contributions=[self.contributions.get_by_id(c.id) for c in swept],
            event=event,
        )
        return True

    def restore_contributor(self, contributor_id: str) -> bool:
        """Restore a contributor and the contributions its deletion swept up.

        Returns:
            True if the contributor was deleted and is now active
        """
        contributor = self.contributors.get_by_id(contributor_id)
        if contributor is None or not contributor.is_deleted:
            logger.warning("Cannot restore contributor %s: not found or not deleted", contributor_id)
            return False

        cascaded = [
            c for c in self.contributions.get_deleted()
            if c.deleted_with_parent == contributor_id
        ]
        slices_restored = sum((c.slices for c in cascaded), Decimal("0"))

        self.contributors.restore(contributor_id)
        for contribution in cascaded:
            self.contributions.restore(contribution.id)

        event = self.activity_log.add_event(
            "restored", "contributor", contributor_id, contributor.name,
            slices_restored, cascade_count=len(cascaded),
        )
        self._commit(
            contributors=[self.contributors.get_by_id(contributor_id)],
            contributions=[self.contributions.get_by_id(c.id) for c in cascaded],
            event=event,
        )
        return True

    # ------------------------------------------------------------------ #
    # Contributions
    # ------------------------------------------------------------------ #

    def add_contribution(
        self,
        contributor_id: str,
        contribution_type: str,
        value: Any,
        effective_date: date,
        description: Optional[str] = None,
        dollar_equivalent: Optional[Decimal] = None,
    ) -> ContributionResult:
        """Validate, price and store a contribution.

        Time contributions use the contributor's current hourly rate.

        Returns:
            ContributionResult with the stored contribution, or with issues
            if the contributor is unknown/deleted or the input is invalid
        """
        contributor = self.contributors.get_by_id(contributor_id)
        if contributor is None or contributor.is_deleted:
            return self._rejected(ValidationIssue(
                field="contributor_id", message="must reference an active contributor"
            ))

        validation = validate_contribution_input(contribution_type, value, contributor.hourly_rate)
        if not validation.is_valid:
            logger.warning("Rejected contribution for %s: %s", contributor_id, "; ".join(validation.messages()))
            return ContributionResult(issues=validation.issues)

        try:
            contribution = self.contributions.add(
                contributor_id=contributor_id,
                type=contribution_type,
                value=to_decimal(value),
                effective_date=effective_date,
                description=description,
                dollar_equivalent=dollar_equivalent,
                multiplier=get_multiplier(contribution_type),
                slices=calculate_slices(contribution_type, value, contributor.hourly_rate),
            )
        except ValidationError as exc:
            return self._rejected(*_issues_from(exc))
        self._commit(contributions=[contribution])
        return ContributionResult(contribution=contribution)

    def update_contribution(self, contribution_id: str, patch: Mapping[str, Any]) -> ContributionResult:
        """Update an active contribution, re-pricing it if type or value change.

        The owning contributor cannot be changed, and multiplier/slices are
        always derived.
        """
        contribution = self.contributions.get_by_id(contribution_id)
        if contribution is None or contribution.is_deleted:
            return self._rejected(ValidationIssue(
                field="id", message="must reference an active contribution"
            ))

        changes: Dict[str, Any] = self.contributions.normalize(patch)

        if changes.get("contributor_id", contribution.contributor_id) != contribution.contributor_id:
            return self._rejected(ValidationIssue(
                field="contributor_id", message="cannot be reassigned to another contributor"
            ))
        computed = COMPUTED_CONTRIBUTION_FIELDS & changes.keys()
        if computed:
            return self._rejected(*(
                ValidationIssue(field=name, message="is calculated and cannot be set")
                for name in sorted(computed)
            ))

        if "type" in changes or "value" in changes:
            contribution_type = changes.get("type", contribution.type)
            value = changes.get("value", contribution.value)
            contributor = self.contributors.get_by_id(contribution.contributor_id)
            hourly_rate = contributor.hourly_rate if contributor else None

            validation = validate_contribution_input(contribution_type, value, hourly_rate)
            if not validation.is_valid:
                logger.warning(
                    "Rejected update to contribution %s: %s",
                    contribution_id, "; ".join(validation.messages()),
                )
                return ContributionResult(issues=validation.issues)

            changes["value"] = to_decimal(value)
            changes["multiplier"] = get_multiplier(contribution_type)
            changes["slices"] = calculate_slices(contribution_type, value, hourly_rate)

        try:
            updated = self.contributions.update(contribution_id, changes)
        except ValidationError as exc:
            return self._rejected(*_issues_from(exc))
        if updated is None:
            return self._rejected(ValidationIssue(field="patch", message="contains fields that cannot be updated"))

        self._commit(contributions=[updated])
        return ContributionResult(contribution=updated)

    def remove_contribution(self, contribution_id: str) -> bool:
        """Soft-delete a single contribution (no cascade provenance).

        Returns:
            True if the contribution was active and is now deleted
        """
        contribution = self.contributions.get_by_id(contribution_id)
        if contribution is None or not self.contributions.soft_delete(contribution_id):
            return False

        event = self.activity_log.add_event(
            "deleted", "contribution", contribution_id,
            self._contribution_label(contribution), contribution.slices,
        )
        self._commit(contributions=[self.contributions.get_by_id(contribution_id)], event=event)
        return True

    def restore_contribution(self, contribution_id: str) -> bool:
        """Restore a single soft-deleted contribution.

        A contribution whose contributor is still deleted cannot be restored
        on its own; restore the contributor instead.

        Returns:
            True if the contribution was deleted and is now active
        """
        contribution = self.contributions.get_by_id(contribution_id)
        if contribution is None:
            logger.warning("Cannot restore contribution %s: not found", contribution_id)
            return False

        owner = self.contributors.get_by_id(contribution.contributor_id)
        if owner is not None and owner.is_deleted:
            logger.warning(
                "Cannot restore contribution %s: contributor %s is deleted",
                contribution_id, owner.id,
            )
            return False

        if not self.contributions.restore(contribution_id):
            return False

        event = self.activity_log.add_event(
            "restored", "contribution", contribution_id,
            self._contribution_label(contribution), contribution.slices,
        )
        self._commit(contributions=[self.contributions.get_by_id(contribution_id)], event=event)
        return True

    # ------------------------------------------------------------------ #
    # Read side
    # ------------------------------------------------------------------ #

    def contributors_with_equity(self) -> List[ContributorWithEquity]:
        return calculate_all_equity(self.contributors.get_all(), self.contributions.get_all())

    def total_slices(self) -> Decimal:
        return get_total_slices(self.contributions.get_all())

    def most_recent_contribution(self) -> Optional[Contribution]:
        return get_most_recent_contribution(self.contributions.get_all())

    def contributor_slices_map(self) -> Dict[str, Decimal]:
        return get_contributor_slices_map(self.contributors.get_all(), self.contributions.get_all())

    def vested_equity_data(self, as_of_date: Optional[date] = None) -> List[VestedEquityDataItem]:
        return get_vested_equity_data(
            self.contributors.get_all(), self.contributor_slices_map(), as_of_date
        )

    def vesting_summary(self, as_of_date: Optional[date] = None) -> VestingSummary:
        return get_vesting_summary(
            self.contributors.get_all(), self.contributor_slices_map(), as_of_date
        )

    def get_recent_activity(self, limit: int = 10) -> List[ActivityEvent]:
        return self.activity_log.get_recent_events(limit)

    @property
    def has_data(self) -> bool:
        return len(self.contributors) > 0 or len(self.contributions) > 0

    # ------------------------------------------------------------------ #
    # Bulk operations
    # ------------------------------------------------------------------ #

    def export_data(self) -> SlicingPieData:
        """Snapshot of the whole pie, including soft-deleted records."""
        return SlicingPieData(
            company=self.company,
            contributors=self.contributors.get_all(),
            contributions=self.contributions.get_all(),
            activity_events=list(self.activity_log.events),
            exported_at=self._clock(),
        )

    def import_data(self, data: SlicingPieData) -> None:
        """Replace company, contributors and contributions from a snapshot.

        Collections are replaced in one step each (never record by record).
        Activity events in the snapshot are appended to the log unless
        already present; the log is never truncated. Both collections are
        validated before either is replaced.

        Raises:
            DuplicateRecordError: If a collection repeats an ID (nothing is replaced)
        """
        contributors = self.contributors.validate_all(data.contributors)
        contributions = self.contributions.validate_all(data.contributions)
        self.contributors.set_all(contributors)
        self.contributions.set_all(contributions)
        self.company = data.company
        appended = self.activity_log.extend(data.activity_events)
        logger.info(
            "Imported %d contributors, %d contributions, %d activity events",
            len(data.contributors), len(data.contributions), appended,
        )
        self._commit(
            replace_all=True,
            company=self.company,
            contributors=self.contributors.get_all(),
            contributions=self.contributions.get_all(),
        )

    def load_sample_data(self) -> None:
        """Replace the pie with the onboarding sample."""
        self.import_data(build_sample_data())

    def clear_all_data(self) -> None:
        """Reset company, contributors and contributions. The activity log is kept."""
        self.company = Company()
        self.contributors.clear()
        self.contributions.clear()
        self._commit(replace_all=True, company=self.company)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _contribution_label(self, contribution: Contribution) -> str:
        owner = self.contributors.get_by_id(contribution.contributor_id)
        label = f"{contribution.type} contribution"
        return f"{label} ({owner.name})" if owner else label

    @staticmethod
    def _rejected(*issues: ValidationIssue) -> ContributionResult:
        logger.warning("Rejected contribution change: %s", "; ".join(f"{i.field} {i.message}" for i in issues))
        return ContributionResult(issues=list(issues))

    def _commit(self, **changes: Any) -> None:
        if self.on_commit is not None:
            self.on_commit(ChangeSet(**changes))
