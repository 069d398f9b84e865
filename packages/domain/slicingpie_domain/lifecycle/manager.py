"""Generic soft-delete lifecycle management.

EntityManager owns one collection of LifecycleRecord subclasses, keyed by
ID in insertion order. One instance is created per record kind:

    contributors = EntityManager(Contributor)
    contributions = EntityManager(Contribution)

Precondition failures (missing record, wrong lifecycle state, protected
field in a patch) return None / False and are logged; they never raise.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, Type, TypeVar

from ..schemas import LifecycleRecord, generate_id, utc_now
from ..schemas.base import LIFECYCLE_FIELDS

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=LifecycleRecord)


class DuplicateRecordError(ValueError):
    """Raised when a bulk load contains the same ID twice."""


class EntityManager(Generic[T]):
    """Add/update/soft-delete/restore bookkeeping for one record kind.

    Records are replaced, never mutated in place: every change validates a
    new instance through the record model, so model invariants hold after
    each operation.

    Args:
        record_type: LifecycleRecord subclass managed by this instance
        clock: Returns the current timestamp (injectable for tests)
        id_factory: Returns a new record ID (injectable for tests)
    """

    def __init__(
        self,
        record_type: Type[T],
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_id,
    ):
        self.record_type = record_type
        self._clock = clock
        self._id_factory = id_factory
        self._records: Dict[str, T] = {}

        # Accept both attribute names and camelCase aliases in payloads
        self._field_names: Dict[str, str] = {}
        for name, info in record_type.model_fields.items():
            self._field_names[name] = name
            if info.alias:
                self._field_names[info.alias] = name

    @property
    def kind(self) -> str:
        return self.record_type.__name__.lower()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: str) -> bool:
        return record_id in self._records

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_by_id(self, record_id: str) -> Optional[T]:
        """Get a record by ID, whether active or soft-deleted."""
        return self._records.get(record_id)

    def get_all(self) -> List[T]:
        return list(self._records.values())

    def get_active(self) -> List[T]:
        return [r for r in self._records.values() if not r.is_deleted]

    def get_deleted(self) -> List[T]:
        return [r for r in self._records.values() if r.is_deleted]

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def normalize(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Map camelCase aliases in a payload to attribute names.

        Unknown keys are kept as-is so callers can report them.
        """
        return {self._field_names.get(key, key): value for key, value in data.items()}

    def add(self, data: Optional[Mapping[str, Any]] = None, **fields: Any) -> T:
        """Create a record with a new ID and creation timestamps.

        Args:
            data: Kind-specific fields (mapping form)
            **fields: Kind-specific fields (keyword form, wins over data)

        Returns:
            The stored record

        Raises:
            ValueError: If the payload sets a lifecycle field
            pydantic.ValidationError: If the payload is not a valid record
        """
        values = self.normalize({**(data or {}), **fields})
        protected = LIFECYCLE_FIELDS & values.keys()
        if protected:
            raise ValueError(
                f"Cannot set lifecycle fields on add: {', '.join(sorted(protected))}"
            )

        now = self._clock()
        record = self.record_type(
            **values,
            id=self._id_factory(),
            created_at=now,
            updated_at=now,
        )
        self._records[record.id] = record
        logger.debug("Added %s %s", self.kind, record.id)
        return record

    def update(self, record_id: str, patch: Mapping[str, Any]) -> Optional[T]:
        """Merge a partial patch into an active record and bump updated_at.

        Returns:
            The updated record, or None if the record is missing, soft-deleted,
            or the patch names a lifecycle field or an unknown field

        Raises:
            pydantic.ValidationError: If the merged record is invalid
        """
        record = self._records.get(record_id)
        if record is None:
            logger.warning("Cannot update %s %s: not found", self.kind, record_id)
            return None
        if record.is_deleted:
            logger.warning("Cannot update %s %s: soft-deleted", self.kind, record_id)
            return None

        changes = self.normalize(patch)
        rejected = (LIFECYCLE_FIELDS & changes.keys()) | (changes.keys() - self.record_type.model_fields.keys())
        if rejected:
            logger.warning(
                "Cannot update %s %s: fields not updatable: %s",
                self.kind, record_id, ", ".join(sorted(rejected)),
            )
            return None

        updated = self._replace(record, **changes, updated_at=self._clock())
        logger.debug("Updated %s %s (%s)", self.kind, record_id, ", ".join(sorted(changes)))
        return updated

    def soft_delete(self, record_id: str, parent_id: Optional[str] = None) -> bool:
        """Mark a record deleted.

        Args:
            record_id: Record to delete
            parent_id: Parent whose deletion caused this one (cascade provenance)

        Returns:
            True if the record was active and is now deleted
        """
        record = self._records.get(record_id)
        if record is None:
            logger.warning("Cannot delete %s %s: not found", self.kind, record_id)
            return False
        if record.is_deleted:
            logger.warning("Cannot delete %s %s: already deleted", self.kind, record_id)
            return False

        self._replace(record, deleted_at=self._clock(), deleted_with_parent=parent_id)
        logger.debug(
            "Soft-deleted %s %s%s",
            self.kind, record_id, f" with parent {parent_id}" if parent_id else "",
        )
        return True

    remove = soft_delete

    def restore(self, record_id: str) -> bool:
        """Clear deletion and cascade provenance.

        Returns:
            True if the record was deleted and is now active
        """
        record = self._records.get(record_id)
        if record is None:
            logger.warning("Cannot restore %s %s: not found", self.kind, record_id)
            return False
        if not record.is_deleted:
            logger.warning("Cannot restore %s %s: not deleted", self.kind, record_id)
            return False

        self._replace(record, deleted_at=None, deleted_with_parent=None)
        logger.debug("Restored %s %s", self.kind, record_id)
        return True

    def validate_all(self, records: Iterable[Any]) -> List[T]:
        """Validate a bulk payload without touching the collection.

        Mappings are validated into records; lifecycle fields are kept
        verbatim.

        Raises:
            DuplicateRecordError: If two records share an ID
            pydantic.ValidationError: If a mapping is not a valid record
        """
        loaded: Dict[str, T] = {}
        for item in records:
            record = item if isinstance(item, self.record_type) else self.record_type.model_validate(item)
            if record.id in loaded:
                raise DuplicateRecordError(f"Duplicate {self.kind} id: {record.id}")
            loaded[record.id] = record
        return list(loaded.values())

    def set_all(self, records: Iterable[Any]) -> None:
        """Replace the whole collection in one step.

        Used for import and sample data so no observer ever sees a partially
        loaded collection.

        Raises:
            DuplicateRecordError: If two records share an ID
            pydantic.ValidationError: If a mapping is not a valid record
        """
        loaded = {record.id: record for record in self.validate_all(records)}
        self._records = loaded
        logger.info("Loaded %d %s records", len(loaded), self.kind)

    def clear(self) -> None:
        """Remove every record."""
        count = len(self._records)
        self._records = {}
        logger.info("Cleared %d %s records", count, self.kind)

    def _replace(self, record: T, **changes: Any) -> T:
        updated = self.record_type.model_validate({**record.model_dump(), **changes})
        self._records[updated.id] = updated
        return updated
