"""Tests for the generic soft-delete EntityManager.

Tests cover:
- add generates identity and timestamps
- update merges patches, bumps updated_at, refuses deleted/missing records
- soft_delete / restore state transitions and cascade provenance
- set_all / clear bulk operations
"""

import pytest
from datetime import date
from decimal import Decimal

from slicingpie_domain.lifecycle import DuplicateRecordError, EntityManager
from slicingpie_domain.schemas import Contribution, Contributor

from fakes import SequentialIds, StepClock


@pytest.fixture
def contributors():
    return EntityManager(Contributor, clock=StepClock(), id_factory=SequentialIds("c"))


@pytest.fixture
def contributions():
    return EntityManager(Contribution, clock=StepClock(), id_factory=SequentialIds("k"))


def cash_payload(**overrides):
    payload = {
        "contributor_id": "c-1",
        "type": "cash",
        "value": Decimal("250"),
        "effective_date": date(2024, 5, 1),
        "description": "Server costs",
        "multiplier": Decimal("4"),
        "slices": Decimal("1000"),
    }
    payload.update(overrides)
    return payload


# =============================================================================
# add / get
# =============================================================================

class TestAdd:
    """add() generates identity and creation timestamps."""

    def test_add_generates_id_and_timestamps(self, contributors):
        record = contributors.add(name="Alice", hourly_rate=Decimal("50"))
        assert record.id == "c-1"
        assert record.created_at == record.updated_at
        assert record.deleted_at is None
        assert record.deleted_with_parent is None

    def test_round_trip_fields(self, contributions):
        """add then get_by_id returns submitted fields unchanged."""
        payload = cash_payload()
        record = contributions.add(payload)
        stored = contributions.get_by_id(record.id)

        for field, value in payload.items():
            assert getattr(stored, field) == value
        assert stored.id == "k-1"
        assert stored.created_at is not None

    def test_add_accepts_camel_case_payload(self, contributions):
        record = contributions.add({
            "contributorId": "c-9",
            "type": "idea",
            "value": "100",
            "date": "2024-02-02",
            "multiplier": "1",
            "slices": "100",
        })
        assert record.contributor_id == "c-9"
        assert record.effective_date == date(2024, 2, 2)

    def test_add_rejects_lifecycle_fields(self, contributors):
        with pytest.raises(ValueError, match="Cannot set lifecycle fields"):
            contributors.add(name="Alice", id="mine")

    def test_add_validates(self, contributors):
        with pytest.raises(ValueError):
            contributors.add(name="")
        assert len(contributors) == 0

    def test_insertion_order(self, contributors):
        names = ["Carol", "Alice", "Bob"]
        for name in names:
            contributors.add(name=name)
        assert [c.name for c in contributors.get_all()] == names

    def test_get_by_id_missing(self, contributors):
        assert contributors.get_by_id("nope") is None
        assert "nope" not in contributors


# =============================================================================
# update
# =============================================================================

class TestUpdate:
    """update() merges partial patches."""

    def test_update_merges_and_bumps_updated_at(self, contributors):
        record = contributors.add(name="Alice", email="a@example.com")
        updated = contributors.update(record.id, {"name": "Alice Smith"})

        assert updated.name == "Alice Smith"
        assert updated.email == "a@example.com"
        assert updated.created_at == record.created_at
        assert updated.updated_at > record.updated_at
        assert contributors.get_by_id(record.id) == updated

    def test_update_accepts_camel_case(self, contributors):
        record = contributors.add(name="Alice")
        assert contributors.update(record.id, {"hourlyRate": 80}).hourly_rate == Decimal("80")

    def test_update_missing_returns_none(self, contributors):
        assert contributors.update("nope", {"name": "X"}) is None

    def test_update_deleted_returns_none(self, contributors):
        record = contributors.add(name="Alice")
        contributors.soft_delete(record.id)
        assert contributors.update(record.id, {"name": "X"}) is None
        assert contributors.get_by_id(record.id).name == "Alice"

    @pytest.mark.parametrize("patch", [
        {"id": "other"},
        {"created_at": "2020-01-01T00:00:00Z"},
        {"createdAt": "2020-01-01T00:00:00Z"},
        {"deleted_at": "2020-01-01T00:00:00Z"},
        {"unknown_field": 1},
    ])
    def test_update_rejects_protected_or_unknown_fields(self, contributors, patch):
        record = contributors.add(name="Alice")
        assert contributors.update(record.id, patch) is None
        assert contributors.get_by_id(record.id) == record

    def test_update_invalid_value_raises(self, contributors):
        record = contributors.add(name="Alice")
        with pytest.raises(ValueError):
            contributors.update(record.id, {"hourly_rate": -1})
        assert contributors.get_by_id(record.id) == record


# =============================================================================
# soft_delete / restore
# =============================================================================

class TestSoftDelete:
    """Soft delete keeps records retrievable."""

    def test_soft_delete_marks_deleted(self, contributions):
        record = contributions.add(cash_payload())
        assert contributions.soft_delete(record.id) is True

        stored = contributions.get_by_id(record.id)
        assert stored.is_deleted
        assert stored.deleted_with_parent is None
        assert contributions.get_active() == []
        assert contributions.get_deleted() == [stored]

    def test_soft_delete_with_parent_tags_provenance(self, contributions):
        record = contributions.add(cash_payload())
        contributions.soft_delete(record.id, parent_id="c-1")
        assert contributions.get_by_id(record.id).deleted_with_parent == "c-1"

    def test_remove_is_soft_delete(self, contributions):
        record = contributions.add(cash_payload())
        assert contributions.remove(record.id) is True
        assert contributions.get_by_id(record.id).is_deleted

    def test_soft_delete_twice_fails(self, contributions):
        record = contributions.add(cash_payload())
        contributions.soft_delete(record.id)
        first_deleted_at = contributions.get_by_id(record.id).deleted_at
        assert contributions.soft_delete(record.id) is False
        assert contributions.get_by_id(record.id).deleted_at == first_deleted_at

    def test_soft_delete_missing_fails(self, contributions):
        assert contributions.soft_delete("nope") is False

    def test_restore_clears_deletion_and_provenance(self, contributions):
        record = contributions.add(cash_payload())
        contributions.soft_delete(record.id, parent_id="c-1")
        assert contributions.restore(record.id) is True

        stored = contributions.get_by_id(record.id)
        assert not stored.is_deleted
        assert stored.deleted_with_parent is None

    def test_restore_active_fails(self, contributions):
        record = contributions.add(cash_payload())
        assert contributions.restore(record.id) is False

    def test_restore_missing_fails(self, contributions):
        assert contributions.restore("nope") is False


# =============================================================================
# set_all / clear
# =============================================================================

class TestBulk:
    """Bulk replace and wipe."""

    def test_set_all_replaces_collection(self, contributors):
        contributors.add(name="Old")
        source = EntityManager(Contributor, clock=StepClock(), id_factory=SequentialIds("x"))
        new_records = [source.add(name="New 1"), source.add(name="New 2")]

        contributors.set_all(new_records)

        assert [c.name for c in contributors.get_all()] == ["New 1", "New 2"]
        assert contributors.get_by_id("c-1") is None

    def test_set_all_keeps_lifecycle_fields(self, contributions):
        source = EntityManager(Contribution, clock=StepClock(), id_factory=SequentialIds("x"))
        record = source.add(cash_payload())
        source.soft_delete(record.id, parent_id="c-1")
        deleted = source.get_by_id(record.id)

        contributions.set_all([deleted])

        assert contributions.get_by_id(record.id) == deleted
        assert contributions.get_deleted() == [deleted]

    def test_set_all_validates_mappings(self, contributors):
        contributors.set_all([{
            "id": "imported",
            "name": "Dana",
            "createdAt": "2024-01-01T00:00:00Z",
            "updatedAt": "2024-01-02T00:00:00Z",
        }])
        assert contributors.get_by_id("imported").name == "Dana"

    def test_set_all_duplicate_ids_leave_collection_untouched(self, contributors):
        original = contributors.add(name="Keep")
        duplicate = original.model_copy(update={"name": "Dup"})
        with pytest.raises(DuplicateRecordError, match="Duplicate contributor id"):
            contributors.set_all([duplicate, duplicate])
        assert contributors.get_all() == [original]

    def test_validate_all_does_not_store(self, contributors):
        kept = contributors.add(name="Keep")
        other = kept.model_copy(update={"id": "other"})

        validated = contributors.validate_all([kept, other])

        assert [c.id for c in validated] == [kept.id, "other"]
        assert contributors.get_all() == [kept]

    def test_duplicate_error_is_value_error(self, contributors):
        record = contributors.add(name="Dup")
        with pytest.raises(ValueError, match="Duplicate contributor id"):
            contributors.validate_all([record, record])
        assert issubclass(DuplicateRecordError, ValueError)

    def test_clear(self, contributors):
        contributors.add(name="A")
        contributors.add(name="B")
        contributors.clear()
        assert len(contributors) == 0
        assert contributors.get_all() == []
