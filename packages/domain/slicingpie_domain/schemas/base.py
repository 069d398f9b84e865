"""Base classes and type system for slicing pie domain models.

This module provides the foundational types, validators, and base classes
used throughout the slicing pie schema system.
"""

from decimal import Decimal
from datetime import datetime, timezone
from typing import Annotated, Optional
from uuid import uuid4
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel

# =============================================================================
# Base Model
# =============================================================================

class DomainModel(BaseModel):
    """Base class for all domain models.

    Provides common configuration for all Pydantic models in the domain layer:
    - Validation on assignment for runtime safety
    - camelCase aliases so the persisted JSON shape is ``createdAt``,
      ``deletedWithParent`` and so on, while Python code uses snake_case
    - Support for Decimal and date types
    """

    model_config = ConfigDict(
        frozen=False,
        validate_assignment=True,
        use_enum_values=True,
        arbitrary_types_allowed=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# Type Aliases - Numeric
# =============================================================================

SliceCount = Annotated[
    Decimal,
    Field(ge=0, description="Number of slices (non-negative)")
]

MoneyAmount = Annotated[
    Decimal,
    Field(ge=0, description="Currency amount in dollars (non-negative)")
]

Multiplier = Annotated[
    Decimal,
    Field(gt=0, description="Per-type slice multiplier (e.g., cash = 4)")
]


# =============================================================================
# ID Conventions
# =============================================================================

EntityId = Annotated[
    str,
    Field(
        min_length=1,
        description="Record identifier (UUID or user-defined, e.g. 'sample-alice')"
    )
]


def generate_id() -> str:
    """Generate a new record identifier."""
    return str(uuid4())


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# Lifecycle Record
# =============================================================================

class LifecycleRecord(DomainModel):
    """Minimal shape shared by every record managed with soft-delete semantics.

    Fields:
        id: Record identity, generated on add and never changed afterwards
        created_at: Set once on add
        updated_at: Bumped on every successful update
        deleted_at: Set while the record is soft-deleted
        deleted_with_parent: ID of the parent whose deletion cascaded to
            this record (None for independent deletions)
    """

    id: EntityId = Field(
        description="Unique record identifier"
    )

    created_at: datetime = Field(
        description="When the record was created"
    )

    updated_at: datetime = Field(
        description="When the record was last updated"
    )

    deleted_at: Optional[datetime] = Field(
        default=None,
        description="When the record was soft-deleted (None = active)"
    )

    deleted_with_parent: Optional[EntityId] = Field(
        default=None,
        description="Parent record ID if this record was cascade-deleted"
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


# Fields managed by the lifecycle manager; never accepted in a patch
LIFECYCLE_FIELDS = frozenset(
    {"id", "created_at", "updated_at", "deleted_at", "deleted_with_parent"}
)
