"""Company and whole-pie snapshot models.

SlicingPieData is the export/import envelope: everything needed to rebuild
a ledger, including soft-deleted records and the activity history.
"""

from typing import List, Optional
from datetime import datetime
from pydantic import Field, model_validator

from .base import DomainModel
from .activity import ActivityEvent
from .contributions import Contribution
from .contributors import Contributor


class Company(DomainModel):
    """Company the pie belongs to."""

    name: str = Field(
        default="My Startup",
        min_length=1,
        description="Company name"
    )

    description: Optional[str] = Field(
        default=None,
        description="Short description"
    )


class SlicingPieData(DomainModel):
    """Complete pie state at a point in time.

    Usage:
        data = ledger.export_data()
        json_text = data.model_dump_json(by_alias=True, indent=2)

        restored = SlicingPieData.model_validate_json(json_text)
        other_ledger.import_data(restored)
    """

    company: Company = Field(
        default_factory=Company,
        description="Company details"
    )

    contributors: List[Contributor] = Field(
        default_factory=list,
        description="All contributors, including soft-deleted ones"
    )

    contributions: List[Contribution] = Field(
        default_factory=list,
        description="All contributions, including soft-deleted ones"
    )

    activity_events: List[ActivityEvent] = Field(
        default_factory=list,
        description="Activity log, oldest first"
    )

    exported_at: Optional[datetime] = Field(
        default=None,
        description="When this snapshot was produced"
    )

    @model_validator(mode='after')
    def validate_unique_ids(self):
        """Validate that record IDs are unique within each collection."""
        for label, records in (("contributor", self.contributors), ("contribution", self.contributions)):
            seen = set()
            for record in records:
                if record.id in seen:
                    raise ValueError(f"Duplicate {label} id: {record.id}")
                seen.add(record.id)
        return self
