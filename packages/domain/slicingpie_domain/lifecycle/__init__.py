"""Record lifecycle: soft delete, cascade, restore, the activity log and
valuation history.

Usage:
    from slicingpie_domain.lifecycle import SlicingPieLedger

    ledger = SlicingPieLedger()
    bob = ledger.add_contributor("Bob", hourly_rate=125)
    ledger.add_contribution(bob.id, "cash", 1000, date(2024, 3, 1))
    ledger.remove_contributor(bob.id)
    ledger.get_recent_activity(5)
"""

from .manager import EntityManager, DuplicateRecordError
from .activity_log import ActivityLog
from .ledger import SlicingPieLedger
from .valuation import ValuationHistory

__all__ = [
    "EntityManager",
    "DuplicateRecordError",
    "ActivityLog",
    "SlicingPieLedger",
    "ValuationHistory",
]
