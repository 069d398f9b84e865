"""Append-only audit trail of deletions and restorations."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, Tuple

from ..schemas import ActivityEvent, generate_id, utc_now

logger = logging.getLogger(__name__)


class ActivityLog:
    """Ordered collection of immutable ActivityEvents.

    Events can only be appended. There is no removal or edit operation, and
    events themselves are frozen models.

    Example:
        log = ActivityLog()
        log.add_event("deleted", "contributor", "c1", "Alice", Decimal("20000"), cascade_count=3)
        log.get_recent_events(5)   # newest first
    """

    def __init__(
        self,
        events: Optional[Iterable[ActivityEvent]] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_id,
    ):
        self._events: List[ActivityEvent] = []
        self._clock = clock
        self._id_factory = id_factory
        if events:
            self.extend(events)

    def __len__(self) -> int:
        return len(self._events)

    @property
    def events(self) -> Tuple[ActivityEvent, ...]:
        """All events, oldest first."""
        return tuple(self._events)

    def add_event(
        self,
        action: str,
        target_kind: str,
        target_id: str,
        target_label: str,
        slices_affected: Decimal,
        cascade_count: Optional[int] = None,
    ) -> ActivityEvent:
        """Record a delete or restore.

        Raises:
            pydantic.ValidationError: If action/target_kind are not recognized
        """
        event = ActivityEvent(
            id=self._id_factory(),
            action=action,
            target_kind=target_kind,
            target_id=target_id,
            target_label=target_label,
            slices_affected=slices_affected,
            cascade_count=cascade_count,
            timestamp=self._clock(),
        )
        self._events.append(event)
        logger.info(
            "Activity: %s %s %s (%s slices%s)",
            action, target_kind, target_label, slices_affected,
            f", {cascade_count} cascaded" if cascade_count is not None else "",
        )
        return event

    def extend(self, events: Iterable[ActivityEvent]) -> int:
        """Append previously recorded events (e.g. from an import).

        Events whose ID is already in the log are skipped. The merged log is
        re-ordered by timestamp (stable, so same-instant events keep their
        order) and recent events stay newest first.

        Returns:
            Number of events appended
        """
        known = {e.id for e in self._events}
        appended = 0
        for event in sorted(events, key=lambda e: e.timestamp):
            if event.id in known:
                continue
            known.add(event.id)
            self._events.append(event)
            appended += 1
        if appended:
            self._events.sort(key=lambda e: e.timestamp)
        return appended

    def get_recent_events(self, limit: int = 10) -> List[ActivityEvent]:
        """Most recent events, newest first.

        Raises:
            ValueError: If limit is negative
        """
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        return list(reversed(self._events))[:limit]
