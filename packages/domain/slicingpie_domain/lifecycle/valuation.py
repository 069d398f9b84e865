"""Saved valuation settings and their history."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, List, Optional

from ..calculations import get_current_valuation
from ..schemas import (
    MAX_HISTORY_ENTRIES,
    ValuationConfig,
    ValuationHistoryEntry,
    generate_id,
    utc_now,
)

logger = logging.getLogger(__name__)


class ValuationHistory:
    """Current valuation config plus a bounded history of saved valuations.

    History is newest first and keeps at most MAX_HISTORY_ENTRIES; saving
    past the limit evicts the oldest entry.

    Example:
        valuations = ValuationHistory()
        valuations.update_config(enabled=True, mode="manual", manual_value=Decimal("500000"))
        valuations.save()                  # entry with value 500000
        valuations.current_valuation       # Decimal("500000")
    """

    def __init__(
        self,
        config: Optional[ValuationConfig] = None,
        entries: Optional[Iterable[ValuationHistoryEntry]] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_id,
        max_entries: int = MAX_HISTORY_ENTRIES,
    ):
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self.config = config or ValuationConfig()
        self._entries: List[ValuationHistoryEntry] = list(entries or [])[:max_entries]
        self._clock = clock
        self._id_factory = id_factory
        self.max_entries = max_entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[ValuationHistoryEntry]:
        """Saved valuations, newest first."""
        return list(self._entries)

    @property
    def current_valuation(self) -> Optional[Decimal]:
        return get_current_valuation(self.config)

    @property
    def is_valuation_set(self) -> bool:
        value = self.current_valuation
        return value is not None and value > 0

    def update_config(self, **changes: Any) -> ValuationConfig:
        """Apply setting changes and stamp last_updated.

        Raises:
            pydantic.ValidationError: If a change is invalid (config unchanged)
        """
        self.config = ValuationConfig.model_validate({
            **self.config.model_dump(),
            **changes,
            "last_updated": self._clock(),
        })
        return self.config

    def save(self) -> Optional[ValuationHistoryEntry]:
        """Record the current valuation in the history.

        Returns:
            The new entry, or None when the active mode has no value yet
        """
        value = get_current_valuation(self.config)
        if value is None:
            logger.warning("Cannot save valuation: no %s value set", self.config.mode)
            return None

        entry = ValuationHistoryEntry(
            id=self._id_factory(),
            timestamp=self._clock(),
            mode=self.config.mode,
            value=value,
            manual_value=self.config.manual_value,
            business_metrics=self.config.business_metrics,
        )
        self._entries = [entry] + self._entries[: self.max_entries - 1]
        self.config = self.config.model_copy(update={"last_updated": entry.timestamp})
        logger.info("Saved %s valuation %s", entry.mode, entry.value)
        return entry

    def restore(self, entry_id: str) -> Optional[ValuationConfig]:
        """Load a history entry's mode and inputs back into the config.

        Returns:
            The updated config, or None if the entry is unknown
        """
        entry = next((e for e in self._entries if e.id == entry_id), None)
        if entry is None:
            logger.warning("Cannot restore valuation %s: not found", entry_id)
            return None
        return self.update_config(
            mode=entry.mode,
            manual_value=entry.manual_value,
            business_metrics=entry.business_metrics,
        )

    def clear(self) -> None:
        """Drop every history entry; the config is kept."""
        count = len(self._entries)
        self._entries = []
        logger.info("Cleared %d valuation history entries", count)
