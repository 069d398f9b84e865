"""Slicing Pie Domain Engine - Core domain models and business logic.

This package provides the foundational layer for slicing pie equity tracking:
- Contributions converted into slices with per-type multipliers
- Equity percentages aggregated over active contributions
- Vesting schedules with cliffs, evaluated at any date
- Soft delete with contributor-to-contribution cascade and restore
- Append-only activity log of deletions and restorations

The domain layer is designed to be:
- Framework-agnostic (no web or storage dependencies)
- Testable (pure Python with Pydantic validation)
- Explicit about state (the ledger is the only mutable store)
"""

from .schemas import *  # noqa: F403, F401

__version__ = "0.1.0"
