"""Shared fixtures for domain tests."""

from datetime import date
from decimal import Decimal

import pytest

from slicingpie_domain.lifecycle import SlicingPieLedger
from slicingpie_domain.sample_data import build_sample_data

from fakes import SequentialIds, StepClock


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def ledger(clock):
    return SlicingPieLedger(clock=clock, id_factory=SequentialIds())


@pytest.fixture
def populated_ledger(ledger):
    """Ledger with Alice (time, $50/hr) and Bob (cash).

    Alice: 10h x $50 x 2 = 1,000 slices
    Bob:   $1,000 x 4    = 4,000 slices
    """
    alice = ledger.add_contributor("Alice", hourly_rate=Decimal("50"))
    bob = ledger.add_contributor("Bob", hourly_rate=Decimal("100"))
    ledger.add_contribution(alice.id, "time", 10, date(2024, 1, 15))
    ledger.add_contribution(bob.id, "cash", 1000, date(2024, 2, 1))
    return ledger


@pytest.fixture
def sample_data():
    return build_sample_data()
