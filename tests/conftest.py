"""
Shared test fixtures.
"""

import random
import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from services.responder import CompanionResponder


class ManualTimer:
    """Timer that records scheduled callbacks until a test fires them."""

    def __init__(self):
        self.scheduled = []

    def __call__(self, delay_ms, callback):
        self.scheduled.append((delay_ms, callback))

    @property
    def pending_count(self) -> int:
        return len(self.scheduled)

    def fire_next(self):
        _, callback = self.scheduled.pop(0)
        callback()


@pytest.fixture
def manual_timer():
    """Timer whose callbacks run only when the test says so."""
    return ManualTimer()


@pytest.fixture
def responder():
    """Responder with the built-in bank and a seeded random source."""
    return CompanionResponder(rng=random.Random(1234))
