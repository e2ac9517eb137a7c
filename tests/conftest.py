"""
Pytest configuration and shared fixtures.
"""
import pytest
from datetime import date, timedelta
from typing import List, Optional

from src.models.cycle import CycleRecord
from src.models.settings import CycleSettings
from tests.doubles import ImmediateExecutor, InMemoryCycleStore, RecordingNotifier

@pytest.fixture
def make_cycle():
    """Factory for cycle records of the test user."""
    def _make(start: date, end: Optional[date] = None, **kwargs) -> CycleRecord:
        return CycleRecord(user_id="123", start_date=start, end_date=end, **kwargs)
    return _make

@pytest.fixture
def regular_cycles(make_cycle) -> List[CycleRecord]:
    """Five closed 28-day cycles starting 2024-01-01, newest first."""
    cycles = [
        make_cycle(
            date(2024, 1, 1) + timedelta(days=i * 28),
            date(2024, 1, 5) + timedelta(days=i * 28)
        )
        for i in range(5)
    ]
    return list(reversed(cycles))

@pytest.fixture
def settings() -> CycleSettings:
    """Default settings for the test user."""
    return CycleSettings(user_id="123")

@pytest.fixture
def store() -> InMemoryCycleStore:
    return InMemoryCycleStore()

@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()

@pytest.fixture
def executor() -> ImmediateExecutor:
    return ImmediateExecutor()
