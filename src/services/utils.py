"""
Shared utility functions for cycle-related services.

These utilities are used across the statistics, phase and prediction
services to handle common operations like ordering records, day
arithmetic and guarding configured lengths.
"""
from typing import List, Optional, Tuple
from datetime import date, timedelta

from aws_lambda_powertools import Logger

from src.models.cycle import CycleRecord

logger = Logger()

def days_between(start: date, end: date) -> int:
    """
    Count whole calendar days from start to end.

    Args:
        start: Earlier date
        end: Later date

    Returns:
        Number of days, negative if end precedes start

    Example:
        >>> days_between(date(2025, 1, 1), date(2025, 1, 29))
        28
    """
    return (end - start).days

def sort_most_recent_first(cycles: List[CycleRecord]) -> List[CycleRecord]:
    """
    Sort cycle records by start date, newest first.

    Records sharing a start date keep the most recently created first.
    """
    return sorted(
        cycles,
        key=lambda c: (c.start_date, c.created_at),
        reverse=True
    )

def get_most_recent_cycle(cycles: List[CycleRecord]) -> Optional[CycleRecord]:
    """Return the record with the latest start date, or None."""
    if not cycles:
        return None
    return sort_most_recent_first(cycles)[0]

def get_open_cycle(cycles: List[CycleRecord]) -> Optional[CycleRecord]:
    """Return the most recent record without an end date, or None."""
    for cycle in sort_most_recent_first(cycles):
        if cycle.is_open:
            return cycle
    return None

def clamp_length(value: Optional[int], default: int, name: str = "length") -> int:
    """
    Guard a configured length against non-positive values.

    Args:
        value: Configured number of days
        default: Value used when the configured one is invalid
        name: Setting name, used for logging

    Returns:
        value if it is a positive integer, otherwise default
    """
    if value is None or value <= 0:
        logger.warning("Invalid length clamped to default", extra={
            "setting": name,
            "value": value,
            "default": default
        })
        return default
    return value

def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """
    Get the half-open date range covering a calendar month.

    Returns:
        Tuple of (first day of month, first day of next month)
    """
    start = date(year, month, 1)
    if month == 12:
        end = date(year + 1, 1, 1)
    else:
        end = date(year, month + 1, 1)
    return start, end

def iterate_days(start: date, end: date):
    """Yield every date in the half-open range [start, end)."""
    current = start
    while current < end:
        yield current
        current += timedelta(days=1)
