"""
Service module for classifying calendar dates into cycle phases.

Classification is a pure function of the date, the most recent cycle and
the average lengths; it is evaluated independently for every date, so it
is safe to call once per rendered calendar cell.

Typical usage:
    >>> phase = classify_phase(date(2025, 1, 3), most_recent, 28, 5)
    >>> phase.value
    'period'
    >>> calendar = get_phase_calendar(2025, 1, cycles, settings)
"""
from typing import Dict, List, Optional
from datetime import date

from src.models.cycle import CycleRecord
from src.models.phase import CyclePhase
from src.models.settings import CycleSettings
from src.services.constants import (
    DEFAULT_CYCLE_LENGTH,
    DEFAULT_PERIOD_LENGTH,
    FOLLICULAR_WINDOW_DAYS,
    OVULATION_WINDOW_DAYS
)
from src.services.utils import (
    clamp_length,
    days_between,
    get_most_recent_cycle,
    iterate_days,
    month_bounds
)

def determine_phase_for_cycle_day(
    cycle_day: int,
    average_period_length: int,
    follicular_days: int = FOLLICULAR_WINDOW_DAYS,
    ovulation_days: int = OVULATION_WINDOW_DAYS
) -> CyclePhase:
    """
    Map a zero-based day within the cycle to its phase.

    Args:
        cycle_day: Day offset within the cycle, starting at 0
        average_period_length: Length of the period window
        follicular_days: Length of the follicular window
        ovulation_days: Length of the ovulation window

    Returns:
        The phase covering that day
    """
    follicular_end = average_period_length + follicular_days
    ovulation_end = follicular_end + ovulation_days

    if cycle_day < average_period_length:
        return CyclePhase.PERIOD
    if cycle_day < follicular_end:
        return CyclePhase.FOLLICULAR
    if cycle_day < ovulation_end:
        return CyclePhase.OVULATION
    return CyclePhase.LUTEAL

def classify_phase(
    target_date: date,
    most_recent: Optional[CycleRecord],
    average_cycle_length: int,
    average_period_length: int,
    follicular_days: int = FOLLICULAR_WINDOW_DAYS,
    ovulation_days: int = OVULATION_WINDOW_DAYS
) -> CyclePhase:
    """
    Classify a calendar date into a cycle phase.

    Args:
        target_date: Date to classify
        most_recent: Cycle with the latest start date, or None without history
        average_cycle_length: Average cycle length in days
        average_period_length: Average period length in days
        follicular_days: Length of the follicular window
        ovulation_days: Length of the ovulation window

    Returns:
        Exactly one CyclePhase. FOLLICULAR is returned when there is no
        history or the date precedes the most recent cycle.

    Example:
        >>> classify_phase(date(2025, 1, 13), cycle, 28, 5)
        <CyclePhase.OVULATION: 'ovulation'>
    """
    if most_recent is None:
        return CyclePhase.FOLLICULAR

    cycle_length = clamp_length(
        average_cycle_length, DEFAULT_CYCLE_LENGTH, "average_cycle_length"
    )
    period_length = clamp_length(
        average_period_length, DEFAULT_PERIOD_LENGTH, "average_period_length"
    )

    days_since_start = days_between(most_recent.start_date, target_date)
    if days_since_start < 0:
        return CyclePhase.FOLLICULAR

    # An ongoing cycle is still bleeding within the period window
    if most_recent.is_open and days_since_start < period_length:
        return CyclePhase.PERIOD

    cycle_day = days_since_start % cycle_length
    return determine_phase_for_cycle_day(
        cycle_day,
        period_length,
        follicular_days=follicular_days,
        ovulation_days=ovulation_days
    )

def get_phase_for_date(
    target_date: date,
    cycles: List[CycleRecord],
    settings: CycleSettings
) -> CyclePhase:
    """
    Classify a date against a user's history and settings.

    Args:
        target_date: Date to classify
        cycles: Cycle records in any order
        settings: Settings holding the average lengths

    Returns:
        The phase for target_date
    """
    return classify_phase(
        target_date,
        get_most_recent_cycle(cycles),
        settings.average_cycle_length,
        settings.average_period_length
    )

def has_period_on_date(cycles: List[CycleRecord], target_date: date) -> bool:
    """
    Check whether any record marks the given date as a period day.

    A record marks its start date, and a closed record also marks every
    date up to and including its end date.
    """
    return any(cycle.covers(target_date) for cycle in cycles)

def get_phase_calendar(
    year: int,
    month: int,
    cycles: List[CycleRecord],
    settings: CycleSettings
) -> Dict[date, CyclePhase]:
    """
    Classify every day of a calendar month.

    Args:
        year: Calendar year
        month: Calendar month (1-12)
        cycles: Cycle records in any order
        settings: Settings holding the average lengths

    Returns:
        Ordered mapping of each date in the month to its phase
    """
    most_recent = get_most_recent_cycle(cycles)
    start, end = month_bounds(year, month)
    return {
        day: classify_phase(
            day,
            most_recent,
            settings.average_cycle_length,
            settings.average_period_length
        )
        for day in iterate_days(start, end)
    }
