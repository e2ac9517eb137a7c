"""
Statistics calculation service for cycle tracking data.

This module provides the rolling average of cycle lengths used by the
phase classifier and the prediction engine, plus a summary of the
user's history for display.

Typical usage:
    cycles = store.list_cycles(user_id)
    average = calculate_average_cycle_length(cycles, settings.average_cycle_length)
"""
from typing import Any, Dict, List, Optional
from datetime import date
from statistics import mean
from aws_lambda_powertools import Logger

from src.models.cycle import CycleRecord
from src.models.settings import CycleSettings
from src.services.constants import (
    DEFAULT_PERIOD_LENGTH,
    MAX_CYCLE_GAP_DAYS,
    RECENT_CYCLES_LIMIT
)
from src.services.utils import days_between, sort_most_recent_first, clamp_length

logger = Logger()

def calculate_average_cycle_length(
    cycles: List[CycleRecord],
    fallback: int,
    max_gap: int = MAX_CYCLE_GAP_DAYS
) -> int:
    """
    Calculate the average number of days between consecutive cycle starts.

    Args:
        cycles: Cycle records sorted by start date, most recent first
        fallback: Value returned when no valid gap can be measured
        max_gap: Gaps of this many days or more are treated as outliers

    Returns:
        Floor of the mean of all gaps strictly between 0 and max_gap,
        or fallback when there are fewer than two records or no valid gaps

    Example:
        >>> calculate_average_cycle_length(cycles, fallback=28)
        29
    """
    if len(cycles) < 2:
        return fallback

    total_days = 0
    count = 0
    for newer, older in zip(cycles, cycles[1:]):
        gap = days_between(older.start_date, newer.start_date)
        if 0 < gap < max_gap:
            total_days += gap
            count += 1
        else:
            logger.debug("Skipping cycle gap outside valid range", extra={
                "newer_start": str(newer.start_date),
                "older_start": str(older.start_date),
                "gap": gap
            })

    if count == 0:
        return fallback
    return total_days // count

def calculate_symptom_averages(cycles: List[CycleRecord]) -> Dict[str, Optional[float]]:
    """
    Average each symptom rating over the given cycles.

    Args:
        cycles: Cycle records to analyze

    Returns:
        Dictionary with intensity, mood, energy and pain averages
        (None for every rating when there are no cycles)
    """
    ratings = ("intensity", "mood", "energy", "pain")
    if not cycles:
        return {rating: None for rating in ratings}
    return {
        rating: round(mean(getattr(c, rating) for c in cycles), 2)
        for rating in ratings
    }

def calculate_cycle_statistics(
    cycles: List[CycleRecord],
    settings: CycleSettings,
    next_period: Optional[date] = None,
    today: Optional[date] = None
) -> Dict[str, Any]:
    """
    Calculate overall cycle statistics for display.

    Args:
        cycles: Cycle records in any order
        settings: The user's current settings
        next_period: Predicted next period start, if known
        today: Reference date for days_until_next_period, defaults to today

    Returns:
        Dictionary containing:
        - total_cycles: Number of recorded cycles
        - average_cycle_length: Rolling average from history
        - average_period_length: Configured period length
        - recent_cycles: The most recent cycles, newest first
        - symptom_averages: Average symptom ratings
        - next_period: Predicted next period start
        - days_until_next_period: Days from today to next_period
    """
    if today is None:
        today = date.today()

    ordered = sort_most_recent_first(cycles)
    average_cycle_length = calculate_average_cycle_length(
        ordered, settings.average_cycle_length
    )

    days_until = None
    if next_period is not None:
        days_until = days_between(today, next_period)

    logger.info("Calculated cycle statistics", extra={
        "user_id": settings.user_id,
        "total_cycles": len(ordered),
        "average_cycle_length": average_cycle_length
    })

    return {
        "total_cycles": len(ordered),
        "average_cycle_length": average_cycle_length,
        "average_period_length": clamp_length(
            settings.average_period_length,
            DEFAULT_PERIOD_LENGTH,
            "average_period_length"
        ),
        "recent_cycles": ordered[:RECENT_CYCLES_LIMIT],
        "symptom_averages": calculate_symptom_averages(ordered),
        "next_period": next_period,
        "days_until_next_period": days_until
    }
