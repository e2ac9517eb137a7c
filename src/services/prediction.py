"""
Service module for predicting the next period and ovulation.

Predictions are a pure function of the cycle history and the stored
average cycle length. The recomputed average is returned alongside the
dates so the caller can write it back to the settings record.

Typical usage:
    cycles = store.list_cycles(user_id)
    prediction = predict_next_cycle(cycles, settings.average_cycle_length)
    if prediction.is_available:
        print(f"Next period expected on {prediction.next_period}")
"""
from typing import List
from datetime import timedelta

from aws_lambda_powertools import Logger

from src.models.cycle import CycleRecord
from src.models.phase import Prediction
from src.services.constants import (
    DEFAULT_CYCLE_LENGTH,
    LUTEAL_PHASE_DAYS,
    MAX_CYCLE_GAP_DAYS
)
from src.services.statistics import calculate_average_cycle_length
from src.services.utils import clamp_length, sort_most_recent_first

logger = Logger()

def predict_next_cycle(
    cycles: List[CycleRecord],
    average_cycle_length: int,
    luteal_days: int = LUTEAL_PHASE_DAYS,
    max_gap: int = MAX_CYCLE_GAP_DAYS
) -> Prediction:
    """
    Predict the next period start and the next ovulation date.

    Args:
        cycles: Cycle history, most recent first
        average_cycle_length: Currently stored average, used as fallback
        luteal_days: Days between ovulation and the next period
        max_gap: Outlier threshold passed to the statistics engine

    Returns:
        Prediction with the recomputed average. Both dates are None when
        there is no history.

    Example:
        >>> prediction = predict_next_cycle(cycles, 28)
        >>> prediction.next_period, prediction.next_ovulation
        (datetime.date(2025, 1, 29), datetime.date(2025, 1, 15))
    """
    ordered = sort_most_recent_first(cycles)
    fallback = clamp_length(
        average_cycle_length, DEFAULT_CYCLE_LENGTH, "average_cycle_length"
    )
    average = calculate_average_cycle_length(ordered, fallback, max_gap=max_gap)

    if not ordered:
        logger.info("No cycle history, skipping prediction")
        return Prediction(average_cycle_length=average)

    next_period = ordered[0].start_date + timedelta(days=average)
    next_ovulation = next_period - timedelta(days=luteal_days)

    logger.info("Predicted next cycle", extra={
        "last_start": str(ordered[0].start_date),
        "average_cycle_length": average,
        "next_period": str(next_period),
        "next_ovulation": str(next_ovulation)
    })

    return Prediction(
        next_period=next_period,
        next_ovulation=next_ovulation,
        average_cycle_length=average
    )
