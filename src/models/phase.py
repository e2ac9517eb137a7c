"""
Phase and prediction model definitions.
"""
from enum import Enum
from datetime import date
from typing import Optional
from pydantic import BaseModel


class CyclePhase(str, Enum):
    """
    Classification bucket for a calendar date.
    """
    PERIOD = "period"
    FOLLICULAR = "follicular"
    OVULATION = "ovulation"
    LUTEAL = "luteal"

    @property
    def display_name(self) -> str:
        """Human readable phase name."""
        return PHASE_DISPLAY_NAMES[self]


PHASE_DISPLAY_NAMES = {
    CyclePhase.PERIOD: "Menstruation",
    CyclePhase.FOLLICULAR: "Follicular",
    CyclePhase.OVULATION: "Ovulation",
    CyclePhase.LUTEAL: "Luteal",
}


class Prediction(BaseModel):
    """
    Forward-looking estimate derived from cycle history.

    Both dates are None when there is no history to predict from.
    """
    next_period: Optional[date] = None
    next_ovulation: Optional[date] = None
    average_cycle_length: int

    @property
    def is_available(self) -> bool:
        """Check if a prediction could be made."""
        return self.next_period is not None
