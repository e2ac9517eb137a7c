"""
Per-user cycle settings model.
"""
from pydantic import BaseModel, Field

from src.services.constants import (
    DEFAULT_CYCLE_LENGTH,
    DEFAULT_PERIOD_LENGTH,
    DEFAULT_REMINDER_DAYS_BEFORE
)


class CycleSettings(BaseModel):
    """
    Singleton-per-user configuration.

    average_cycle_length is recomputed from history after every change but
    can be overridden by the user; average_period_length is user-set only.
    """
    user_id: str
    average_cycle_length: int = DEFAULT_CYCLE_LENGTH
    average_period_length: int = DEFAULT_PERIOD_LENGTH
    reminders_enabled: bool = True
    reminder_days_before: int = Field(DEFAULT_REMINDER_DAYS_BEFORE, ge=0)
