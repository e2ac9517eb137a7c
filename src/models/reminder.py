"""
Reminder model definitions.
"""
from datetime import datetime
from typing import NamedTuple
from pydantic import BaseModel


class ReminderRule(NamedTuple):
    """One row of the reminder policy table."""
    identifier: str
    anchor: str  # "period" or "ovulation"
    offset_days: int
    hour: int
    title: str
    body: str


class ReminderRequest(BaseModel):
    """
    A notification ready to hand to the notifier.

    The identifier is stable per rule, so scheduling a request again
    replaces the previous one instead of duplicating it.
    """
    identifier: str
    title: str
    body: str
    fire_at: datetime
