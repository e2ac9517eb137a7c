"""
Cycle record model definition.

A CycleRecord is one menstrual cycle instance. A record with no end date is
the "open" cycle. A record whose end date equals its start date is a
single-day marking created from the calendar.
"""
from datetime import date, datetime
from typing import Optional
from uuid import uuid4
from pydantic import BaseModel, Field, model_validator


class CycleRecord(BaseModel):
    """
    Represents one menstrual cycle with its symptom ratings.
    """
    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    start_date: date = Field(default_factory=date.today)
    end_date: Optional[date] = None
    intensity: int = Field(2, ge=0, le=5)
    mood: int = Field(3, ge=0, le=5)
    energy: int = Field(3, ge=0, le=5)
    pain: int = Field(0, ge=0, le=5)
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def check_end_date(self) -> "CycleRecord":
        """Reject an end date that precedes the start date."""
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date cannot precede start_date")
        return self

    @property
    def is_open(self) -> bool:
        """True while the cycle is ongoing."""
        return self.end_date is None

    @property
    def is_single_day(self) -> bool:
        """True for a one-day marking (start and end on the same date)."""
        return self.end_date == self.start_date

    def covers(self, target_date: date) -> bool:
        """
        Check whether the record marks the given date.

        An open record only marks its start date; a closed record marks
        every date from start to end inclusive.
        """
        if target_date == self.start_date:
            return True
        if self.end_date is None:
            return False
        return self.start_date <= target_date <= self.end_date
