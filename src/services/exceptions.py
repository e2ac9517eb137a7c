"""
Service-level exceptions.

This module contains exceptions that can be raised by the store and
notifier layers. The calculation engines never raise for bad data.
"""

class CycleTrackerError(Exception):
    """Base exception for cycle tracker errors."""
    pass

class CycleStoreError(CycleTrackerError):
    """Raised when the cycle record store cannot be read or written."""
    pass

class ReminderDeliveryError(CycleTrackerError):
    """Raised when a reminder cannot be queued or delivered."""
    pass
