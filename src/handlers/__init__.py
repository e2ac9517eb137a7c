"""
Lambda handlers package for AWS Lambda functions.
"""
from .prediction import handler as prediction_handler
from .reminders import handler as reminders_handler

__all__ = ["prediction_handler", "reminders_handler"]
