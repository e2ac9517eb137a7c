"""
Telegram utilities package.
"""
from .formatters import format_reminder_message
from .client import TelegramClient

__all__ = [
    "TelegramClient",
    "format_reminder_message"
]
