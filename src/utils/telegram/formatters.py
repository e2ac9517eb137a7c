"""
Message formatting functions for Telegram bot.
"""
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.models.reminder import ReminderRequest

REMINDER_ICONS = {
    "period": "🩸",
    "ovulation": "🌕",
}

def format_reminder_message(reminder: "ReminderRequest") -> str:
    """
    Format a reminder into a message.

    Args:
        reminder: Reminder with title and body

    Returns:
        Formatted message string
    """
    icon = REMINDER_ICONS["ovulation"] if reminder.identifier.startswith("ovulation") \
        else REMINDER_ICONS["period"]
    return f"{icon} <b>{reminder.title}</b>\n{reminder.body}"
