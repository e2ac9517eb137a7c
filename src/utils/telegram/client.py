"""
Telegram API client implementation.
"""
import os
from typing import Dict, Any
import json
import requests

from src.models.reminder import ReminderRequest
from .formatters import format_reminder_message

class TelegramClient:
    """Client for interacting with Telegram Bot API."""

    def __init__(self):
        self.token = os.environ["TELEGRAM_BOT_TOKEN"]
        self.base_url = f"https://api.telegram.org/bot{self.token}"

    def send_message(
        self,
        chat_id: str,
        text: str,
        parse_mode: str = "HTML"
    ) -> Dict[str, Any]:
        """
        Send a message to a specific chat.

        Args:
            chat_id: Telegram chat ID
            text: Message text
            parse_mode: Telegram parse mode

        Returns:
            Response from Telegram API

        Raises:
            requests.exceptions.HTTPError: If Telegram rejects the message
        """
        data = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": parse_mode
        }

        response = requests.post(
            f"{self.base_url}/sendMessage",
            json=data
        )
        # Let non-200 errors raise so the reminder stays queued for the next run
        response.raise_for_status()
        return {
            "statusCode": 200,
            "headers": {
                "Content-Type": "application/json"
            },
            "body": json.dumps({"ok": True, "result": response.json()})
        }

    def send_reminder(
        self,
        chat_id: str,
        reminder: ReminderRequest
    ) -> Dict[str, Any]:
        """
        Send a formatted cycle reminder.

        Args:
            chat_id: Telegram chat ID
            reminder: Reminder to deliver

        Returns:
            Response from Telegram API
        """
        return self.send_message(
            chat_id=chat_id,
            text=format_reminder_message(reminder)
        )
