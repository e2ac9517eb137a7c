"""
Reminder notifier interface and its DynamoDB-backed implementation.

The reminder scheduler only talks to a ReminderNotifier. The DynamoDB
implementation queues pending reminders under the user's partition, one
item per stable identifier; the scheduled reminders handler later sends
the due ones over Telegram.
"""
from typing import Any, Dict, List, Optional, Protocol
from datetime import datetime

from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Key

from src.models.reminder import ReminderRequest
from src.services.exceptions import ReminderDeliveryError
from src.utils.dynamo import REMINDER_SK_PREFIX, create_pk, create_reminder_sk, get_dynamo

logger = Logger()

class ReminderNotifier(Protocol):
    """Delivery service the reminder scheduler hands requests to."""

    def cancel_all(self) -> None:
        """Remove every pending reminder."""
        ...

    def schedule(self, identifier: str, title: str, body: str, fire_at: datetime) -> None:
        """Queue one reminder, replacing any pending one with the same identifier."""
        ...

class DynamoReminderNotifier:
    """Queue of pending reminders for one user, stored in DynamoDB."""

    def __init__(self, user_id: str, dynamo_client=None):
        """
        Initialize the notifier.

        Args:
            user_id: User whose reminders are managed
            dynamo_client: Optional DynamoDB client, defaults to the shared one
        """
        self.user_id = user_id
        self.dynamo = dynamo_client if dynamo_client is not None else get_dynamo()

    def _pending_items(self) -> List[Dict[str, Any]]:
        return self.dynamo.query_items(
            partition_key="PK",
            partition_value=create_pk(self.user_id),
            sort_key_condition=Key("SK").begins_with(REMINDER_SK_PREFIX)
        )

    def cancel_all(self) -> None:
        """
        Delete every pending reminder for the user.

        Raises:
            ReminderDeliveryError: If the pending reminders cannot be removed
        """
        try:
            items = self._pending_items()
            for item in items:
                self.dynamo.delete_item({"PK": item["PK"], "SK": item["SK"]})
        except Exception as e:
            logger.error("Error cancelling reminders", extra={
                "user_id": self.user_id,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise ReminderDeliveryError(f"Failed to cancel reminders: {str(e)}")
        logger.info("Cancelled pending reminders", extra={
            "user_id": self.user_id,
            "count": len(items)
        })

    def schedule(self, identifier: str, title: str, body: str, fire_at: datetime) -> None:
        """
        Queue a reminder under its stable identifier.

        Raises:
            ReminderDeliveryError: If the reminder cannot be written
        """
        try:
            self.dynamo.put_item({
                "PK": create_pk(self.user_id),
                "SK": create_reminder_sk(identifier),
                "identifier": identifier,
                "title": title,
                "body": body,
                "fire_at": fire_at.isoformat()
            })
        except Exception as e:
            logger.error("Error scheduling reminder", extra={
                "user_id": self.user_id,
                "identifier": identifier,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise ReminderDeliveryError(f"Failed to schedule reminder {identifier}: {str(e)}")

    def get_due_reminders(self, now: Optional[datetime] = None) -> List[ReminderRequest]:
        """
        List pending reminders whose fire time has been reached.

        Args:
            now: Reference time, defaults to the current local time

        Returns:
            Due reminders ordered by fire time
        """
        if now is None:
            now = datetime.now()
        reminders = [
            ReminderRequest(
                identifier=item["identifier"],
                title=item["title"],
                body=item["body"],
                fire_at=item["fire_at"]
            )
            for item in self._pending_items()
        ]
        due = [r for r in reminders if r.fire_at <= now]
        return sorted(due, key=lambda r: r.fire_at)

    def remove(self, identifier: str) -> None:
        """Remove one pending reminder after it has been delivered."""
        self.dynamo.delete_item({
            "PK": create_pk(self.user_id),
            "SK": create_reminder_sk(identifier)
        })
