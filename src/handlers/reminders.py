"""
Lambda handler for delivering due cycle reminders.

Runs on a schedule. For every subscription in the event it sends each
pending reminder whose fire time has passed through Telegram, and removes
it from the queue once Telegram accepted it.
"""
from typing import Any, Dict, List, Optional
from datetime import datetime
import json

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from src.services.notifier import DynamoReminderNotifier
from src.utils.telegram import TelegramClient
from src.utils.logging import logger

tracer = Tracer(service="cycle_tracker")

def deliver_due_reminders(
    notifier: DynamoReminderNotifier,
    telegram: TelegramClient,
    chat_id: str,
    now: Optional[datetime] = None
) -> List[str]:
    """
    Send every due reminder for one user.

    Args:
        notifier: Reminder queue of the user
        telegram: Telegram client used for delivery
        chat_id: Chat that receives the reminders
        now: Reference time, defaults to the current local time

    Returns:
        Identifiers of the reminders that were delivered
    """
    delivered = []
    for reminder in notifier.get_due_reminders(now):
        try:
            telegram.send_reminder(chat_id, reminder)
            notifier.remove(reminder.identifier)
        except Exception:
            logger.exception("Error delivering reminder", extra={
                "user_id": notifier.user_id,
                "identifier": reminder.identifier
            })
            continue
        delivered.append(reminder.identifier)
    logger.info("Delivered due reminders", extra={
        "user_id": notifier.user_id,
        "delivered": delivered
    })
    return delivered

@logger.inject_lambda_context
@tracer.capture_lambda_handler
def handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Handle scheduled reminder delivery.

    Subscriptions without a user_id or chat_id are logged and skipped.

    Args:
        event: Scheduled event with "subscriptions", a list of
            {"user_id": ..., "chat_id": ...} entries
        context: Lambda context

    Returns:
        Lambda response
    """
    try:
        subscriptions = event.get("subscriptions", [])
        telegram = TelegramClient()

        delivered = {}
        skipped = 0
        for subscription in subscriptions:
            user_id = subscription.get("user_id") if isinstance(subscription, dict) else None
            chat_id = subscription.get("chat_id") if isinstance(subscription, dict) else None
            if not user_id or not chat_id:
                logger.warning("Skipping invalid subscription", extra={
                    "subscription": str(subscription)
                })
                skipped += 1
                continue

            try:
                delivered[user_id] = deliver_due_reminders(
                    DynamoReminderNotifier(user_id),
                    telegram,
                    chat_id
                )
            except Exception:
                logger.exception("Error delivering reminders for user", extra={
                    "user_id": user_id
                })
                skipped += 1

        return {
            "statusCode": 200,
            "body": json.dumps({
                "message": "Reminders delivered",
                "delivered": delivered,
                "skipped": skipped
            })
        }

    except Exception as e:
        logger.exception("Error delivering reminders")
        return {
            "statusCode": 500,
            "body": json.dumps({
                "error": str(e)
            })
        }
