"""
Lambda handler for cycle predictions and phase lookups.
"""
from typing import Any, Dict
from datetime import date
import json

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from src.services.notifier import DynamoReminderNotifier
from src.services.reminders import ReminderScheduler
from src.services.store import CycleRecordStore
from src.services.tracker import CycleTracker
from src.utils.logging import logger

tracer = Tracer(service="cycle_tracker")

def build_tracker(user_id: str) -> CycleTracker:
    """Wire a tracker with the DynamoDB store and reminder queue."""
    return CycleTracker(
        user_id,
        store=CycleRecordStore(),
        scheduler=ReminderScheduler(DynamoReminderNotifier(user_id))
    )

@logger.inject_lambda_context
@tracer.capture_lambda_handler
def handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Handle prediction request.

    The body carries "user_id" and an optional ISO "date" to classify,
    defaulting to today. Read-only: the store and pending reminders are
    left untouched.

    Args:
        event: API Gateway Lambda proxy event
        context: Lambda context

    Returns:
        API Gateway Lambda proxy response
    """
    try:
        body = json.loads(event.get("body") or "{}")
        user_id = body.get("user_id")

        if not user_id:
            return {
                "statusCode": 400,
                "body": json.dumps({
                    "error": "Missing user_id"
                })
            }

        target_date = date.fromisoformat(body["date"]) if body.get("date") else date.today()

        with build_tracker(user_id) as tracker:
            snapshot = tracker.compute()
            phase = tracker.classify(target_date)
        prediction = snapshot.prediction

        return {
            "statusCode": 200,
            "body": json.dumps({
                "user_id": user_id,
                "date": target_date.isoformat(),
                "phase": phase.value,
                "next_period": prediction.next_period.isoformat() if prediction.next_period else None,
                "next_ovulation": prediction.next_ovulation.isoformat() if prediction.next_ovulation else None,
                "average_cycle_length": snapshot.settings.average_cycle_length,
                "average_period_length": snapshot.settings.average_period_length
            })
        }

    except ValueError as e:
        return {
            "statusCode": 400,
            "body": json.dumps({
                "error": str(e)
            })
        }
    except Exception as e:
        logger.exception("Error calculating prediction")
        return {
            "statusCode": 500,
            "body": json.dumps({
                "error": str(e)
            })
        }
