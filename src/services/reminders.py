"""
Reminder scheduling service.

Translates the predicted period and ovulation dates into the fixed set of
reminder requests and hands them to a notifier. Every run cancels all
pending reminders first, then submits each request independently, so a
failed submission never blocks the others.

Typical usage:
    scheduler = ReminderScheduler(DynamoReminderNotifier(user_id))
    scheduled = scheduler.reschedule(prediction, settings)
"""
import asyncio
from typing import List, Optional
from datetime import date, datetime, time, timedelta

from aws_lambda_powertools import Logger

from src.models.phase import Prediction
from src.models.reminder import ReminderRequest, ReminderRule
from src.models.settings import CycleSettings
from src.services.constants import OVULATION_ANCHOR, PERIOD_ANCHOR, REMINDER_RULES
from src.services.notifier import ReminderNotifier

logger = Logger()

def _anchor_date(prediction: Prediction, anchor: str) -> Optional[date]:
    if anchor == PERIOD_ANCHOR:
        return prediction.next_period
    if anchor == OVULATION_ANCHOR:
        return prediction.next_ovulation
    raise ValueError(f"Unknown reminder anchor: {anchor}")

def build_reminder_requests(
    prediction: Prediction,
    now: Optional[datetime] = None,
    rules: Optional[List[ReminderRule]] = None
) -> List[ReminderRequest]:
    """
    Evaluate the reminder table against a prediction.

    Args:
        prediction: Predicted next period and ovulation dates
        now: Reference time, defaults to the current local time
        rules: Reminder table, defaults to REMINDER_RULES

    Returns:
        Requests whose fire time is strictly after now, in table order

    Example:
        >>> requests = build_reminder_requests(prediction, now=datetime(2025, 1, 1, 12))
        >>> [r.identifier for r in requests][:2]
        ['periodReminder3Days', 'periodReminder1Day']
    """
    if now is None:
        now = datetime.now()
    if rules is None:
        rules = REMINDER_RULES

    requests = []
    for rule in rules:
        anchor = _anchor_date(prediction, rule.anchor)
        if anchor is None:
            continue
        reminder_date = anchor + timedelta(days=rule.offset_days)
        fire_at = datetime.combine(reminder_date, time(hour=rule.hour))
        if fire_at <= now:
            continue
        requests.append(ReminderRequest(
            identifier=rule.identifier,
            title=rule.title,
            body=rule.body,
            fire_at=fire_at
        ))
    return requests

class ReminderScheduler:
    """Cancel-and-replace scheduling of cycle reminders."""

    def __init__(self, notifier: ReminderNotifier, rules: Optional[List[ReminderRule]] = None):
        """
        Initialize the scheduler.

        Args:
            notifier: Delivery service that receives the requests
            rules: Reminder table, defaults to REMINDER_RULES
        """
        self.notifier = notifier
        self.rules = rules if rules is not None else REMINDER_RULES

    def _cancel_all(self) -> None:
        try:
            self.notifier.cancel_all()
        except Exception:
            logger.exception("Error cancelling previous reminders")

    async def _submit(self, request: ReminderRequest) -> bool:
        try:
            await asyncio.to_thread(
                self.notifier.schedule,
                request.identifier,
                request.title,
                request.body,
                request.fire_at
            )
        except Exception as e:
            logger.error("Error scheduling reminder", extra={
                "identifier": request.identifier,
                "fire_at": request.fire_at.isoformat(),
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            return False
        return True

    async def _submit_all(self, requests: List[ReminderRequest]) -> List[bool]:
        return await asyncio.gather(*[
            self._submit(request)
            for request in requests
        ])

    def reschedule(
        self,
        prediction: Prediction,
        settings: Optional[CycleSettings] = None,
        now: Optional[datetime] = None
    ) -> List[str]:
        """
        Replace all pending reminders with ones for the given prediction.

        Args:
            prediction: Current prediction
            settings: User settings; reminders are only cancelled when disabled
            now: Reference time, defaults to the current local time

        Returns:
            Identifiers of the reminders that were accepted by the notifier
        """
        self._cancel_all()

        if settings is not None and not settings.reminders_enabled:
            logger.info("Reminders disabled, nothing scheduled", extra={
                "user_id": settings.user_id
            })
            return []

        requests = build_reminder_requests(prediction, now=now, rules=self.rules)
        if not requests:
            return []

        results = asyncio.run(self._submit_all(requests))
        scheduled = [
            request.identifier
            for request, ok in zip(requests, results)
            if ok
        ]
        logger.info("Scheduled reminders", extra={
            "requested": len(requests),
            "scheduled": len(scheduled),
            "identifiers": scheduled
        })
        return scheduled
