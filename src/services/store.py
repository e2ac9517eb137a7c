"""
Cycle record store backed by DynamoDB.

Records live under the user's partition with sort keys ordered by start
date, so the newest-first listing and month range queries are plain key
queries. The settings record is created with defaults on first read.

Typical usage:
    store = CycleRecordStore()
    cycles = store.list_cycles(user_id)  # newest first
    settings = store.get_settings(user_id)
"""
from typing import Any, Dict, List, Optional
from datetime import date

from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Key

from src.models.cycle import CycleRecord
from src.models.settings import CycleSettings
from src.services.constants import DEFAULT_REMINDER_DAYS_BEFORE
from src.services.exceptions import CycleStoreError
from src.services.utils import month_bounds
from src.utils.dynamo import (
    CYCLE_SK_PREFIX,
    SETTINGS_SK,
    create_cycle_sk,
    create_pk,
    get_dynamo
)

logger = Logger()

class CycleRecordStore:
    """Service for persisting cycle records and settings."""

    def __init__(self, dynamo_client=None):
        """
        Initialize the store.

        Args:
            dynamo_client: Optional DynamoDB client, defaults to the shared one
        """
        self.dynamo = dynamo_client if dynamo_client is not None else get_dynamo()

    def _cycle_key(self, record: CycleRecord) -> Dict[str, str]:
        return {
            "PK": create_pk(record.user_id),
            "SK": create_cycle_sk(record.start_date.isoformat(), record.id)
        }

    @staticmethod
    def _to_item(record: CycleRecord) -> Dict[str, Any]:
        item = {
            "id": record.id,
            "user_id": record.user_id,
            "start_date": record.start_date.isoformat(),
            "intensity": record.intensity,
            "mood": record.mood,
            "energy": record.energy,
            "pain": record.pain,
            "created_at": record.created_at.isoformat()
        }
        if record.end_date is not None:
            item["end_date"] = record.end_date.isoformat()
        if record.notes is not None:
            item["notes"] = record.notes
        return item

    @staticmethod
    def _from_item(item: Dict[str, Any]) -> CycleRecord:
        # DynamoDB returns numbers as Decimal
        return CycleRecord(
            id=item["id"],
            user_id=item["user_id"],
            start_date=item["start_date"],
            end_date=item.get("end_date"),
            intensity=int(item.get("intensity", 2)),
            mood=int(item.get("mood", 3)),
            energy=int(item.get("energy", 3)),
            pain=int(item.get("pain", 0)),
            notes=item.get("notes"),
            created_at=item["created_at"]
        )

    def list_cycles(self, user_id: str) -> List[CycleRecord]:
        """
        List all cycle records for a user.

        Args:
            user_id: User identifier

        Returns:
            Cycle records sorted by start date, most recent first

        Raises:
            CycleStoreError: If the records cannot be read
        """
        try:
            items = self.dynamo.query_items(
                partition_key="PK",
                partition_value=create_pk(user_id),
                sort_key_condition=Key("SK").begins_with(CYCLE_SK_PREFIX),
                scan_forward=False
            )
        except Exception as e:
            logger.error("Error listing cycles", extra={
                "user_id": user_id,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise CycleStoreError(f"Failed to list cycles: {str(e)}")
        return [self._from_item(item) for item in items]

    def list_cycles_in_range(
        self,
        user_id: str,
        start: date,
        end: date
    ) -> List[CycleRecord]:
        """
        List cycle records whose start date falls in [start, end).

        Args:
            user_id: User identifier
            start: First start date included
            end: First start date excluded

        Returns:
            Matching records sorted by start date, oldest first

        Raises:
            CycleStoreError: If the records cannot be read
        """
        # Full keys carry "#<id>" after the date, so the bare end key sorts
        # before every record starting on the end date
        condition = Key("SK").between(
            create_cycle_sk(start.isoformat()),
            create_cycle_sk(end.isoformat())
        )
        try:
            items = self.dynamo.query_items(
                partition_key="PK",
                partition_value=create_pk(user_id),
                sort_key_condition=condition
            )
        except Exception as e:
            logger.error("Error listing cycles in range", extra={
                "user_id": user_id,
                "start": str(start),
                "end": str(end),
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise CycleStoreError(f"Failed to list cycles in range: {str(e)}")
        records = [self._from_item(item) for item in items]
        return [r for r in records if start <= r.start_date < end]

    def cycles_for_month(self, user_id: str, year: int, month: int) -> List[CycleRecord]:
        """List cycle records starting in the given calendar month."""
        start, end = month_bounds(year, month)
        return self.list_cycles_in_range(user_id, start, end)

    def get_cycle(self, user_id: str, cycle_id: str) -> Optional[CycleRecord]:
        """
        Get a single cycle record by identifier.

        Returns:
            The record if found, None otherwise
        """
        for record in self.list_cycles(user_id):
            if record.id == cycle_id:
                return record
        return None

    def save_cycle(self, record: CycleRecord) -> CycleRecord:
        """
        Create or update a cycle record.

        Raises:
            CycleStoreError: If the record cannot be written
        """
        try:
            self.dynamo.put_item({**self._cycle_key(record), **self._to_item(record)})
        except Exception as e:
            logger.error("Error saving cycle", extra={
                "user_id": record.user_id,
                "cycle_id": record.id,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise CycleStoreError(f"Failed to save cycle: {str(e)}")
        logger.info("Saved cycle", extra={
            "user_id": record.user_id,
            "cycle_id": record.id,
            "start_date": str(record.start_date),
            "end_date": str(record.end_date) if record.end_date else None
        })
        return record

    def delete_cycle(self, record: CycleRecord) -> None:
        """
        Delete a cycle record.

        Raises:
            CycleStoreError: If the record cannot be deleted
        """
        try:
            self.dynamo.delete_item(self._cycle_key(record))
        except Exception as e:
            logger.error("Error deleting cycle", extra={
                "user_id": record.user_id,
                "cycle_id": record.id,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise CycleStoreError(f"Failed to delete cycle: {str(e)}")
        logger.info("Deleted cycle", extra={
            "user_id": record.user_id,
            "cycle_id": record.id
        })

    def get_settings(self, user_id: str, create_missing: bool = True) -> CycleSettings:
        """
        Get the user's settings, falling back to the defaults if none exist.

        Args:
            user_id: User whose settings are read
            create_missing: Persist the defaults when no settings are stored

        Raises:
            CycleStoreError: If the settings cannot be read or created
        """
        try:
            item = self.dynamo.get_item({
                "PK": create_pk(user_id),
                "SK": SETTINGS_SK
            })
        except Exception as e:
            logger.error("Error loading settings", extra={
                "user_id": user_id,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise CycleStoreError(f"Failed to load settings: {str(e)}")

        if not item:
            if not create_missing:
                return CycleSettings(user_id=user_id)
            logger.info("Creating default settings", extra={"user_id": user_id})
            return self.upsert_settings(CycleSettings(user_id=user_id))

        return CycleSettings(
            user_id=user_id,
            average_cycle_length=int(item["average_cycle_length"]),
            average_period_length=int(item["average_period_length"]),
            reminders_enabled=bool(item.get("reminders_enabled", True)),
            reminder_days_before=int(item.get("reminder_days_before", DEFAULT_REMINDER_DAYS_BEFORE))
        )

    def upsert_settings(self, settings: CycleSettings) -> CycleSettings:
        """
        Write the user's settings, replacing any previous version.

        Raises:
            CycleStoreError: If the settings cannot be written
        """
        try:
            self.dynamo.put_item({
                "PK": create_pk(settings.user_id),
                "SK": SETTINGS_SK,
                "average_cycle_length": settings.average_cycle_length,
                "average_period_length": settings.average_period_length,
                "reminders_enabled": settings.reminders_enabled,
                "reminder_days_before": settings.reminder_days_before
            })
        except Exception as e:
            logger.error("Error saving settings", extra={
                "user_id": settings.user_id,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise CycleStoreError(f"Failed to save settings: {str(e)}")
        return settings
