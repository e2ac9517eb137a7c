"""
Cycle tracker pipeline.

CycleTracker owns no state besides the last snapshot it computed. Every
mutating operation writes to the record store and then explicitly runs
the pipeline: statistics -> prediction -> settings write-back, followed
by a non-blocking reminder reschedule. Reads use compute(), which never
writes to the store or touches pending reminders.

Typical usage:
    tracker = CycleTracker(
        user_id,
        store=CycleRecordStore(),
        scheduler=ReminderScheduler(DynamoReminderNotifier(user_id))
    )
    with tracker:
        snapshot = tracker.start_cycle(date(2025, 1, 1))
        phase = tracker.classify(date(2025, 1, 3))
"""
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional, Tuple

from aws_lambda_powertools import Logger

from src.models.cycle import CycleRecord
from src.models.phase import CyclePhase, Prediction
from src.models.settings import CycleSettings
from src.services.constants import DEFAULT_CYCLE_LENGTH, DEFAULT_PERIOD_LENGTH
from src.services.exceptions import CycleStoreError
from src.services.phase import get_phase_for_date, has_period_on_date
from src.services.prediction import predict_next_cycle
from src.services.reminders import ReminderScheduler
from src.services.statistics import calculate_cycle_statistics
from src.services.store import CycleRecordStore
from src.services.utils import clamp_length, get_open_cycle

logger = Logger()

@dataclass
class TrackerSnapshot:
    """Consistent view of a user's records, settings and predictions."""
    cycles: List[CycleRecord]
    settings: CycleSettings
    prediction: Prediction
    current_cycle: Optional[CycleRecord] = None
    errors: List[str] = field(default_factory=list)

class CycleTracker:
    """Explicit recompute pipeline for one user's cycle data."""

    def __init__(
        self,
        user_id: str,
        store: CycleRecordStore,
        scheduler: Optional[ReminderScheduler] = None,
        executor: Optional[Executor] = None
    ):
        """
        Initialize the tracker.

        Args:
            user_id: User whose records are tracked
            store: Record store holding cycles and settings
            scheduler: Reminder scheduler, reminders are skipped when None
            executor: Runs reminder rescheduling off the caller's thread;
                a private single-worker pool when None, shut down by close()
        """
        self.user_id = user_id
        self.store = store
        self.scheduler = scheduler
        self._owns_executor = executor is None
        self.executor = executor if executor is not None else ThreadPoolExecutor(max_workers=1)
        self.reminders_future: Optional[Future] = None
        self._snapshot: Optional[TrackerSnapshot] = None

    @property
    def snapshot(self) -> TrackerSnapshot:
        """Last computed snapshot, computed read-only on first access."""
        if self._snapshot is None:
            return self.compute()
        return self._snapshot

    def __enter__(self) -> "CycleTracker":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        """Shut down the default executor once pending reminder work is done."""
        if self._owns_executor:
            self.executor.shutdown(wait=True)

    def _load(self, errors: List[str], create_settings: bool):
        try:
            cycles = self.store.list_cycles(self.user_id)
        except CycleStoreError as e:
            logger.exception("Error loading cycles, using last snapshot")
            errors.append(str(e))
            cycles = self._snapshot.cycles if self._snapshot else []

        try:
            settings = self.store.get_settings(self.user_id, create_missing=create_settings)
        except CycleStoreError as e:
            logger.exception("Error loading settings, using last snapshot")
            errors.append(str(e))
            settings = self._snapshot.settings if self._snapshot else CycleSettings(user_id=self.user_id)
        return cycles, settings

    def _build_snapshot(self, create_settings: bool) -> Tuple[TrackerSnapshot, bool]:
        errors: List[str] = []
        cycles, settings = self._load(errors, create_settings)

        prediction = predict_next_cycle(cycles, settings.average_cycle_length)
        average_changed = prediction.average_cycle_length != settings.average_cycle_length
        if average_changed:
            settings = settings.model_copy(update={
                "average_cycle_length": prediction.average_cycle_length
            })

        self._snapshot = TrackerSnapshot(
            cycles=cycles,
            settings=settings,
            prediction=prediction,
            current_cycle=get_open_cycle(cycles),
            errors=errors
        )
        return self._snapshot, average_changed

    def compute(self) -> TrackerSnapshot:
        """
        Recompute statistics and predictions without side effects.

        Nothing is written to the store and reminders are left untouched,
        so this is safe to call for every read.

        Returns:
            The new snapshot
        """
        snapshot, _ = self._build_snapshot(create_settings=False)
        return snapshot

    def refresh(self) -> TrackerSnapshot:
        """
        Run the pipeline after a mutation.

        The recomputed average cycle length is written back to the settings
        before the snapshot is returned. Reminder rescheduling is submitted
        to the executor and does not block the caller.

        Returns:
            The new snapshot
        """
        snapshot, average_changed = self._build_snapshot(create_settings=True)
        if average_changed:
            try:
                self.store.upsert_settings(snapshot.settings)
            except CycleStoreError as e:
                logger.exception("Error writing back average cycle length")
                snapshot.errors.append(str(e))

        logger.info("Refreshed cycle snapshot", extra={
            "user_id": self.user_id,
            "total_cycles": len(snapshot.cycles),
            "average_cycle_length": snapshot.settings.average_cycle_length,
            "next_period": str(snapshot.prediction.next_period) if snapshot.prediction.next_period else None
        })

        self._dispatch_reminders(snapshot.prediction, snapshot.settings)
        return snapshot

    def _dispatch_reminders(self, prediction: Prediction, settings: CycleSettings) -> None:
        if self.scheduler is None:
            return
        self.reminders_future = self.executor.submit(
            self.scheduler.reschedule, prediction, settings
        )
        self.reminders_future.add_done_callback(self._log_reminder_failure)

    @staticmethod
    def _log_reminder_failure(future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.error("Reminder rescheduling failed", extra={
                "error": str(error),
                "error_type": error.__class__.__name__
            })

    def _save(self, record: CycleRecord) -> None:
        try:
            self.store.save_cycle(record)
        except CycleStoreError:
            logger.exception("Error saving cycle", extra={"cycle_id": record.id})

    def _delete(self, record: CycleRecord) -> None:
        try:
            self.store.delete_cycle(record)
        except CycleStoreError:
            logger.exception("Error deleting cycle", extra={"cycle_id": record.id})

    def _list_cycles(self) -> List[CycleRecord]:
        try:
            return self.store.list_cycles(self.user_id)
        except CycleStoreError:
            logger.exception("Error listing cycles")
            return self._snapshot.cycles if self._snapshot else []

    def _close_open_cycle(self, before: date) -> None:
        current = get_open_cycle(self._list_cycles())
        if current is None:
            return
        end_date = max(current.start_date, before - timedelta(days=1))
        self._save(current.model_copy(update={"end_date": end_date}))

    def _create_cycle(
        self,
        start_date: Optional[date],
        intensity: int,
        mood: int,
        energy: int,
        pain: int,
        notes: Optional[str]
    ) -> CycleRecord:
        if start_date is None:
            start_date = date.today()
        self._close_open_cycle(start_date)
        record = CycleRecord(
            user_id=self.user_id,
            start_date=start_date,
            intensity=intensity,
            mood=mood,
            energy=energy,
            pain=pain,
            notes=notes
        )
        self._save(record)
        return record

    def current_cycle(self) -> Optional[CycleRecord]:
        """Get the most recent open cycle, if any."""
        return get_open_cycle(self._list_cycles())

    def start_cycle(
        self,
        start_date: Optional[date] = None,
        intensity: int = 2,
        mood: int = 3,
        energy: int = 3,
        pain: int = 0,
        notes: Optional[str] = None
    ) -> TrackerSnapshot:
        """
        Start a new cycle, closing any open one the day before.

        Args:
            start_date: First day of the period, defaults to today
            intensity, mood, energy, pain: Ratings from 0 to 5
            notes: Optional free text

        Returns:
            Refreshed snapshot
        """
        self._create_cycle(start_date, intensity, mood, energy, pain, notes)
        return self.refresh()

    def end_cycle(self, record: CycleRecord, end_date: Optional[date] = None) -> TrackerSnapshot:
        """Mark a cycle as complete, by default today, never before its start."""
        if end_date is None:
            end_date = date.today()
        end_date = max(record.start_date, end_date)
        self._save(record.model_copy(update={"end_date": end_date}))
        return self.refresh()

    def update_symptoms(
        self,
        record: CycleRecord,
        intensity: int,
        mood: int,
        energy: int,
        pain: int,
        notes: Optional[str] = None
    ) -> TrackerSnapshot:
        """Replace the symptom ratings and notes of a cycle."""
        updated = CycleRecord(**{
            **record.model_dump(),
            "intensity": intensity,
            "mood": mood,
            "energy": energy,
            "pain": pain,
            "notes": notes
        })
        self._save(updated)
        return self.refresh()

    def delete_cycle(self, record: CycleRecord) -> TrackerSnapshot:
        """Delete a cycle record."""
        self._delete(record)
        return self.refresh()

    def update_settings(self, cycle_length: int, period_length: int) -> TrackerSnapshot:
        """
        Override the average lengths.

        Non-positive values fall back to the defaults. The cycle length is
        recomputed from history during the refresh, so the override only
        holds while there are not enough valid gaps to measure.
        """
        settings = self.snapshot.settings.model_copy(update={
            "average_cycle_length": clamp_length(
                cycle_length, DEFAULT_CYCLE_LENGTH, "average_cycle_length"
            ),
            "average_period_length": clamp_length(
                period_length, DEFAULT_PERIOD_LENGTH, "average_period_length"
            )
        })
        try:
            self.store.upsert_settings(settings)
        except CycleStoreError:
            logger.exception("Error updating settings")
        return self.refresh()

    def set_reminders_enabled(self, enabled: bool) -> TrackerSnapshot:
        """Turn reminders on or off; disabling cancels pending reminders."""
        settings = self.snapshot.settings.model_copy(update={"reminders_enabled": enabled})
        try:
            self.store.upsert_settings(settings)
        except CycleStoreError:
            logger.exception("Error updating reminder setting")
        return self.refresh()

    def toggle_day(self, target_date: date) -> TrackerSnapshot:
        """
        Mark or unmark a single day from the calendar.

        A marked day is stored as a cycle that starts and ends on the same
        date. Unmarking deletes every record covering the date.
        """
        cycles = self._list_cycles()
        if has_period_on_date(cycles, target_date):
            for cycle in cycles:
                if cycle.covers(target_date):
                    self._delete(cycle)
        else:
            record = self._create_cycle(target_date, 2, 3, 3, 0, None)
            self._save(record.model_copy(update={"end_date": target_date}))
        return self.refresh()

    def save_symptoms_for_day(
        self,
        target_date: date,
        intensity: int,
        mood: int,
        energy: int,
        pain: int,
        notes: Optional[str] = None
    ) -> TrackerSnapshot:
        """
        Save ratings for the cycle starting on a day, or start one there.
        """
        for cycle in self._list_cycles():
            if cycle.start_date == target_date:
                return self.update_symptoms(cycle, intensity, mood, energy, pain, notes)
        return self.start_cycle(target_date, intensity, mood, energy, pain, notes)

    def classify(self, target_date: date) -> CyclePhase:
        """Classify a date against the last snapshot."""
        snapshot = self.snapshot
        return get_phase_for_date(target_date, snapshot.cycles, snapshot.settings)

    def predictions(self) -> Prediction:
        """Get the prediction from the last snapshot."""
        return self.snapshot.prediction

    def statistics(self, today: Optional[date] = None) -> dict:
        """Summarize the last snapshot for display."""
        snapshot = self.snapshot
        return calculate_cycle_statistics(
            snapshot.cycles,
            snapshot.settings,
            next_period=snapshot.prediction.next_period,
            today=today
        )
