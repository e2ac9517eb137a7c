"""
Tests for the cycle tracker pipeline.
"""
import threading
import pytest
from datetime import date, datetime, timedelta
from unittest.mock import Mock, patch

from src.models.phase import CyclePhase
from src.services.reminders import ReminderScheduler
from src.services.tracker import CycleTracker
from tests.doubles import RecordingNotifier

@pytest.fixture
def tracker(store, notifier, executor):
    """Tracker wired to in-memory doubles that run reminders inline."""
    return CycleTracker(
        "123",
        store=store,
        scheduler=ReminderScheduler(notifier),
        executor=executor
    )

def test_empty_history_snapshot(tracker):
    """Test the first refresh creates default settings and no prediction."""
    snapshot = tracker.refresh()

    assert snapshot.cycles == []
    assert snapshot.settings.average_cycle_length == 28
    assert snapshot.settings.average_period_length == 5
    assert snapshot.prediction.next_period is None
    assert snapshot.current_cycle is None
    assert tracker.classify(date(2025, 1, 1)) == CyclePhase.FOLLICULAR

def test_start_cycle_scenario(tracker):
    """Test the single open cycle scenario end to end."""
    snapshot = tracker.start_cycle(date(2025, 1, 1))

    assert snapshot.current_cycle is not None
    assert snapshot.current_cycle.start_date == date(2025, 1, 1)
    assert tracker.predictions().next_period == date(2025, 1, 29)
    assert tracker.predictions().next_ovulation == date(2025, 1, 15)
    assert tracker.classify(date(2025, 1, 3)) == CyclePhase.PERIOD
    assert tracker.classify(date(2025, 1, 20)) == CyclePhase.LUTEAL

def test_start_cycle_closes_open_cycle(tracker, store):
    """Test starting a cycle closes the previous one the day before."""
    tracker.start_cycle(date(2025, 1, 1))
    snapshot = tracker.start_cycle(date(2025, 1, 30))

    open_cycles = [c for c in snapshot.cycles if c.is_open]
    assert len(open_cycles) == 1
    assert open_cycles[0].start_date == date(2025, 1, 30)
    previous = [c for c in snapshot.cycles if c.start_date == date(2025, 1, 1)][0]
    assert previous.end_date == date(2025, 1, 29)

def test_average_is_written_back(tracker, store):
    """Test the recomputed average is persisted in settings."""
    tracker.start_cycle(date(2025, 1, 1))
    tracker.start_cycle(date(2025, 1, 31))
    snapshot = tracker.start_cycle(date(2025, 3, 2))

    assert snapshot.settings.average_cycle_length == 30
    assert store.settings["123"].average_cycle_length == 30
    assert snapshot.prediction.next_period == date(2025, 4, 1)

def test_refresh_is_idempotent(tracker):
    """Test refreshing without changes yields the same prediction."""
    tracker.start_cycle(date(2025, 1, 1))
    first = tracker.refresh().prediction
    second = tracker.refresh().prediction
    assert first == second

def test_end_cycle(tracker):
    """Test ending a cycle closes it and clears the current cycle."""
    snapshot = tracker.start_cycle(date(2025, 1, 1))
    snapshot = tracker.end_cycle(snapshot.current_cycle, date(2025, 1, 5))

    assert snapshot.current_cycle is None
    assert snapshot.cycles[0].end_date == date(2025, 1, 5)

def test_end_cycle_never_precedes_start(tracker):
    """Test an end date before the start is clamped to the start."""
    snapshot = tracker.start_cycle(date(2025, 1, 10))
    snapshot = tracker.end_cycle(snapshot.current_cycle, date(2025, 1, 1))
    assert snapshot.cycles[0].end_date == date(2025, 1, 10)

def test_update_symptoms(tracker):
    """Test symptom edits are saved on the same record."""
    snapshot = tracker.start_cycle(date(2025, 1, 1))
    record = snapshot.current_cycle
    snapshot = tracker.update_symptoms(record, intensity=4, mood=1, energy=2, pain=5, notes="cramps")

    assert len(snapshot.cycles) == 1
    updated = snapshot.cycles[0]
    assert updated.id == record.id
    assert (updated.intensity, updated.mood, updated.energy, updated.pain) == (4, 1, 2, 5)
    assert updated.notes == "cramps"

def test_delete_cycle_updates_prediction(tracker):
    """Test deleting the newest cycle moves the prediction back."""
    tracker.start_cycle(date(2025, 1, 1))
    snapshot = tracker.start_cycle(date(2025, 1, 29))
    snapshot = tracker.delete_cycle(snapshot.current_cycle)

    assert len(snapshot.cycles) == 1
    assert snapshot.prediction.next_period == date(2025, 1, 29)

def test_update_settings_clamps_invalid_values(tracker, store):
    """Test non-positive overrides fall back to defaults."""
    snapshot = tracker.update_settings(cycle_length=0, period_length=-1)

    assert snapshot.settings.average_cycle_length == 28
    assert snapshot.settings.average_period_length == 5

def test_update_settings_override_without_history(tracker):
    """Test a user override holds while history cannot be measured."""
    tracker.start_cycle(date(2025, 1, 1))
    snapshot = tracker.update_settings(cycle_length=32, period_length=6)

    assert snapshot.settings.average_cycle_length == 32
    assert snapshot.settings.average_period_length == 6
    assert snapshot.prediction.next_period == date(2025, 2, 2)
    assert tracker.classify(date(2025, 1, 6)) == CyclePhase.PERIOD

def test_toggle_day_marks_single_day(tracker):
    """Test toggling an unmarked day creates a one-day cycle."""
    snapshot = tracker.toggle_day(date(2025, 1, 10))

    assert len(snapshot.cycles) == 1
    marking = snapshot.cycles[0]
    assert marking.is_single_day
    assert snapshot.current_cycle is None

def test_toggle_day_unmarks_covered_day(tracker):
    """Test toggling a marked day deletes the covering records."""
    snapshot = tracker.start_cycle(date(2025, 1, 1))
    tracker.end_cycle(snapshot.current_cycle, date(2025, 1, 4))
    snapshot = tracker.toggle_day(date(2025, 1, 3))
    assert snapshot.cycles == []

def test_toggle_day_closes_open_cycle(tracker):
    """Test marking a later day closes the open cycle the day before."""
    tracker.start_cycle(date(2025, 1, 1))
    snapshot = tracker.toggle_day(date(2025, 1, 29))

    previous = [c for c in snapshot.cycles if c.start_date == date(2025, 1, 1)][0]
    assert previous.end_date == date(2025, 1, 28)
    assert snapshot.current_cycle is None

def test_save_symptoms_for_day(tracker):
    """Test symptoms update the cycle starting that day or start a new one."""
    tracker.save_symptoms_for_day(date(2025, 1, 1), 3, 3, 3, 2, "first")
    snapshot = tracker.save_symptoms_for_day(date(2025, 1, 1), 5, 1, 1, 4, None)

    assert len(snapshot.cycles) == 1
    assert snapshot.cycles[0].pain == 4
    assert snapshot.cycles[0].notes is None

    snapshot = tracker.save_symptoms_for_day(date(2025, 1, 30), 1, 4, 4, 0, "new")
    assert len(snapshot.cycles) == 2
    assert snapshot.current_cycle.start_date == date(2025, 1, 30)

def test_refresh_reschedules_reminders(tracker, notifier):
    """Test each mutation replaces the pending reminders."""
    start = date.today() + timedelta(days=1)
    tracker.start_cycle(start)
    assert tracker.reminders_future.result()
    assert "periodReminderToday" in notifier.pending
    assert notifier.pending["periodReminderToday"] == datetime.combine(
        start + timedelta(days=28), datetime.min.time()
    ).replace(hour=9)

    tracker.start_cycle(start + timedelta(days=28))
    assert notifier.calls.count("cancel_all") >= 2
    assert len(notifier.pending) == 5
    assert notifier.pending["periodReminderToday"].date() == start + timedelta(days=56)

def test_disabling_reminders_clears_queue(tracker, notifier):
    """Test turning reminders off leaves nothing pending."""
    tracker.start_cycle(date.today() + timedelta(days=1))
    tracker.set_reminders_enabled(False)

    assert notifier.pending == {}
    assert tracker.snapshot.settings.reminders_enabled is False

def test_store_write_failure_is_not_fatal(tracker, store):
    """Test a failing write is logged and the pipeline still returns."""
    tracker.start_cycle(date(2025, 1, 1))
    store.fail_writes = True

    snapshot = tracker.start_cycle(date(2025, 1, 29))

    assert len(snapshot.cycles) == 1
    assert snapshot.prediction.next_period == date(2025, 1, 29)

def test_store_read_failure_keeps_last_snapshot(tracker, store):
    """Test a failing read falls back to the previous snapshot."""
    tracker.start_cycle(date(2025, 1, 1))
    store.fail_reads = True

    snapshot = tracker.refresh()

    assert len(snapshot.cycles) == 1
    assert snapshot.errors
    assert tracker.classify(date(2025, 1, 3)) == CyclePhase.PERIOD

def test_tracker_without_scheduler(store, executor):
    """Test predictions work without a reminder scheduler."""
    tracker = CycleTracker("123", store=store, executor=executor)
    tracker.start_cycle(date(2025, 1, 1))
    assert tracker.reminders_future is None
    assert tracker.predictions().next_period == date(2025, 1, 29)

def test_statistics_summary(tracker):
    """Test the tracker exposes the statistics summary."""
    tracker.start_cycle(date(2025, 1, 1))
    stats = tracker.statistics(today=date(2025, 1, 19))

    assert stats["total_cycles"] == 1
    assert stats["next_period"] == date(2025, 1, 29)
    assert stats["days_until_next_period"] == 10

def test_reminder_failure_is_logged(store, executor):
    """Test a crashing scheduler does not break the pipeline."""
    class CrashingScheduler:
        def reschedule(self, prediction, settings):
            raise RuntimeError("boom")

    tracker = CycleTracker("123", store=store, scheduler=CrashingScheduler(), executor=executor)
    with patch("src.services.tracker.logger") as mock_logger:
        snapshot = tracker.start_cycle(date(2025, 1, 1))

    assert snapshot.prediction.next_period == date(2025, 1, 29)
    assert isinstance(tracker.reminders_future.exception(), RuntimeError)
    assert mock_logger.error.called

def test_compute_is_read_only(tracker, store, notifier):
    """Test reads never write settings or touch pending reminders."""
    tracker.start_cycle(date(2025, 1, 1))
    tracker.start_cycle(date(2025, 1, 31))
    store.settings["123"] = store.settings["123"].model_copy(update={"average_cycle_length": 28})
    notifier.calls.clear()

    snapshot = tracker.compute()

    assert snapshot.settings.average_cycle_length == 30
    assert snapshot.prediction.next_period == date(2025, 3, 2)
    assert store.settings["123"].average_cycle_length == 28
    assert notifier.calls == []

def test_snapshot_property_does_not_reschedule(store, notifier, executor):
    """Test the first read of a fresh tracker computes without side effects."""
    tracker = CycleTracker("123", store=store, scheduler=ReminderScheduler(notifier), executor=executor)

    assert tracker.classify(date(2025, 1, 1)) == CyclePhase.FOLLICULAR
    assert tracker.predictions().next_period is None
    assert tracker.reminders_future is None
    assert notifier.calls == []
    assert store.settings == {}

class BlockingNotifier(RecordingNotifier):
    """Notifier whose submissions wait until released."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def schedule(self, identifier: str, title: str, body: str, fire_at: datetime) -> None:
        self.release.wait(timeout=10)
        super().schedule(identifier, title, body, fire_at)

def test_reschedule_does_not_block_mutations(store):
    """Test the default executor runs reminders after the mutation returns."""
    notifier = BlockingNotifier()
    with CycleTracker("123", store=store, scheduler=ReminderScheduler(notifier)) as tracker:
        snapshot = tracker.start_cycle(date.today() + timedelta(days=1))

        assert snapshot.current_cycle is not None
        assert not tracker.reminders_future.done()

        notifier.release.set()
        scheduled = tracker.reminders_future.result(timeout=10)

    assert len(scheduled) == 5
    assert set(notifier.pending) == set(scheduled)

def test_close_shuts_down_own_executor(store):
    """Test close() stops the tracker's default executor."""
    tracker = CycleTracker("123", store=store)
    tracker.close()
    with pytest.raises(RuntimeError):
        tracker.executor.submit(lambda: None)

def test_close_leaves_injected_executor(store):
    """Test an executor passed in by the caller stays open."""
    executor = Mock()
    with CycleTracker("123", store=store, executor=executor):
        pass
    executor.shutdown.assert_not_called()
