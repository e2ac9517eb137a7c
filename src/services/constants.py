"""
Constants for cycle statistics, phase classification and reminders.

These are policy values rather than physiological facts. Every engine
function takes them as keyword arguments so they can be overridden.
"""
from src.models.reminder import ReminderRule

# Defaults used when settings are missing or invalid
DEFAULT_CYCLE_LENGTH = 28
DEFAULT_PERIOD_LENGTH = 5
DEFAULT_REMINDER_DAYS_BEFORE = 1

# Phase windows, in days, counted from the end of the period window
FOLLICULAR_WINDOW_DAYS = 7
OVULATION_WINDOW_DAYS = 3

# Ovulation is assumed to happen this many days before the next period
LUTEAL_PHASE_DAYS = 14

# Gaps between consecutive cycle starts must fall strictly inside (0, 50)
MAX_CYCLE_GAP_DAYS = 50

# Number of cycles listed in the statistics summary
RECENT_CYCLES_LIMIT = 5

PERIOD_REMINDER_HOUR = 9
OVULATION_REMINDER_HOUR = 10

PERIOD_ANCHOR = "period"
OVULATION_ANCHOR = "ovulation"

REMINDER_RULES = [
    ReminderRule(
        identifier="periodReminder3Days",
        anchor=PERIOD_ANCHOR,
        offset_days=-3,
        hour=PERIOD_REMINDER_HOUR,
        title="Period reminder",
        body="Period expected in 3 days"
    ),
    ReminderRule(
        identifier="periodReminder1Day",
        anchor=PERIOD_ANCHOR,
        offset_days=-1,
        hour=PERIOD_REMINDER_HOUR,
        title="Period reminder",
        body="Period expected tomorrow"
    ),
    ReminderRule(
        identifier="periodReminderToday",
        anchor=PERIOD_ANCHOR,
        offset_days=0,
        hour=PERIOD_REMINDER_HOUR,
        title="Menstruation",
        body="Period expected today"
    ),
    ReminderRule(
        identifier="ovulationReminder1Day",
        anchor=OVULATION_ANCHOR,
        offset_days=-1,
        hour=OVULATION_REMINDER_HOUR,
        title="Ovulation reminder",
        body="Ovulation expected tomorrow"
    ),
    ReminderRule(
        identifier="ovulationReminderToday",
        anchor=OVULATION_ANCHOR,
        offset_days=0,
        hour=OVULATION_REMINDER_HOUR,
        title="Ovulation",
        body="Ovulation expected today"
    ),
]
