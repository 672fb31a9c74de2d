"""
Scheduling Domain

Turns asset maintenance schedule metadata into structured frequencies and
due dates. Pure functions only; nothing here touches the database.
"""

from .frequency import (
    Frequency,
    FrequencyLabel,
    FrequencyUnit,
    ScheduleSnapshot,
    add_interval,
    classify_label,
    compute_next_due,
    resolve_frequency,
)

__all__ = [
    "Frequency",
    "FrequencyLabel",
    "FrequencyUnit",
    "ScheduleSnapshot",
    "add_interval",
    "classify_label",
    "compute_next_due",
    "resolve_frequency",
]
