"""
Maintenance frequency parsing and due-date arithmetic.

Asset schedules carry a free-text frequency label ("monthly", "quarterly
maintenance", "annual check", ...). The label is matched by keyword,
case-insensitively, against a fixed set of recognised labels. Anything
unmatched falls back to monthly; resolution never fails so that task
generation never blocks on bad metadata.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from dateutil.relativedelta import relativedelta


class FrequencyUnit(str, Enum):
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"


@dataclass(frozen=True)
class Frequency:
    interval: int
    unit: FrequencyUnit

    def as_delta(self) -> relativedelta:
        return relativedelta(**{self.unit.value: self.interval})


class FrequencyLabel(str, Enum):
    QUARTERLY = "quarterly"
    ANNUAL = "annual"
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    DAILY = "daily"
    UNRECOGNIZED = "unrecognized"


# Checked in order; the first label with a matching keyword wins
LABEL_KEYWORDS: tuple[tuple[FrequencyLabel, tuple[str, ...]], ...] = (
    (FrequencyLabel.QUARTERLY, ("quarter",)),
    (FrequencyLabel.ANNUAL, ("annual", "year")),
    (FrequencyLabel.MONTHLY, ("month",)),
    (FrequencyLabel.WEEKLY, ("week",)),
    (FrequencyLabel.DAILY, ("day", "daily")),
)

LABEL_FREQUENCIES: dict[FrequencyLabel, Frequency] = {
    FrequencyLabel.QUARTERLY: Frequency(3, FrequencyUnit.MONTHS),
    FrequencyLabel.ANNUAL: Frequency(12, FrequencyUnit.MONTHS),
    FrequencyLabel.MONTHLY: Frequency(1, FrequencyUnit.MONTHS),
    FrequencyLabel.WEEKLY: Frequency(1, FrequencyUnit.WEEKS),
    FrequencyLabel.DAILY: Frequency(1, FrequencyUnit.DAYS),
    FrequencyLabel.UNRECOGNIZED: Frequency(1, FrequencyUnit.MONTHS),
}


@dataclass(frozen=True)
class ScheduleSnapshot:
    """The schedule fields of an asset, detached from the ORM row"""

    frequency: Optional[str] = None
    last_maintenance_date: Optional[date] = None
    next_maintenance_date: Optional[date] = None

    @classmethod
    def from_asset(cls, asset) -> "ScheduleSnapshot":
        return cls(
            frequency=asset.maintenance_frequency,
            last_maintenance_date=asset.last_maintenance_date,
            next_maintenance_date=asset.next_maintenance_date,
        )


def classify_label(label: Optional[str]) -> FrequencyLabel:
    """Map a free-text frequency label onto a recognised label"""
    normalized = (label or "").lower()
    for frequency_label, keywords in LABEL_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return frequency_label
    return FrequencyLabel.UNRECOGNIZED


def resolve_frequency(label: Optional[str]) -> Frequency:
    return LABEL_FREQUENCIES[classify_label(label)]


def add_interval(start: date, frequency: Frequency) -> date:
    """Advance a date by one interval, clamping month ends (Jan 31 + 1 month = Feb 28/29)"""
    return start + frequency.as_delta()


def compute_next_due(schedule: ScheduleSnapshot, now: date) -> date:
    """
    Next due date for a schedule.

    Precedence:
        1. next_maintenance_date, verbatim (authoritative)
        2. last_maintenance_date + interval (catching up from history)
        3. now + interval (freshly scheduled)
    """
    if schedule.next_maintenance_date:
        return schedule.next_maintenance_date

    frequency = resolve_frequency(schedule.frequency)
    if schedule.last_maintenance_date:
        return add_interval(schedule.last_maintenance_date, frequency)
    return add_interval(now, frequency)
