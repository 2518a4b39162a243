# app/services/schedule_validator.py
"""
Required-field and schedule checks for anomaly rules.

A schedule is a set of weekdays plus a daily time window. Windows whose end is
earlier than their start run overnight and are legal; start == end means the
rule covers the whole day. Times are wall-clock UTC.
"""

from datetime import datetime, time, timedelta
from typing import Optional

from app.config import settings
from app.constants import DAYS_OF_WEEK
from app.exceptions import InvalidInputError, MissingFieldError

# Checked in this order; the first absent one is reported
REQUIRED_FIELDS = (
    "title",
    "description",
    "model_name",
    "camera_ids",
    "start_time",
    "end_time",
    "days_of_week",
)


def validate_required_fields(fields: dict):
    for name in REQUIRED_FIELDS:
        value = fields.get(name)
        if value is None or value == "":
            raise MissingFieldError(name)


def parse_time_of_day(value, field: str) -> time:
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise InvalidInputError(f"{field} must be a time of day (HH:MM or HH:MM:SS)")
    try:
        parsed = time.fromisoformat(value.strip())
    except ValueError:
        raise InvalidInputError(f"{field} must be a time of day (HH:MM or HH:MM:SS)")
    if parsed.tzinfo is not None:
        raise InvalidInputError(f"{field} must not carry a UTC offset")
    return parsed


def validate_days_of_week(days, allow_empty: Optional[bool] = None) -> list[str]:
    """Returns the weekdays de-duplicated and in Sun..Sat order."""
    if allow_empty is None:
        allow_empty = settings.ALLOW_EMPTY_SCHEDULE
    if not isinstance(days, (list, tuple)):
        raise InvalidInputError("daysOfWeek must be an array")
    if not all(isinstance(day, str) and day in DAYS_OF_WEEK for day in days):
        raise InvalidInputError(f"Invalid day values; allowed: {', '.join(DAYS_OF_WEEK)}")
    if not days and not allow_empty:
        raise InvalidInputError("daysOfWeek must contain at least one day")
    selected = set(days)
    return [day for day in DAYS_OF_WEEK if day in selected]


def validate_schedule(days_of_week, start_time, end_time) -> tuple[list[str], time, time]:
    """Validate and normalise a schedule. Raises InvalidInputError, touches no storage."""
    if start_time is None or start_time == "":
        raise MissingFieldError("start_time")
    if end_time is None or end_time == "":
        raise MissingFieldError("end_time")
    days = validate_days_of_week(days_of_week)
    return days, parse_time_of_day(start_time, "startTime"), parse_time_of_day(end_time, "endTime")


def is_active_at(days_of_week, start_time: time, end_time: time, moment: datetime) -> bool:
    """True when `moment` falls inside the weekly schedule."""
    day = DAYS_OF_WEEK[(moment.weekday() + 1) % 7]   # datetime: Monday == 0
    now = moment.time().replace(tzinfo=None)

    if start_time == end_time:
        return day in days_of_week
    if start_time < end_time:
        return day in days_of_week and start_time <= now < end_time

    # Overnight window: the part after midnight belongs to the previous day
    previous_day = DAYS_OF_WEEK[((moment - timedelta(days=1)).weekday() + 1) % 7]
    return (day in days_of_week and now >= start_time) or (previous_day in days_of_week and now < end_time)
