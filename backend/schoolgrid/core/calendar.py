from __future__ import annotations

import re
from enum import Enum


class DayToken(str, Enum):
    sunday = "sunday"
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"


# Canonical week order; every per-day report iterates this tuple.
DAY_TOKENS: tuple[DayToken, ...] = (
    DayToken.sunday,
    DayToken.monday,
    DayToken.tuesday,
    DayToken.wednesday,
    DayToken.thursday,
)
DAY_VALUES = {day.value for day in DAY_TOKENS}
DAY_LABELS = {day.value: day.value.capitalize() for day in DAY_TOKENS}
DAY_INDEX = {day.value: index for index, day in enumerate(DAY_TOKENS)}

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def normalize_day(value: str | DayToken) -> DayToken:
    """Return the canonical token for ``value`` or raise ``ValueError``."""
    if isinstance(value, DayToken):
        return value
    token = str(value).strip().lower()
    if token not in DAY_VALUES:
        raise ValueError(f"Invalid day value: {value!r}")
    return DayToken(token)


def order_days(days) -> list[DayToken]:
    return sorted({normalize_day(day) for day in days}, key=lambda day: DAY_INDEX[day.value])


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def slots_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    return start_a < end_b and start_b < end_a
