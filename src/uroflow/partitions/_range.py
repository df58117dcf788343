# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Date ranges, presets and their expansion into day partitions."""

import enum
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import assert_never

from ._partition_key import PartitionKey

_logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class DateRange:
    """An inclusive range of calendar days.

    A range is always replaced as a whole, never partially modified.
    """

    start: date
    """The first day of the range."""

    end: date
    """The last day of the range, inclusive."""

    @property
    def is_valid(self) -> bool:
        """Whether the range does not end before it starts."""
        return self.start <= self.end

    @classmethod
    def single_day(cls, day: date) -> "DateRange":
        """Create a range covering only one day.

        Args:
            day: The day to cover.

        Returns:
            The new range.
        """
        return cls(day, day)

    def __str__(self) -> str:
        """Return the range as `<start>..<end>`."""
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


class RangePreset(enum.StrEnum):
    """Predefined date ranges."""

    TODAY = "today"
    """Only the current day."""

    YESTERDAY = "yesterday"
    """Only the previous day."""

    LAST7 = "last7"
    """The last 7 days, including today."""

    CUSTOM = "custom"
    """Whatever range was set by the user."""


def expand_range(date_range: DateRange) -> list[PartitionKey]:
    """Return the day partitions covered by a date range.

    Both ends are included. A range that ends before it starts covers no
    partitions.

    Args:
        date_range: The range to expand.

    Returns:
        The partition keys, in calendar order.
    """
    if not date_range.is_valid:
        _logger.warning("Range %s ends before it starts, no days covered", date_range)
        return []

    days = (date_range.end - date_range.start).days + 1
    return [
        PartitionKey.from_date(date_range.start + offset * _ONE_DAY)
        for offset in range(days)
    ]


def resolve_preset(
    preset: RangePreset, current: DateRange, *, today: date | None = None
) -> DateRange:
    """Compute the range selected by a preset.

    Args:
        preset: The selected preset.
        current: The range currently set, returned as is for the custom preset.
        today: The current day. If `None`, the local calendar day is used.

    Returns:
        The range the preset stands for.
    """
    if today is None:
        today = date.today()
    match preset:
        case RangePreset.TODAY:
            return DateRange.single_day(today)
        case RangePreset.YESTERDAY:
            return DateRange.single_day(today - _ONE_DAY)
        case RangePreset.LAST7:
            return DateRange(today - 6 * _ONE_DAY, today)
        case RangePreset.CUSTOM:
            return current
        case _:
            assert_never(preset)
