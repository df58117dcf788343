# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Day partition identifiers."""

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Self


@dataclass(frozen=True, order=True)
class PartitionKey:
    """Identifies the day partition of a patient's sample history.

    Keys compare in calendar order.
    """

    year: int
    """The calendar year."""

    month: int
    """The month, from 1 to 12."""

    day: int
    """The day of the month, from 1 to 31."""

    def __post_init__(self) -> None:
        """Check that the key is a real calendar day.

        Raises:
            ValueError: If the year, month and day don't form a valid date.
        """
        date(self.year, self.month, self.day)

    @classmethod
    def from_date(cls, day: date) -> Self:
        """Create the key of a calendar day.

        Args:
            day: The calendar day.

        Returns:
            The key of the partition holding that day.
        """
        return cls(day.year, day.month, day.day)

    @classmethod
    def from_datetime(cls, timestamp: datetime, tz: tzinfo | None = None) -> Self:
        """Create the key of the day a timestamp falls in.

        Args:
            timestamp: The point in time.
            tz: The timezone whose calendar is used. If `None`, the local timezone
                is used.

        Returns:
            The key of the partition holding that timestamp.
        """
        return cls.from_date(timestamp.astimezone(tz).date())

    def to_date(self) -> date:
        """Return the calendar day of this key."""
        return date(self.year, self.month, self.day)

    def path(self, patient_id: str) -> str:
        """Return the location of this partition in the remote store.

        Args:
            patient_id: The patient whose history is partitioned.

        Returns:
            A path like `history/<patient>/2024/01/05`.
        """
        return f"history/{patient_id}/{self.year}/{self.month:02d}/{self.day:02d}"

    def __str__(self) -> str:
        """Return the ISO date of this key."""
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"
