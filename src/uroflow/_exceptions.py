# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Errors reported by the flow chart engine.

None of these errors stops the engine. They are logged and published on the
warnings channel of the [`FlowChart`][uroflow.chart.FlowChart], and the chart keeps
showing whatever data is still valid.
"""

from __future__ import annotations

import typing
from datetime import date

if typing.TYPE_CHECKING:
    from .partitions import PartitionKey


class FlowChartError(Exception):
    """Base class for all the errors of the flow chart engine."""


class SubscriptionError(FlowChartError):
    """The data source failed for one day partition.

    The last snapshot received for the partition is kept.
    """

    def __init__(self, key: PartitionKey, cause: BaseException | None = None) -> None:
        """Create an instance.

        Args:
            key: The partition whose subscription failed.
            cause: The underlying error, or `None` if the stream just ended.
        """
        reason = "stream ended" if cause is None else repr(cause)
        super().__init__(f"Subscription for partition {key} failed: {reason}")
        self.key = key
        """The partition whose subscription failed."""

        self.cause = cause
        """The underlying error, if any."""


class InvalidRangeError(FlowChartError):
    """A date range ends before it starts. It is treated as an empty range."""

    def __init__(self, start: date, end: date) -> None:
        """Create an instance.

        Args:
            start: The requested first day.
            end: The requested last day.
        """
        super().__init__(f"Invalid date range: start {start} is after end {end}")
        self.start = start
        """The requested first day."""

        self.end = end
        """The requested last day."""


class InvalidAggregationParamsError(FlowChartError):
    """A bucket width or smoothing window was not positive and was clamped."""

    def __init__(self, name: str, value: object, clamped_to: object) -> None:
        """Create an instance.

        Args:
            name: The name of the offending parameter.
            value: The value that was requested.
            clamped_to: The value used instead.
        """
        super().__init__(
            f"Invalid aggregation parameter {name}={value!r}, using {clamped_to!r}"
        )
        self.name = name
        """The name of the offending parameter."""

        self.value = value
        """The value that was requested."""

        self.clamped_to = clamped_to
        """The value used instead."""
