# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Timeseries basic types."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

UNIX_EPOCH = datetime.fromtimestamp(0.0, tz=timezone.utc)
"""The UNIX epoch (in UTC)."""

_ONE_MICROSECOND = timedelta(microseconds=1)


@dataclass(frozen=True)
class Sample:
    """A flow-rate measurement taken at a particular point in time.

    Samples are never modified after a partition reported them. Two samples may
    share the same timestamp, both are kept.
    """

    timestamp: datetime
    """The time when this sample was measured."""

    value: float
    """The flow rate, in ml/min."""


@dataclass(frozen=True)
class AggregatedPoint:
    """One point of an aggregated series.

    In raw mode there is one point per sample and `bucket_start` is the sample
    timestamp. In bucketed mode there is one point per bucket.
    """

    bucket_start: datetime
    """The start of the bucket (or the sample timestamp in raw mode)."""

    value: float
    """The mean of the samples in the bucket, or 0.0 for an empty bucket."""


def to_epoch_us(timestamp: datetime) -> int:
    """Convert a timestamp to microseconds since the UNIX epoch.

    Naive timestamps are taken as UTC.

    Args:
        timestamp: The timestamp to convert.

    Returns:
        The number of whole microseconds since the UNIX epoch.
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return (timestamp - UNIX_EPOCH) // _ONE_MICROSECOND


def from_epoch_us(epoch_us: int) -> datetime:
    """Convert microseconds since the UNIX epoch to a UTC timestamp.

    Args:
        epoch_us: The number of microseconds since the UNIX epoch.

    Returns:
        The matching timezone-aware timestamp, in UTC.
    """
    return UNIX_EPOCH + timedelta(microseconds=epoch_us)
