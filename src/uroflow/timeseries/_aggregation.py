# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Aggregation of a sample series into fixed-width time buckets."""

import enum
import logging
from collections.abc import Sequence
from datetime import timedelta

import numpy as np

from .._exceptions import InvalidAggregationParamsError
from ._base_types import AggregatedPoint, Sample, from_epoch_us, to_epoch_us

_logger = logging.getLogger(__name__)

MIN_BUCKET_WIDTH = timedelta(minutes=1)
"""The bucket width used when a non-positive one is requested."""

_ONE_MICROSECOND = timedelta(microseconds=1)


class AggregationMode(enum.StrEnum):
    """How the sample series is aggregated before charting."""

    RAW = "raw"
    """Every sample is a point."""

    MIN15 = "15min"
    """The mean of every 15 minutes is a point."""

    HOURLY = "hourly"
    """The mean of every hour is a point."""

    DAILY = "daily"
    """The mean of every day is a point."""

    @property
    def bucket_width(self) -> timedelta | None:
        """The width of the buckets of this mode, `None` for raw mode."""
        return _BUCKET_WIDTHS[self]


_BUCKET_WIDTHS: dict[AggregationMode, timedelta | None] = {
    AggregationMode.RAW: None,
    AggregationMode.MIN15: timedelta(minutes=15),
    AggregationMode.HOURLY: timedelta(hours=1),
    AggregationMode.DAILY: timedelta(days=1),
}


def check_bucket_width(
    bucket_width: timedelta,
) -> tuple[timedelta, InvalidAggregationParamsError | None]:
    """Clamp a bucket width to the smallest valid one if it is not positive.

    Args:
        bucket_width: The requested bucket width.

    Returns:
        The bucket width to use, and the error describing the clamping if the
            requested width was invalid.
    """
    if bucket_width // _ONE_MICROSECOND > 0:
        return bucket_width, None
    return MIN_BUCKET_WIDTH, InvalidAggregationParamsError(
        "bucket_width", bucket_width, MIN_BUCKET_WIDTH
    )


def aggregate(
    series: Sequence[Sample], bucket_width: timedelta | None = None
) -> list[AggregatedPoint]:
    """Aggregate a sample series.

    Without a bucket width every sample becomes a point, sorted by timestamp
    (samples with equal timestamps keep their order).

    With a bucket width, the buckets start at the earliest timestamp rounded down
    to a multiple of the width since the UNIX epoch, and there is one point for
    every bucket up to the one holding the latest timestamp. Each point holds the
    mean of the samples in its bucket, or 0.0 if the bucket has no samples.

    Example:
        ```python
        points = aggregate(samples, AggregationMode.HOURLY.bucket_width)
        ```

    Args:
        series: The samples to aggregate, in any order.
        bucket_width: The width of the buckets, or `None` to keep every sample.
            Non-positive widths are replaced with `MIN_BUCKET_WIDTH`.

    Returns:
        The aggregated points, sorted by time. Empty if `series` is empty.
    """
    if not series:
        return []

    if bucket_width is None:
        ordered = sorted(series, key=lambda sample: to_epoch_us(sample.timestamp))
        return [AggregatedPoint(sample.timestamp, sample.value) for sample in ordered]

    bucket_width, error = check_bucket_width(bucket_width)
    if error is not None:
        _logger.warning("%s", error)
    width_us = bucket_width // _ONE_MICROSECOND

    times = np.fromiter(
        (to_epoch_us(sample.timestamp) for sample in series),
        dtype=np.int64,
        count=len(series),
    )
    values = np.fromiter(
        (sample.value for sample in series), dtype=np.float64, count=len(series)
    )

    start_us = (int(times.min()) // width_us) * width_us
    indices = (times - start_us) // width_us
    n_buckets = int(indices.max()) + 1

    sums = np.bincount(indices, weights=values, minlength=n_buckets)
    counts = np.bincount(indices, minlength=n_buckets)
    means = np.zeros(n_buckets, dtype=np.float64)
    np.divide(sums, counts, out=means, where=counts > 0)

    return [
        AggregatedPoint(from_epoch_us(start_us + index * width_us), float(mean))
        for index, mean in enumerate(means)
    ]
