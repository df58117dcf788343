# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Handling of the flow-rate time series.

The [`SeriesStore`][uroflow.timeseries.SeriesStore] merges the snapshots of all the
active day partitions into one series sorted by time. That series is then turned
into chart points by [`aggregate()`][uroflow.timeseries.aggregate], optionally
averaging the samples into fixed-width buckets, and smoothed with
[`moving_average()`][uroflow.timeseries.moving_average].

Buckets are aligned to multiples of their width since the UNIX epoch, and empty
buckets between the first and last sample are kept with a value of 0.

Example:
    ```
    samples: 09:00 -> 100, 09:30 -> 200, 10:15 -> 50
    hourly:  09:00 -> 150, 10:00 -> 50
    ```
"""

from ._base_types import UNIX_EPOCH, AggregatedPoint, Sample
from ._aggregation import (
    MIN_BUCKET_WIDTH,
    AggregationMode,
    aggregate,
    check_bucket_width,
)
from ._series_store import SeriesStore
from ._smoothing import check_window_size, moving_average

__all__ = [
    "AggregatedPoint",
    "AggregationMode",
    "MIN_BUCKET_WIDTH",
    "Sample",
    "SeriesStore",
    "UNIX_EPOCH",
    "aggregate",
    "check_bucket_width",
    "check_window_size",
    "moving_average",
]
