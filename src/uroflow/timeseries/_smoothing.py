# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Centered moving average."""

import logging
from collections.abc import Sequence

import numpy as np

from .._exceptions import InvalidAggregationParamsError
from ._base_types import AggregatedPoint

_logger = logging.getLogger(__name__)


def check_window_size(
    window_size: int,
) -> tuple[int, InvalidAggregationParamsError | None]:
    """Clamp a smoothing window to 1 if it is not positive.

    Args:
        window_size: The requested window size, in points.

    Returns:
        The window size to use, and the error describing the clamping if the
            requested size was invalid.
    """
    if window_size >= 1:
        return window_size, None
    return 1, InvalidAggregationParamsError("window_size", window_size, 1)


def moving_average(
    points: Sequence[AggregatedPoint], window_size: int
) -> list[AggregatedPoint]:
    """Smooth a series with a centered moving average.

    The value of point `i` becomes the mean of the points from `i - window_size // 2`
    to `i + window_size // 2`. Near the ends of the series the window is cut short
    instead of padded, so the first and last points average fewer values.

    Timestamps are kept and the output has the same length as the input. A window
    of 1 leaves the values unchanged.

    Args:
        points: The points to smooth.
        window_size: The number of points in the window. Values below 1 are
            replaced with 1.

    Returns:
        The smoothed points.
    """
    if not points:
        return []

    window_size, error = check_window_size(window_size)
    if error is not None:
        _logger.warning("%s", error)
    half = window_size // 2

    values = np.fromiter(
        (point.value for point in points), dtype=np.float64, count=len(points)
    )
    last = len(points) - 1
    return [
        AggregatedPoint(
            point.bucket_start,
            float(values[max(0, index - half) : min(last, index + half) + 1].mean()),
        )
        for index, point in enumerate(points)
    ]
