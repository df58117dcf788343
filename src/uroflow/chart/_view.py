# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""From the merged series to what the chart shows."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import tzinfo

from ..timeseries import (
    AggregatedPoint,
    AggregationMode,
    Sample,
    aggregate,
    moving_average,
)
from ._projection import ChartData, project_chart


@dataclass(frozen=True)
class ChartSettings:
    """How the merged series is turned into chart points."""

    mode: AggregationMode = AggregationMode.HOURLY
    """The aggregation mode."""

    smoothing_enabled: bool = False
    """Whether a moving average is applied after aggregating."""

    smoothing_window: int = 3
    """The size of the moving average window, in points."""


@dataclass(frozen=True)
class ChartView:
    """Everything the chart needs to render one state of the series."""

    chart: ChartData
    """The labels and values to plot."""

    points: tuple[AggregatedPoint, ...]
    """The points behind the chart, used for exports."""

    settings: ChartSettings
    """The settings the points were produced with."""

    fetched_points: int
    """The number of samples in the merged series."""

    loading: bool = False
    """Whether some day partitions have not delivered their content yet."""

    @property
    def aggregated_points(self) -> int:
        """The number of points in the chart."""
        return len(self.points)


def build_chart_view(
    series: Sequence[Sample],
    settings: ChartSettings,
    *,
    tz: tzinfo | None = None,
    loading: bool = False,
) -> ChartView:
    """Aggregate, smooth and project a series.

    Args:
        series: The merged sample series.
        settings: How to aggregate and smooth the series.
        tz: The timezone to display labels in. If `None`, the local timezone is
            used.
        loading: Whether some partitions are still loading.

    Returns:
        The resulting view.
    """
    points = aggregate(series, settings.mode.bucket_width)
    if settings.smoothing_enabled:
        points = moving_average(points, settings.smoothing_window)
    return ChartView(
        chart=project_chart(points, settings.mode, tz=tz),
        points=tuple(points),
        settings=settings,
        fetched_points=len(series),
        loading=loading,
    )
