# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Tests for building chart views."""

from datetime import timezone

from uroflow.chart import ChartSettings, build_chart_view
from uroflow.timeseries import AggregationMode

from ..utils import DAY1, sample


def test_hourly_view() -> None:
    """Test a view holds the aggregated points and the counters."""
    series = [
        sample(DAY1, 9, 0, 100.0),
        sample(DAY1, 9, 30, 200.0),
        sample(DAY1, 10, 15, 50.0),
    ]
    view = build_chart_view(series, ChartSettings(), tz=timezone.utc)
    assert view.chart.labels == ("09 : 2024-01-01", "10 : 2024-01-01")
    assert view.chart.values == (150.0, 50.0)
    assert view.fetched_points == 3
    assert view.aggregated_points == 2
    assert view.loading is False


def test_smoothed_view() -> None:
    """Test smoothing is applied after aggregating."""
    series = [sample(DAY1, hour, 0, float(hour)) for hour in range(1, 6)]
    settings = ChartSettings(
        mode=AggregationMode.HOURLY, smoothing_enabled=True, smoothing_window=3
    )
    view = build_chart_view(series, settings, tz=timezone.utc)
    assert view.chart.values == (1.5, 2.0, 3.0, 4.0, 4.5)
    assert view.settings == settings


def test_smoothing_disabled_ignores_the_window() -> None:
    """Test the window has no effect while smoothing is off."""
    series = [sample(DAY1, hour, 0, float(hour)) for hour in range(1, 6)]
    settings = ChartSettings(mode=AggregationMode.RAW, smoothing_window=5)
    assert build_chart_view(series, settings).chart.values == (1.0, 2.0, 3.0, 4.0, 5.0)


def test_empty_view() -> None:
    """Test an empty series gives an empty view."""
    view = build_chart_view([], ChartSettings(), loading=True)
    assert view.chart.labels == ()
    assert view.points == ()
    assert view.fetched_points == 0
    assert view.loading is True
