# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Tests for the chart and export projections."""

from datetime import date, datetime, timedelta, timezone

import pytest

from uroflow.chart import (
    DATASET_LABEL,
    UNIT,
    ChartData,
    export_filename,
    format_label,
    iso_timestamp,
    project_chart,
    project_export,
    render_csv,
)
from uroflow.partitions import DateRange
from uroflow.timeseries import AggregatedPoint, AggregationMode

from ..utils import DAY1, utc

_POINTS = [
    AggregatedPoint(utc(DAY1, 9), 150.0),
    AggregatedPoint(utc(DAY1, 10), 50.0),
]


@pytest.mark.parametrize(
    "mode, expected",
    [
        (AggregationMode.DAILY, "2024-01-01"),
        (AggregationMode.HOURLY, "09 : 2024-01-01"),
        (AggregationMode.MIN15, "2024-01-01 09:15:00"),
        (AggregationMode.RAW, "09:15:00"),
    ],
)
def test_label_formats(mode: AggregationMode, expected: str) -> None:
    """Test the label format of every mode."""
    assert format_label(utc(DAY1, 9, 15), mode, timezone.utc) == expected


def test_labels_use_the_display_timezone() -> None:
    """Test labels are shown in the requested timezone."""
    plus_two = timezone(timedelta(hours=2))
    assert format_label(utc(DAY1, 23), AggregationMode.HOURLY, plus_two) == (
        "01 : 2024-01-02"
    )


def test_naive_labels_are_utc() -> None:
    """Test naive timestamps are labelled as UTC, like in exports."""
    plus_two = timezone(timedelta(hours=2))
    naive = datetime(2024, 1, 1, 9, 15)
    assert format_label(naive, AggregationMode.RAW, plus_two) == "11:15:00"
    assert format_label(naive, AggregationMode.RAW, timezone.utc) == "09:15:00"
    assert format_label(naive, AggregationMode.RAW) == format_label(
        utc(DAY1, 9, 15), AggregationMode.RAW
    )


def test_chart_projection() -> None:
    """Test labels and values follow the order of the points."""
    chart = project_chart(_POINTS, AggregationMode.HOURLY, tz=timezone.utc)
    assert chart == ChartData(
        labels=("09 : 2024-01-01", "10 : 2024-01-01"),
        values=(150.0, 50.0),
    )
    assert chart.dataset_label == DATASET_LABEL == "Volume (ml/min)"
    assert chart.unit == UNIT == "ml/min"


def test_empty_projection() -> None:
    """Test no points give an empty chart and only the export header."""
    assert project_chart([], AggregationMode.RAW) == ChartData()
    assert project_export([]) == [("timestamp", "value")]


def test_iso_timestamps() -> None:
    """Test export timestamps are UTC with milliseconds."""
    assert iso_timestamp(utc(DAY1, 9)) == "2024-01-01T09:00:00.000Z"
    plus_one = timezone(timedelta(hours=1))
    assert (
        iso_timestamp(datetime(2024, 1, 1, 10, 0, 0, 250000, tzinfo=plus_one))
        == "2024-01-01T09:00:00.250Z"
    )
    assert iso_timestamp(datetime(2024, 1, 1, 9)) == "2024-01-01T09:00:00.000Z"


def test_export_rows_and_csv() -> None:
    """Test the export rows and their text rendering."""
    rows = project_export(
        [*_POINTS, AggregatedPoint(utc(DAY1, 11), 1 / 3)]
    )
    assert rows == [
        ("timestamp", "value"),
        ("2024-01-01T09:00:00.000Z", 150.0),
        ("2024-01-01T10:00:00.000Z", 50.0),
        ("2024-01-01T11:00:00.000Z", 1 / 3),
    ]
    assert render_csv(rows) == (
        "timestamp,value\n"
        "2024-01-01T09:00:00.000Z,150.0\n"
        "2024-01-01T10:00:00.000Z,50.0\n"
        "2024-01-01T11:00:00.000Z,0.3333333333333333"
    )


def test_export_filename() -> None:
    """Test the suggested export file name."""
    date_range = DateRange(date(2024, 1, 1), date(2024, 1, 7))
    assert export_filename("p1", date_range) == "p1_flow_2024-01-01_to_2024-01-07.csv"
