# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Turn aggregated points into chart labels and export rows."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo

from ..partitions import DateRange
from ..timeseries import AggregatedPoint, AggregationMode

DATASET_LABEL = "Volume (ml/min)"
"""The label of the flow-rate dataset."""

UNIT = "ml/min"
"""The unit of the charted values."""

EXPORT_HEADER: tuple[str, str] = ("timestamp", "value")
"""The first row of every export."""

_LABEL_FORMATS: dict[AggregationMode, str] = {
    AggregationMode.DAILY: "%Y-%m-%d",
    AggregationMode.HOURLY: "%H : %Y-%m-%d",
    AggregationMode.MIN15: "%Y-%m-%d %H:%M:%S",
    AggregationMode.RAW: "%H:%M:%S",
}


@dataclass(frozen=True)
class ChartData:
    """The data handed to a chart: one label and one value per point."""

    labels: tuple[str, ...] = ()
    """The display labels, in point order."""

    values: tuple[float, ...] = ()
    """The values, in point order."""

    dataset_label: str = DATASET_LABEL
    """The label of the dataset."""

    unit: str = UNIT
    """The unit of the values."""


ExportRow = tuple[str, str | float]
"""A row of an export: an ISO 8601 timestamp and a value, or the header."""


def format_label(
    timestamp: datetime, mode: AggregationMode, tz: tzinfo | None = None
) -> str:
    """Format the label of a point.

    Daily points show the date, hourly points the hour and the date, 15-minute
    points the full date and time, and raw points only the time of day. Naive
    timestamps are taken as UTC.

    Args:
        timestamp: The start of the point's bucket.
        mode: The aggregation mode the point was produced with.
        tz: The timezone to display the label in. If `None`, the local timezone
            is used.

    Returns:
        The label.
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(tz).strftime(_LABEL_FORMATS[mode])


def project_chart(
    points: Sequence[AggregatedPoint],
    mode: AggregationMode,
    *,
    tz: tzinfo | None = None,
) -> ChartData:
    """Build the chart data of a series of points.

    Args:
        points: The aggregated (and possibly smoothed) points.
        mode: The aggregation mode the points were produced with.
        tz: The timezone to display the labels in. If `None`, the local timezone
            is used.

    Returns:
        The labels and values, in the same order as `points`.
    """
    return ChartData(
        labels=tuple(format_label(point.bucket_start, mode, tz) for point in points),
        values=tuple(point.value for point in points),
    )


def iso_timestamp(timestamp: datetime) -> str:
    """Format a timestamp as UTC ISO 8601 with milliseconds, like `...T09:00:00.000Z`.

    Naive timestamps are taken as UTC.

    Args:
        timestamp: The timestamp to format.

    Returns:
        The formatted timestamp.
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    utc = timestamp.astimezone(timezone.utc).replace(tzinfo=None)
    return utc.isoformat(timespec="milliseconds") + "Z"


def project_export(points: Iterable[AggregatedPoint]) -> list[ExportRow]:
    """Build the rows of a tabular export of a series of points.

    Args:
        points: The aggregated (and possibly smoothed) points.

    Returns:
        The header row followed by one `(timestamp, value)` row per point. Values
            are not rounded.
    """
    rows: list[ExportRow] = [EXPORT_HEADER]
    rows.extend((iso_timestamp(point.bucket_start), point.value) for point in points)
    return rows


def render_csv(rows: Iterable[ExportRow]) -> str:
    """Render export rows as comma-separated text, one line per row.

    Floats are written with the shortest representation that reads back to the
    same value.

    Args:
        rows: The rows to render.

    Returns:
        The rows joined with newlines, without a trailing newline.
    """
    return "\n".join(",".join(str(cell) for cell in row) for row in rows)


def export_filename(patient_id: str, date_range: DateRange) -> str:
    """Suggest a file name for the export of a patient's data.

    Args:
        patient_id: The patient the data belongs to.
        date_range: The range of days the data covers.

    Returns:
        A name like `p1_flow_2024-01-01_to_2024-01-07.csv`.
    """
    return (
        f"{patient_id}_flow_{date_range.start.isoformat()}"
        f"_to_{date_range.end.isoformat()}.csv"
    )
