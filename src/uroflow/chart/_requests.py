# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Messages exchanged with the flow chart actor."""

from dataclasses import dataclass
from datetime import date

from ..partitions import DateRange, RangePreset
from ..timeseries import AggregationMode
from ._projection import ExportRow, render_csv


@dataclass(frozen=True)
class SetRange:
    """Show a custom range of days."""

    start: date
    """The first day to show."""

    end: date
    """The last day to show, inclusive."""


@dataclass(frozen=True)
class SetPreset:
    """Show the range of days of a preset."""

    preset: RangePreset
    """The preset to apply."""


@dataclass(frozen=True)
class SetMode:
    """Change the aggregation mode."""

    mode: AggregationMode
    """The new aggregation mode."""


@dataclass(frozen=True)
class SetSmoothing:
    """Turn the moving average on or off."""

    enabled: bool
    """Whether to smooth the chart."""

    window_size: int = 3
    """The size of the moving average window, in points."""


@dataclass(frozen=True)
class RequestExport:
    """Ask for an export of the points currently charted."""


ControlRequest = SetRange | SetPreset | SetMode | SetSmoothing | RequestExport
"""Any request the flow chart actor accepts."""


@dataclass(frozen=True)
class ExportResult:
    """The export of the points charted when it was requested."""

    filename: str
    """The suggested file name."""

    date_range: DateRange
    """The range of days that was shown."""

    rows: tuple[ExportRow, ...]
    """The header row followed by one row per point."""

    def to_csv(self) -> str:
        """Render the rows as comma-separated text."""
        return render_csv(self.rows)
