# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Turning the merged series into chart views and exports."""

from ._flow_chart import FlowChart
from ._flow_chart_actor import FlowChartActor
from ._projection import (
    DATASET_LABEL,
    EXPORT_HEADER,
    UNIT,
    ChartData,
    ExportRow,
    export_filename,
    format_label,
    iso_timestamp,
    project_chart,
    project_export,
    render_csv,
)
from ._requests import (
    ControlRequest,
    ExportResult,
    RequestExport,
    SetMode,
    SetPreset,
    SetRange,
    SetSmoothing,
)
from ._view import ChartSettings, ChartView, build_chart_view

__all__ = [
    "ChartData",
    "ChartSettings",
    "ChartView",
    "ControlRequest",
    "DATASET_LABEL",
    "EXPORT_HEADER",
    "ExportResult",
    "ExportRow",
    "FlowChart",
    "FlowChartActor",
    "RequestExport",
    "SetMode",
    "SetPreset",
    "SetRange",
    "SetSmoothing",
    "UNIT",
    "build_chart_view",
    "export_filename",
    "format_label",
    "iso_timestamp",
    "project_chart",
    "project_export",
    "render_csv",
]
