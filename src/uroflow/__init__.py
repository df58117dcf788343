# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Streaming chart of a patient's urine flow rate.

The samples of each calendar day are kept in their own partition. A
[`FlowChart`][uroflow.FlowChart] subscribes to every partition of the selected
range of days, merges their live content into one series, aggregates and smooths
it, and sends ready-to-plot [`ChartView`][uroflow.ChartView]s every time the
data or the settings change.

Example:
    ```python
    import asyncio
    from datetime import datetime, timezone

    from uroflow import FlowChart, InMemoryPartitionSource, PartitionKey, Sample

    async def main() -> None:
        source = InMemoryPartitionSource(name="demo")
        now = datetime.now(timezone.utc)
        await source.set_samples(PartitionKey.from_datetime(now), [Sample(now, 12.5)])

        async with FlowChart("p1", source) as chart:
            view = await chart.new_chart_receiver().receive()
            print(view.chart.labels, view.chart.values)

    asyncio.run(main())
    ```
"""

from ._exceptions import (
    FlowChartError,
    InvalidAggregationParamsError,
    InvalidRangeError,
    SubscriptionError,
)
from .chart import ChartData, ChartSettings, ChartView, ExportResult, FlowChart
from .config import FlowChartConfig, load_config
from .partitions import (
    DateRange,
    InMemoryPartitionSource,
    PartitionDataSource,
    PartitionKey,
    RangePreset,
)
from .timeseries import AggregatedPoint, AggregationMode, Sample

__version__ = "0.1.0"

__all__ = [
    "AggregatedPoint",
    "AggregationMode",
    "ChartData",
    "ChartSettings",
    "ChartView",
    "DateRange",
    "ExportResult",
    "FlowChart",
    "FlowChartConfig",
    "FlowChartError",
    "InMemoryPartitionSource",
    "InvalidAggregationParamsError",
    "InvalidRangeError",
    "PartitionDataSource",
    "PartitionKey",
    "RangePreset",
    "Sample",
    "SubscriptionError",
    "__version__",
]
