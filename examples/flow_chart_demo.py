# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Flow chart example.

Replays a few days of generated flow-rate samples through an in-memory source and
prints every chart view the pipeline sends while the range, the aggregation mode
and the smoothing change.
"""

import asyncio
import contextlib
import logging
import random
from datetime import date, datetime, time, timedelta, timezone

from frequenz.channels import Receiver

from uroflow import ChartView, FlowChart, FlowChartConfig, InMemoryPartitionSource
from uroflow.partitions import PartitionKey
from uroflow.timeseries import AggregationMode, Sample

PATIENT_ID = "demo-patient"
DAYS = 3


def _generate_day(day: date) -> list[Sample]:
    """Generate a handful of voids spread over one day."""
    start = datetime.combine(day, time(6, 0), tzinfo=timezone.utc)
    return [
        Sample(
            start + timedelta(minutes=random.randint(0, 16 * 60)),
            round(random.uniform(5.0, 25.0), 1),
        )
        for _ in range(8)
    ]


async def _print_views(views: Receiver[ChartView]) -> None:
    async for view in views:
        status = "loading" if view.loading else "ready"
        print(
            f"[{status}] {view.settings.mode}: {view.fetched_points} samples, "
            f"{view.aggregated_points} points"
        )
        for label, value in zip(view.chart.labels, view.chart.values):
            print(f"    {label:>22}  {value:8.2f} {view.chart.unit}")


async def run() -> None:
    """Create the source and the chart, and drive the chart for a while."""
    source = InMemoryPartitionSource(name="demo-source")
    today = date.today()
    days = [today - timedelta(days=offset) for offset in range(DAYS)]
    for day in days:
        await source.set_samples(PartitionKey.from_date(day), _generate_day(day))

    config = FlowChartConfig(
        default_mode=AggregationMode.DAILY, display_timezone="UTC"
    )
    async with FlowChart(PATIENT_ID, source, config=config) as chart:
        printer = asyncio.create_task(_print_views(chart.new_chart_receiver()))
        exports = chart.new_export_receiver()

        await chart.set_range(days[-1], today)
        await asyncio.sleep(0.5)

        await chart.set_mode("hourly")
        await chart.set_smoothing(True, 3)
        await asyncio.sleep(0.5)

        # A new sample arrives for today and replaces the day's content
        key = PartitionKey.from_date(today)
        now = datetime.now(timezone.utc)
        await source.set_samples(key, [*source.samples(key), Sample(now, 30.0)])
        await asyncio.sleep(0.5)

        await chart.request_export()
        export = await exports.receive()
        print(f"\nExport {export.filename}:\n{export.to_csv()}")

        printer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await printer


def main() -> None:
    """Run the example."""
    logging.basicConfig(level=logging.INFO)
    asyncio.run(run())


if __name__ == "__main__":
    main()
