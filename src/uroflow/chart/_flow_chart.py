# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""The interface to a patient's flow chart."""

from collections.abc import Mapping
from datetime import date
from types import TracebackType
from typing import Any, Self

from frequenz.channels import Broadcast, Receiver

from .._exceptions import FlowChartError
from ..config import FlowChartConfig
from ..partitions import DateRange, PartitionDataSource, RangePreset
from ..timeseries import AggregationMode
from ._flow_chart_actor import FlowChartActor
from ._requests import (
    ControlRequest,
    ExportResult,
    RequestExport,
    SetMode,
    SetPreset,
    SetRange,
    SetSmoothing,
)
from ._view import ChartView


class FlowChart:
    """The chart of a patient's flow rate over a range of days.

    This owns the channels to talk to a
    [`FlowChartActor`][uroflow.chart.FlowChartActor] and the actor itself. The
    control methods only queue a request: their effect shows up later, in the views
    sent to the receivers from
    [`new_chart_receiver()`][uroflow.chart.FlowChart.new_chart_receiver].

    Example:
        ```python
        source = InMemoryPartitionSource(name="demo")
        async with FlowChart("p1", source) as chart:
            views = chart.new_chart_receiver()
            await chart.set_mode("15min")
            async for view in views:
                print(view.chart.labels, view.chart.values)
        ```
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        patient_id: str,
        source: PartitionDataSource,
        *,
        config: FlowChartConfig | None = None,
        config_receiver: Receiver[Mapping[str, Any]] | None = None,
        name: str | None = None,
    ) -> None:
        """Create the chart without starting it.

        Args:
            patient_id: The patient whose data is charted.
            source: Where the day partitions are read from.
            config: The initial settings. If `None`, the defaults are used.
            config_receiver: Configuration updates to follow, if any.
            name: The name of the chart, used in logs. If `None`, the patient ID is
                used.
        """
        name = name or f"flow-chart-{patient_id}"
        self._patient_id = patient_id
        self._control_channel = Broadcast[ControlRequest](name=f"{name}-control")
        self._chart_channel = Broadcast[ChartView](
            name=f"{name}-views", resend_latest=True
        )
        self._warnings_channel = Broadcast[FlowChartError](name=f"{name}-warnings")
        self._export_channel = Broadcast[ExportResult](name=f"{name}-exports")
        self._control_sender = self._control_channel.new_sender()
        self._actor = FlowChartActor(
            patient_id,
            source,
            self._control_channel.new_receiver(limit=256),
            self._chart_channel.new_sender(),
            self._warnings_channel.new_sender(),
            self._export_channel.new_sender(),
            config=config,
            config_receiver=config_receiver,
            name=name,
        )

    @property
    def patient_id(self) -> str:
        """The patient whose data is charted."""
        return self._patient_id

    @property
    def actor(self) -> FlowChartActor:
        """The actor running the pipeline."""
        return self._actor

    @property
    def date_range(self) -> DateRange:
        """The range of days currently charted."""
        return self._actor.date_range

    @property
    def is_running(self) -> bool:
        """Whether the pipeline is running."""
        return self._actor.is_running

    def start(self) -> None:
        """Start the pipeline."""
        self._actor.start()

    async def stop(self) -> None:
        """Stop the pipeline and close all the subscriptions."""
        await self._actor.stop()

    async def __aenter__(self) -> Self:
        """Start the pipeline.

        Returns:
            This chart.
        """
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Stop the pipeline.

        Args:
            exc_type: The type of the exception raised, if any.
            exc_val: The exception raised, if any.
            exc_tb: The traceback of the exception raised, if any.
        """
        await self.stop()

    async def set_range(self, start: date, end: date) -> None:
        """Chart a custom range of days.

        A range ending before it starts charts nothing and is reported as an
        [`InvalidRangeError`][uroflow.InvalidRangeError].

        Args:
            start: The first day.
            end: The last day, inclusive.
        """
        await self._control_sender.send(SetRange(start, end))

    async def set_preset(self, preset: RangePreset | str) -> None:
        """Chart the range of days of a preset.

        Args:
            preset: The preset, or its name.

        Raises:
            ValueError: If `preset` is not the name of a preset.
        """
        await self._control_sender.send(SetPreset(RangePreset(preset)))

    async def set_mode(self, mode: AggregationMode | str) -> None:
        """Change the aggregation mode.

        Args:
            mode: The mode, or its name.

        Raises:
            ValueError: If `mode` is not the name of a mode.
        """
        await self._control_sender.send(SetMode(AggregationMode(mode)))

    async def set_smoothing(self, enabled: bool, window_size: int = 3) -> None:
        """Turn the moving average on or off.

        Args:
            enabled: Whether to smooth the chart.
            window_size: The size of the window, in points. Values below 1 are
                replaced with 1 and reported.
        """
        await self._control_sender.send(SetSmoothing(enabled, window_size))

    async def request_export(self) -> None:
        """Ask for an export of the points currently charted.

        The result is sent to the receivers from
        [`new_export_receiver()`][uroflow.chart.FlowChart.new_export_receiver].
        """
        await self._control_sender.send(RequestExport())

    def new_chart_receiver(self) -> Receiver[ChartView]:
        """Create a receiver of the chart views.

        The last view sent is delivered right away.

        Returns:
            The new receiver.
        """
        return self._chart_channel.new_receiver()

    def new_warnings_receiver(self) -> Receiver[FlowChartError]:
        """Create a receiver of the problems the pipeline ran into.

        Returns:
            The new receiver.
        """
        return self._warnings_channel.new_receiver(limit=64)

    def new_export_receiver(self) -> Receiver[ExportResult]:
        """Create a receiver of the exports.

        Returns:
            The new receiver.
        """
        return self._export_channel.new_receiver()

    def __repr__(self) -> str:
        """Return a string representation of this chart."""
        return f"FlowChart(patient_id={self._patient_id!r}, actor={self._actor!r})"
