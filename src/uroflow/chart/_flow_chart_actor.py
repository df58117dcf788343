# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""The actor running the flow chart pipeline."""

import dataclasses
import logging
from collections.abc import Mapping
from datetime import date
from typing import Any, assert_never

import pydantic
from frequenz.channels import Broadcast, Receiver, Sender, select, selected_from

from .._exceptions import FlowChartError, InvalidRangeError
from ..actor import Actor
from ..config import FlowChartConfig
from ..partitions import (
    DateRange,
    PartitionDataSource,
    PartitionUpdate,
    RangePreset,
    SubscriptionSet,
    expand_range,
    resolve_preset,
)
from ..timeseries import SeriesStore, check_window_size
from ._projection import export_filename, project_export
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

_logger = logging.getLogger(__name__)


class FlowChartActor(Actor):  # pylint: disable=too-many-instance-attributes
    """Keeps the chart of a patient's flow rate up to date.

    The actor subscribes to one day partition per day of the selected range,
    merges their content in a [`SeriesStore`][uroflow.timeseries.SeriesStore] and,
    every time the merged series or the settings change, sends a new
    [`ChartView`][uroflow.chart.ChartView]. Views equal to the last one sent are not
    sent again.

    Control requests change the range, the aggregation mode and the smoothing, or
    ask for an export. Problems are never raised: they are logged and sent on the
    warnings channel.

    When a configuration receiver is given, the aggregation and smoothing settings
    and the display timezone follow the `[flow_chart]` table of every configuration
    received. Invalid tables are logged and ignored.
    """

    # pylint: disable-next=too-many-arguments
    def __init__(
        self,
        patient_id: str,
        source: PartitionDataSource,
        control_receiver: Receiver[ControlRequest],
        chart_sender: Sender[ChartView],
        warnings_sender: Sender[FlowChartError],
        export_sender: Sender[ExportResult],
        *,
        config: FlowChartConfig | None = None,
        config_receiver: Receiver[Mapping[str, Any]] | None = None,
        name: str | None = None,
    ) -> None:
        """Create an instance.

        Args:
            patient_id: The patient whose data is charted.
            source: Where the day partitions are read from.
            control_receiver: The requests to handle.
            chart_sender: Where to send the chart views.
            warnings_sender: Where to report problems.
            export_sender: Where to send the exports.
            config: The initial settings. If `None`, the defaults are used.
            config_receiver: Configuration updates to follow, if any.
            name: The name of the actor, used in logs.
        """
        super().__init__(name=name)
        config = config or FlowChartConfig()
        self._patient_id = patient_id
        self._control_receiver = control_receiver
        self._chart_sender = chart_sender
        self._warnings_sender = warnings_sender
        self._export_sender = export_sender
        self._config_receiver = config_receiver

        self._config = config
        self._preset = config.default_preset
        self._range = resolve_preset(
            config.default_preset, DateRange.single_day(date.today())
        )
        self._settings = ChartSettings(
            mode=config.default_mode,
            smoothing_enabled=config.smoothing_enabled,
            smoothing_window=config.smoothing_window,
        )
        self._last_view: ChartView | None = None

        self._store = SeriesStore()
        self._updates_channel = Broadcast[PartitionUpdate](
            name=f"{self.name}-partition-updates"
        )
        self._subscription_warnings_channel = Broadcast[FlowChartError](
            name=f"{self.name}-subscription-warnings"
        )
        self._updates_receiver = self._updates_channel.new_receiver(limit=1024)
        self._subscription_warnings_receiver = (
            self._subscription_warnings_channel.new_receiver()
        )
        self._subscriptions = SubscriptionSet(
            source,
            self._store,
            self._updates_channel.new_sender(),
            self._subscription_warnings_channel.new_sender(),
            resubscribe_delay=config.resubscribe_delay,
            name=f"{self.name}-subscriptions",
        )

    @property
    def date_range(self) -> DateRange:
        """The range of days currently charted."""
        return self._range

    @property
    def preset(self) -> RangePreset:
        """The preset the current range comes from."""
        return self._preset

    @property
    def settings(self) -> ChartSettings:
        """The current aggregation and smoothing settings."""
        return self._settings

    @property
    def store(self) -> SeriesStore:
        """The store holding the merged series."""
        return self._store

    @property
    def subscriptions(self) -> SubscriptionSet:
        """The subscriptions to the day partitions of the current range."""
        return self._subscriptions

    async def _run(self) -> None:
        """Subscribe to the current range and handle messages until stopped."""
        self._last_view = None
        try:
            await self._set_range(self._range)
            await self._handle_messages()
        finally:
            await self._subscriptions.stop()

    async def _handle_messages(self) -> None:
        receivers: list[Receiver[Any]] = [
            self._control_receiver,
            self._updates_receiver,
            self._subscription_warnings_receiver,
        ]
        if self._config_receiver is not None:
            receivers.append(self._config_receiver)

        async for selected in select(*receivers):
            if selected_from(selected, self._control_receiver):
                if selected.was_stopped:
                    _logger.info("%s: Control channel closed, stopping.", self)
                    return
                await self._handle_request(selected.message)
            elif selected_from(selected, self._updates_receiver):
                update = selected.message
                _logger.debug("%s: Received %s", self, update)
                await self._publish()
            elif selected_from(selected, self._subscription_warnings_receiver):
                await self._warnings_sender.send(selected.message)
                await self._publish()
            elif self._config_receiver is not None and selected_from(
                selected, self._config_receiver
            ):
                if selected.was_stopped:
                    _logger.info("%s: Config channel closed, ignoring.", self)
                    continue
                await self._update_config(selected.message)

    async def _handle_request(self, request: ControlRequest) -> None:
        match request:
            case SetRange(start, end):
                self._preset = RangePreset.CUSTOM
                await self._set_range(DateRange(start, end))
            case SetPreset(preset):
                self._preset = preset
                await self._set_range(resolve_preset(preset, self._range))
            case SetMode(mode):
                _logger.info("%s: Aggregation mode set to %s", self, mode)
                self._settings = dataclasses.replace(self._settings, mode=mode)
                await self._publish()
            case SetSmoothing(enabled, window_size):
                window_size, error = check_window_size(window_size)
                if error is not None:
                    await self._warn(error)
                self._settings = dataclasses.replace(
                    self._settings,
                    smoothing_enabled=enabled,
                    smoothing_window=window_size,
                )
                await self._publish()
            case RequestExport():
                await self._export()
            case _:
                assert_never(request)

    async def _set_range(self, date_range: DateRange) -> None:
        if not date_range.is_valid:
            await self._warn(InvalidRangeError(date_range.start, date_range.end))
        _logger.info("%s: Showing %s (%s)", self, date_range, self._preset)
        self._range = date_range
        await self._subscriptions.set_keys(expand_range(date_range))
        await self._publish()

    async def _update_config(self, config: Mapping[str, Any]) -> None:
        try:
            new_config = FlowChartConfig.from_mapping(config)
        except pydantic.ValidationError as err:
            _logger.error(
                "%s: Invalid configuration, keeping the current settings: %s",
                self,
                err,
            )
            return

        if new_config == self._config:
            return
        _logger.info("%s: Applying new configuration %s", self, new_config)
        self._config = new_config
        self._settings = ChartSettings(
            mode=new_config.default_mode,
            smoothing_enabled=new_config.smoothing_enabled,
            smoothing_window=new_config.smoothing_window,
        )
        await self._publish()

    async def _export(self) -> None:
        points = () if self._last_view is None else self._last_view.points
        result = ExportResult(
            filename=export_filename(self._patient_id, self._range),
            date_range=self._range,
            rows=tuple(project_export(points)),
        )
        _logger.info(
            "%s: Exporting %s points as %s", self, len(points), result.filename
        )
        await self._export_sender.send(result)

    async def _publish(self) -> None:
        view = build_chart_view(
            self._store.snapshot_series(),
            self._settings,
            tz=self._config.tzinfo,
            loading=self._subscriptions.loading,
        )
        if view == self._last_view:
            return
        self._last_view = view
        await self._chart_sender.send(view)

    async def _warn(self, error: FlowChartError) -> None:
        _logger.warning("%s: %s", self, error)
        await self._warnings_sender.send(error)
