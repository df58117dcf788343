# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Settings of the flow chart."""

import logging
import pathlib
import tomllib
import zoneinfo
from collections.abc import Mapping
from datetime import timedelta, tzinfo
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..partitions import RangePreset
from ..timeseries import AggregationMode

_logger = logging.getLogger(__name__)

CONFIG_SECTION = "flow_chart"
"""The table of the configuration files holding the flow chart settings."""


class FlowChartConfig(BaseModel):
    """Settings of the flow chart.

    Example:
        ```toml
        [flow_chart]
        default_preset = "last7"
        default_mode = "15min"
        smoothing_enabled = true
        smoothing_window = 5
        resubscribe_delay = 5.0
        display_timezone = "Europe/Berlin"
        ```
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_preset: RangePreset = RangePreset.TODAY
    """The range preset shown when the chart starts."""

    default_mode: AggregationMode = AggregationMode.HOURLY
    """The aggregation mode used when the chart starts."""

    smoothing_enabled: bool = False
    """Whether the moving average is on when the chart starts."""

    smoothing_window: int = Field(default=3, ge=1)
    """The size of the moving average window, in points."""

    resubscribe_delay: timedelta = timedelta(seconds=2)
    """How long to wait before subscribing again to a failed partition.

    Plain numbers are read as seconds.
    """

    display_timezone: str | None = None
    """The IANA name of the timezone labels are shown in, `None` for local time."""

    @field_validator("display_timezone")
    @classmethod
    def check_timezone(cls, value: str | None) -> str | None:
        """Check the timezone name is known to the system."""
        if value is not None:
            try:
                zoneinfo.ZoneInfo(value)
            except (zoneinfo.ZoneInfoNotFoundError, ValueError) as err:
                raise ValueError(f"Unknown timezone {value!r}") from err
        return value

    @property
    def tzinfo(self) -> tzinfo | None:
        """The timezone labels are shown in, `None` for local time."""
        if self.display_timezone is None:
            return None
        return zoneinfo.ZoneInfo(self.display_timezone)

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> Self:
        """Create the settings from the `[flow_chart]` table of a configuration.

        Args:
            config: The whole configuration. A missing table means all defaults.

        Returns:
            The validated settings.

        Raises:
            pydantic.ValidationError: If the table holds invalid settings.
        """
        return cls.model_validate(config.get(CONFIG_SECTION, {}))


def load_config(path: pathlib.Path | str) -> FlowChartConfig:
    """Read the flow chart settings from a TOML file.

    Args:
        path: The file to read.

    Returns:
        The validated settings.

    Raises:
        OSError: If the file can't be read.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
        pydantic.ValidationError: If the file holds invalid settings.
    """
    path = pathlib.Path(path)
    with path.open("rb") as toml_file:
        data = tomllib.load(toml_file)
    _logger.info("Read flow chart settings from %s", path)
    return FlowChartConfig.from_mapping(data)
